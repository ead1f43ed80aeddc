import pytest

from taps.models import db, AuditLog
from taps.workflow import Department, NotificationReason


def _set(request, **fields):
    for key, value in fields.items():
        setattr(request, key, value)
    db.session.commit()


# =============================================================================
# Queue notifications
# =============================================================================

def test_queue_notification_renders_department_template(workflow, channel, department_emails, make_request):
    request = make_request(requestor='Jane Doe', student_id='S42', request_id='ABC123')

    result = workflow.notify_department_queue(request, 'LIBRARY')

    assert result.success
    assert result.reason == NotificationReason.SENT
    [message] = channel.sent
    assert message['to'] == 'library@example.edu'
    assert message['subject'] == 'Library Department Review Pending - ABC123'
    assert 'submitted by Jane Doe S42' in message['text_body']


def test_queue_notification_uses_configured_template(workflow, channel, configure, make_request):
    configure(bursar_email='bursar@example.edu',
              bursar_queue_subject='Bursar check {{STUDENT_ID}}',
              bursar_queue_template='Please clear {{STUDENT_NAME}} ({{PROGRAM}})')
    request = make_request(student_id='S9', requestor='Ana', program='BA History')

    workflow.notify_department_queue(request, Department.BURSAR)

    assert channel.sent[0]['subject'] == 'Bursar check S9'
    assert channel.sent[0]['text_body'] == 'Please clear Ana (BA History)'


def test_queue_notification_without_recipient_is_not_configured(workflow, channel, make_request):
    result = workflow.notify_department_queue(make_request(), Department.ACADEMIC)

    assert not result.success
    assert result.reason == NotificationReason.NOT_CONFIGURED
    assert channel.sent == []


def test_queue_notification_makes_a_single_attempt_on_transport_failure(workflow, channel,
                                                                       department_emails, make_request):
    channel.fail = True

    result = workflow.notify_department_queue(make_request(), Department.LIBRARY)

    assert not result.success
    assert len(channel.sent) == 1


def test_channel_exception_becomes_failed_result(workflow, channel, department_emails, make_request):
    channel.error = ConnectionError('network down')

    result = workflow.notify_department_queue(make_request(), Department.LIBRARY)

    assert not result.success
    assert result.reason == NotificationReason.FAILED
    assert 'network down' in result.message


# =============================================================================
# Academic join barrier
# =============================================================================

def test_academic_notified_once_after_library_and_bursar_both_act(workflow, channel, department_emails,
                                                                 make_request, audit_actions):
    request = make_request()

    assert workflow.check_and_notify_academic(request).reason == NotificationReason.NOT_READY

    _set(request, library_status='Approved')
    assert workflow.check_and_notify_academic(request).reason == NotificationReason.NOT_READY
    assert channel.sent_to('academic@example.edu') == []

    _set(request, bursar_status='Awaiting Payment')
    result = workflow.check_and_notify_academic(request)
    assert result.success
    assert len(channel.sent_to('academic@example.edu')) == 1
    assert audit_actions(request.id) == ['ACADEMIC_QUEUE_NOTIFICATION_SENT']

    again = workflow.check_and_notify_academic(request)
    assert not again.success
    assert again.reason == NotificationReason.NOT_READY
    assert len(channel.sent_to('academic@example.edu')) == 1


def test_academic_notification_records_upstream_statuses(workflow, department_emails, make_request):
    request = make_request(library_status='Hold', bursar_status='APPROVED')

    workflow.check_and_notify_academic(request)

    event = AuditLog.query.filter_by(action='ACADEMIC_QUEUE_NOTIFICATION_SENT').one()
    assert event.details_dict == {'libraryStatus': 'Hold', 'bursarStatus': 'APPROVED'}


def test_academic_not_notified_once_academic_has_decided(workflow, channel, department_emails, make_request):
    request = make_request(library_status='Approved', bursar_status='Approved', academic_status='Completed')

    assert workflow.check_and_notify_academic(request).reason == NotificationReason.NOT_READY
    assert channel.sent == []


def test_failed_academic_send_is_not_journaled_and_can_retry(workflow, channel, department_emails,
                                                             make_request, audit_actions):
    request = make_request(library_status='Approved', bursar_status='Approved')
    channel.fail = True

    assert not workflow.check_and_notify_academic(request).success
    assert audit_actions() == []

    channel.fail = False
    assert workflow.check_and_notify_academic(request).success


def test_audit_write_failure_does_not_undo_send(workflow, channel, department_emails, make_request, monkeypatch):
    request = make_request(library_status='Approved', bursar_status='Approved')

    def broken_append(*_args, **_kwargs):
        raise RuntimeError('audit store offline')

    monkeypatch.setattr(workflow.audit, 'append', broken_append)

    result = workflow.check_and_notify_academic(request)

    assert result.success
    assert len(channel.sent) == 1


# =============================================================================
# Status-change notifications
# =============================================================================

def test_bursar_change_without_transition_is_a_no_op(workflow, channel, department_emails, make_request):
    result = workflow.send_bursar_status_change_notification(make_request(), 'PENDING', 'PENDING')

    assert not result.success
    assert result.reason == NotificationReason.NO_CHANGE
    assert channel.sent == []


def test_library_to_bursar_only_fires_when_library_first_decides(workflow, channel, department_emails,
                                                                 make_request):
    request = make_request(library_dept_due_amount='12.50')

    later = workflow.send_library_status_change_notification(request, 'APPROVED', 'Awaiting Payment')
    assert not later.success
    assert channel.sent == []

    first = workflow.send_library_status_change_notification(request, 'PENDING', 'Approved')
    assert first.success
    [message] = channel.sent
    assert message['to'] == 'bursar@example.edu'
    assert message['subject'] == f'Library Status Update - Request {request.display_id}'
    assert 'Library Dept Due Amount: 12.50' in message['text_body']
    assert 'Please review and update the Bursar status accordingly.' in message['text_body']


def test_library_back_to_pending_does_not_notify_bursar(workflow, channel, department_emails, make_request):
    result = workflow.send_library_status_change_notification(make_request(), 'PENDING', 'Pending')

    assert not result.success
    assert channel.sent == []


@pytest.mark.parametrize('method, kind', [
    ('send_bursar_status_change_notification', 'BURSAR_TO_TAPS'),
    ('send_library_status_change_to_taps', 'LIBRARY_TO_TAPS'),
    ('send_academic_status_change_to_taps', 'ACADEMIC_TO_TAPS'),
    ('send_request_status_change_to_taps', 'REQUEST_TO_TAPS'),
])
def test_taps_notifications_fire_on_any_change_and_are_journaled(workflow, channel, department_emails,
                                                                  make_request, audit_actions, method, kind):
    request = make_request()

    result = getattr(workflow, method)(request, 'Approved', 'Hold')

    assert result.success
    assert channel.sent[0]['to'] == 'taps@example.edu'
    assert 'Previous Status: Approved' in channel.sent[0]['text_body']
    assert audit_actions(request.id) == [f'{kind}_STATUS_CHANGE_NOTIFICATION_SENT']


def test_taps_notifications_need_the_taps_address(workflow, channel, configure, make_request):
    configure(library_email='library@example.edu')

    result = workflow.send_request_status_change_to_taps(make_request(), 'PENDING', 'COMPLETED')

    assert result.reason == NotificationReason.NOT_CONFIGURED
    assert channel.sent == []


def test_academic_completed_goes_to_processor(workflow, channel, department_emails, make_request):
    request = make_request(request_id='XYZ999', student_id='S7')

    result = workflow.send_academic_completed_notification(request)

    assert result.success
    assert channel.sent[0]['to'] == 'taps@example.edu'
    assert channel.sent[0]['subject'] == 'Transcript Request for Academic Verification Completed - XYZ999'
    assert 'XYZ999 - S7 has been verified' in channel.sent[0]['text_body']


# =============================================================================
# Disabled alerts
# =============================================================================

def test_disabled_alerts_short_circuit_everything(workflow, channel, department_emails, configure,
                                                  make_request):
    configure(enable_alerts=False, enable_reminder_library=True, enable_reminder_bursar=True,
              enable_reminder_academic=True)
    request = make_request(age_hours=500, library_status='Approved', bursar_status='Approved')

    results = [
        workflow.notify_department_queue(request, Department.LIBRARY),
        workflow.check_and_notify_academic(request),
        workflow.send_reminder_sweep(),
        workflow.send_library_status_change_notification(request, 'PENDING', 'Approved'),
        workflow.send_bursar_status_change_notification(request, 'PENDING', 'Approved'),
        workflow.send_library_status_change_to_taps(request, 'PENDING', 'Approved'),
        workflow.send_academic_status_change_to_taps(request, 'PENDING', 'Completed'),
        workflow.send_request_status_change_to_taps(request, 'PENDING', 'COMPLETED'),
        workflow.send_academic_completed_notification(request),
        workflow.send_academic_correction_notification(request),
    ]

    assert all(not result.success for result in results)
    assert channel.sent == []
    assert AuditLog.query.count() == 0


# =============================================================================
# Handler entry points
# =============================================================================

def test_handle_request_updated_runs_transitions_and_gate(workflow, channel, department_emails, make_request):
    request = make_request(library_status='Approved')
    before = request.status_snapshot()
    _set(request, bursar_status='Awaiting Payment')

    results = workflow.handle_request_updated(request, before)

    assert set(results) == {'bursar_to_taps', 'academic_queue'}
    assert results['academic_queue'].success
    assert {m['to'] for m in channel.sent} == {'taps@example.edu', 'academic@example.edu'}


def test_handle_request_updated_routes_academic_verdicts(workflow, channel, department_emails, make_request):
    request = make_request(library_status='Approved', bursar_status='Approved')
    before = request.status_snapshot()
    _set(request, academic_status='Outstanding')

    results = workflow.handle_request_updated(request, before)

    assert set(results) == {'academic_to_taps', 'academic_correction'}
    assert results['academic_correction'].success


def test_handle_request_created_queues_library_and_bursar(workflow, channel, department_emails,
                                                          make_request, audit_actions):
    request = make_request()

    results = workflow.handle_request_created(request)

    assert results['library_queue'].success and results['bursar_queue'].success
    assert sorted(m['to'] for m in channel.sent) == ['bursar@example.edu', 'library@example.edu']
    assert audit_actions(request.id) == ['LIBRARY_QUEUE_NOTIFICATION_SENT', 'BURSAR_QUEUE_NOTIFICATION_SENT']
