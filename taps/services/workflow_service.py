"""
Workflow notification service

Decides which department notifications are due for a transcript request and
sends them. Library and Bursar review in parallel; Academic is only notified
once both have produced a verdict (the join barrier). Reminder sweeps use the
audit trail as an idempotency ledger so they can run as often as the
scheduler likes without duplicate mail.

Every public operation returns a NotificationResult and never raises: a
notification failure must not block the status change that triggered it.
"""

import functools
import logging
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional

from taps.models import utcnow
from taps.services.audit_service import AuditTrail
from taps.services.request_store import RequestStore
from taps.services.settings_service import NotificationSettings, SettingsProvider
from taps.templates.email_templates import (
    get_plain_email_template, get_status_update_template, get_status_update_text
)
from taps.utils.templates import replace_template_variables, template_data
from taps.workflow.results import (
    ACADEMIC_QUEUE_NOTIFICATION_SENT, REMINDER_ACTIONS,
    NotificationReason, NotificationResult,
    queue_notification_action, status_change_action
)
from taps.workflow.status import (
    ACADEMIC_COMPLETED_VERDICTS, ACADEMIC_CORRECTION_VERDICTS,
    Decided, Department, Pending, normalize, parse_status, status_of, upstream_cleared
)

logger = logging.getLogger(__name__)

REMINDER_SUPPRESSION_HOURS = 24


def guarded(description: str):
    """Convert unexpected errors into a failed NotificationResult"""
    def decorator(func):
        @functools.wraps(func)
        def wrapper(self, *args, **kwargs):
            try:
                return func(self, *args, **kwargs)
            except Exception as e:
                logger.exception("Error %s", description)
                return NotificationResult.failed(str(e))
        return wrapper
    return decorator


class WorkflowService:
    """Gating engine for department queue, reminder and status notifications"""

    def __init__(self, channel, settings: SettingsProvider, audit: Optional[AuditTrail] = None,
                 store: Optional[RequestStore] = None,
                 clock: Callable[[], datetime] = utcnow,
                 suppression_hours: int = REMINDER_SUPPRESSION_HOURS):
        self.channel = channel
        self.settings = settings
        self.audit = audit or AuditTrail()
        self.store = store or RequestStore()
        self.clock = clock
        self.suppression_hours = suppression_hours

    # ------------------------------------------------------------------
    # Queue notifications
    # ------------------------------------------------------------------

    @guarded("sending department queue notification")
    def notify_department_queue(self, request, department) -> NotificationResult:
        """
        Send the queue notification for one department

        Exactly one send attempt, no retry. The caller decides whether to
        journal the outcome.
        """
        department = Department.parse(department)
        settings = self.settings.get()

        if not settings.enable_alerts:
            logger.info("%s queue notification skipped: alerts disabled", department.label)
            return NotificationResult.skipped(NotificationReason.DISABLED, 'Email alerts are disabled')

        recipient = settings.recipient(department)
        if not recipient:
            logger.info("%s queue notification skipped: email not configured", department.label)
            return NotificationResult.skipped(NotificationReason.NOT_CONFIGURED,
                                              f'{department.label} email not configured')

        subject, body = settings.template(f'{department.value.lower()}_queue')
        return self._send_rendered(recipient, subject, body, request)

    @guarded("checking Academic notification")
    def check_and_notify_academic(self, request) -> NotificationResult:
        """
        Notify the Academic queue once Library and Bursar have both acted

        Fires only when both upstream departments are Decided, Academic is
        still Pending, and no ACADEMIC_QUEUE_NOTIFICATION_SENT exists yet.
        """
        not_ready = NotificationResult.skipped(NotificationReason.NOT_READY,
                                               'Not ready for Academic notification')

        if not upstream_cleared(request):
            return not_ready
        if status_of(request, Department.ACADEMIC).is_decided:
            return not_ready
        if self.audit.exists(request.id, ACADEMIC_QUEUE_NOTIFICATION_SENT):
            return not_ready

        result = self.notify_department_queue(request, Department.ACADEMIC)
        if result.success:
            self._journal(ACADEMIC_QUEUE_NOTIFICATION_SENT, request, {
                'libraryStatus': request.library_status,
                'bursarStatus': request.bursar_status,
            })
            logger.info("Academic notification sent for request %s", request.display_id)
        return result

    # ------------------------------------------------------------------
    # Reminder sweep
    # ------------------------------------------------------------------

    @guarded("sending reminder emails")
    def send_reminder_sweep(self) -> NotificationResult:
        """
        Re-notify departments that have not acted within their interval

        Library/Bursar reminders count from request creation. Academic
        reminders count from the first Academic queue notification. Each
        department is reminded at most once per suppression window.
        """
        settings = self.settings.get()
        if not settings.enable_reminders:
            logger.info("Reminder sweep skipped: reminders disabled")
            return NotificationResult.skipped(NotificationReason.DISABLED, 'Reminders disabled')
        if not settings.enable_alerts:
            logger.info("Reminder sweep skipped: alerts disabled")
            return NotificationResult.skipped(NotificationReason.DISABLED, 'Email alerts are disabled')

        now = self.clock()
        sent = {department.value: 0 for department in Department}

        for department in (Department.LIBRARY, Department.BURSAR):
            if not self._reminders_active(settings, department):
                continue
            hours = settings.reminder_hours(department)
            cutoff = now - timedelta(hours=hours)
            for request in self.store.pending_for(department, cutoff):
                if self._remind(request, department, hours, now):
                    sent[department.value] += 1

        if self._reminders_active(settings, Department.ACADEMIC):
            hours = settings.reminder_hours(Department.ACADEMIC)
            cutoff = now - timedelta(hours=hours)
            for request in self.store.awaiting_academic():
                if not self._academic_reminder_due(request, cutoff):
                    continue
                if self._remind(request, Department.ACADEMIC, hours, now):
                    sent[Department.ACADEMIC.value] += 1

        logger.info("Reminders processed: %s", sent)
        return NotificationResult(True, 'Reminders processed', NotificationReason.PROCESSED,
                                  {'sent': sent})

    def _reminders_active(self, settings: NotificationSettings, department: Department) -> bool:
        return settings.reminder_enabled(department) and bool(settings.recipient(department))

    def _academic_reminder_due(self, request, cutoff: datetime) -> bool:
        if not upstream_cleared(request) or status_of(request, Department.ACADEMIC).is_decided:
            return False
        notified = self.audit.find_latest(request.id, ACADEMIC_QUEUE_NOTIFICATION_SENT)
        return notified is not None and notified.timestamp <= cutoff

    def _remind(self, request, department: Department, hours: int, now: datetime) -> bool:
        action = REMINDER_ACTIONS[department]
        try:
            if self.audit.exists_within(request.id, action, self.suppression_hours, now):
                return False
            result = self.notify_department_queue(request, department)
        except Exception:
            logger.exception("Error checking %s reminder for request %s",
                             department.label, request.display_id)
            return False

        if not result.success:
            logger.warning("%s reminder for request %s not sent: %s",
                           department.label, request.display_id, result.message)
            return False

        self._journal(action, request, {'reminderHours': hours}, timestamp=now)
        logger.info("Reminder sent to %s for request %s", department.label, request.display_id)
        return True

    # ------------------------------------------------------------------
    # Status-change notifications
    # ------------------------------------------------------------------

    @guarded("sending Library status change notification")
    def send_library_status_change_notification(self, request, old_status, new_status) -> NotificationResult:
        """Tell Bursar that Library has just finished (Pending -> verdict only)"""
        settings = self.settings.get()
        skipped = self._alerts_unavailable(settings, settings.bursar_email, 'Bursar email not configured')
        if skipped:
            return skipped

        if old_status == new_status:
            return NotificationResult.skipped(NotificationReason.NO_CHANGE, 'No status change detected')
        if not (isinstance(parse_status(Department.LIBRARY, old_status), Pending)
                and isinstance(parse_status(Department.LIBRARY, new_status), Decided)):
            return NotificationResult.skipped(NotificationReason.NO_CHANGE, 'No notification needed')

        fields = self._change_fields(request, old_status, new_status) + _optional_fields(
            ('Library Dept Due Amount', request.library_dept_due_amount),
            ('Library Dept Due Details', request.library_dept_due_details),
        )
        return self._send_status_change(
            'LIBRARY_TO_BURSAR', request, old_status, new_status, settings.bursar_email,
            title='Library Status Update',
            greeting='Dear Bursar Department,',
            summary=f'Library has updated the status for transcript request {request.display_id}.',
            fields=fields,
            closing='Please review and update the Bursar status accordingly.',
        )

    @guarded("sending Bursar status change notification")
    def send_bursar_status_change_notification(self, request, old_status, new_status) -> NotificationResult:
        """Tell the TAPS mailbox about any Bursar status change"""
        fields = self._change_fields(request, old_status, new_status) + _optional_fields(
            ('Office of Bursar Due Amount', request.office_of_bursar_due_amount),
            ('Office of Bursar Due Details', request.office_of_bursar_due_details),
        )
        return self._send_to_taps('BURSAR', request, old_status, new_status, 'Bursar Status Update',
                                  f'Bursar has updated the status for transcript request {request.display_id}.',
                                  fields)

    @guarded("sending Library status change notification to TAPS")
    def send_library_status_change_to_taps(self, request, old_status, new_status) -> NotificationResult:
        fields = self._change_fields(request, old_status, new_status) + _optional_fields(
            ('Library Dept Due Amount', request.library_dept_due_amount),
            ('Library Dept Due Details', request.library_dept_due_details),
        )
        return self._send_to_taps('LIBRARY', request, old_status, new_status, 'Library Status Update',
                                  f'Library has updated the status for transcript request {request.display_id}.',
                                  fields)

    @guarded("sending Academic status change notification to TAPS")
    def send_academic_status_change_to_taps(self, request, old_status, new_status) -> NotificationResult:
        return self._send_to_taps('ACADEMIC', request, old_status, new_status, 'Academic Status Update',
                                  'Academic department has updated the status for transcript request '
                                  f'{request.display_id}.',
                                  self._change_fields(request, old_status, new_status))

    @guarded("sending Request status change notification to TAPS")
    def send_request_status_change_to_taps(self, request, old_status, new_status) -> NotificationResult:
        return self._send_to_taps('REQUEST', request, old_status, new_status, 'Request Status Update',
                                  f'The status has been updated for transcript request {request.display_id}.',
                                  self._change_fields(request, old_status, new_status))

    def _send_to_taps(self, kind, request, old_status, new_status, title, summary, fields):
        settings = self.settings.get()
        skipped = self._alerts_unavailable(settings, settings.email_account, 'TAPS email not configured')
        if skipped:
            return skipped
        if old_status == new_status:
            return NotificationResult.skipped(NotificationReason.NO_CHANGE, 'No status change detected')
        return self._send_status_change(
            f'{kind}_TO_TAPS', request, old_status, new_status, settings.email_account,
            title=title, greeting='Dear TAPS System Administrator,', summary=summary, fields=fields,
        )

    def _send_status_change(self, kind, request, old_status, new_status, recipient, title,
                            greeting, summary, fields, closing=''):
        subject = f'{title} - Request {request.display_id}'
        result = self._deliver(
            recipient, subject,
            get_status_update_template(title, greeting, summary, fields, closing),
            get_status_update_text(greeting, summary, fields, closing),
        )
        if result.success:
            self._journal(status_change_action(kind), request, {'old': old_status, 'new': new_status})
        return result

    @staticmethod
    def _change_fields(request, old_status, new_status):
        return [
            ('Student', request.requestor or 'N/A'),
            ('Student ID', request.student_id or 'N/A'),
            ('Previous Status', old_status or 'N/A'),
            ('New Status', new_status or 'N/A'),
        ]

    # ------------------------------------------------------------------
    # Transcript processor notifications
    # ------------------------------------------------------------------

    @guarded("sending Academic completed notification")
    def send_academic_completed_notification(self, request) -> NotificationResult:
        return self._notify_processor('academic_completed', request)

    @guarded("sending Academic correction notification")
    def send_academic_correction_notification(self, request) -> NotificationResult:
        return self._notify_processor('academic_correction', request)

    def _notify_processor(self, key: str, request) -> NotificationResult:
        settings = self.settings.get()
        skipped = self._alerts_unavailable(settings, settings.email_account, 'TAPS email not configured')
        if skipped:
            return skipped
        subject, body = settings.template(key)
        result = self._send_rendered(settings.email_account, subject, body, request)
        if result.success:
            self._journal(f'{key.upper()}_NOTIFICATION_SENT', request, {
                'academicStatus': request.academic_status,
            })
        return result

    # ------------------------------------------------------------------
    # Handler entry points
    # ------------------------------------------------------------------

    def handle_request_created(self, request) -> Dict[str, NotificationResult]:
        """Queue Library and Bursar for a new request"""
        results = {}
        for department in (Department.LIBRARY, Department.BURSAR):
            result = self.notify_department_queue(request, department)
            if result.success:
                self._journal(queue_notification_action(department), request, {})
            results[department.value.lower() + '_queue'] = result
        return results

    def handle_request_updated(self, request, before: Dict[str, Optional[str]]) -> Dict[str, NotificationResult]:
        """
        Fire notifications for the transitions between a snapshot and the
        request's current statuses

        Args:
            request: The request after the write
            before: request.status_snapshot() taken before the write

        Returns:
            Results keyed by notification name, only for notifications attempted
        """
        results = {}
        old_library, new_library = before.get('library_status'), request.library_status
        old_bursar, new_bursar = before.get('bursar_status'), request.bursar_status
        old_academic, new_academic = before.get('academic_status'), request.academic_status
        old_status, new_status = before.get('status'), request.status

        if old_library != new_library:
            results['library_to_bursar'] = self.send_library_status_change_notification(
                request, old_library, new_library)
            results['library_to_taps'] = self.send_library_status_change_to_taps(
                request, old_library, new_library)

        if old_bursar != new_bursar:
            results['bursar_to_taps'] = self.send_bursar_status_change_notification(
                request, old_bursar, new_bursar)

        if old_library != new_library or old_bursar != new_bursar:
            results['academic_queue'] = self.check_and_notify_academic(request)

        if old_academic != new_academic:
            results['academic_to_taps'] = self.send_academic_status_change_to_taps(
                request, old_academic, new_academic)
            verdict = normalize(new_academic)
            if verdict in ACADEMIC_COMPLETED_VERDICTS:
                results['academic_completed'] = self.send_academic_completed_notification(request)
            elif verdict in ACADEMIC_CORRECTION_VERDICTS:
                results['academic_correction'] = self.send_academic_correction_notification(request)

        if old_status != new_status:
            results['request_to_taps'] = self.send_request_status_change_to_taps(
                request, old_status, new_status)

        for name, result in results.items():
            logger.debug("Notification %s for request %s: %s", name, request.display_id, result.message)
        return results

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _alerts_unavailable(settings: NotificationSettings, recipient: Optional[str],
                            missing_message: str) -> Optional[NotificationResult]:
        if not settings.enable_alerts:
            logger.info("Notification skipped: alerts disabled")
            return NotificationResult.skipped(NotificationReason.DISABLED, 'Email alerts are disabled')
        if not recipient:
            logger.info("Notification skipped: %s", missing_message)
            return NotificationResult.skipped(NotificationReason.NOT_CONFIGURED, missing_message)
        return None

    def _send_rendered(self, recipient: str, subject_template: str, body_template: str,
                       request) -> NotificationResult:
        data = template_data(request)
        subject = replace_template_variables(subject_template, data)
        body = replace_template_variables(body_template, data)
        return self._deliver(recipient, subject, get_plain_email_template(body), body)

    def _deliver(self, recipient, subject, html_body, text_body) -> NotificationResult:
        result = self.channel.send(recipient, subject, html_body, text_body)
        if isinstance(result, dict):
            result = NotificationResult(bool(result.get('success')), result.get('message', ''),
                                        NotificationReason.SENT if result.get('success')
                                        else NotificationReason.FAILED)
        return result

    def _journal(self, action: str, request, details: dict, timestamp: Optional[datetime] = None) -> None:
        try:
            self.audit.append(action, details, request_id=request.id,
                              timestamp=timestamp or self.clock())
        except Exception:
            logger.exception("Failed to journal %s for request %s", action, request.display_id)


def _optional_fields(*pairs):
    return [(label, value) for label, value in pairs if value]
