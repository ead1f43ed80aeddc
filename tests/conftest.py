"""
Test configuration and fixtures.

Provides:
- Flask app on in-memory SQLite with a recording notification channel
- A controllable clock shared by the workflow service and test data
- Factories for transcript requests and notification settings
"""
from datetime import timedelta

import pytest

from taps import create_app
from taps.models import db, utcnow, AuditLog, TranscriptRequest
from taps.services import get_workflow
from taps.workflow.results import NotificationResult


class RecordingChannel:
    """Notification channel double that records every send"""

    def __init__(self):
        self.sent = []
        self.fail = False
        self.error = None

    def send(self, to, subject, html_body, text_body=None):
        if self.error is not None:
            raise self.error
        self.sent.append({'to': to, 'subject': subject, 'html_body': html_body, 'text_body': text_body})
        if self.fail:
            return NotificationResult.failed('SMTP rejected message')
        return NotificationResult.sent()

    def sent_to(self, address):
        return [message for message in self.sent if message['to'] == address]


class FakeClock:
    def __init__(self):
        self.now = utcnow().replace(microsecond=0)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture
def channel():
    return RecordingChannel()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def app(channel, clock):
    app = create_app('testing', channel=channel, clock=clock)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def workflow(app):
    return get_workflow()


@pytest.fixture
def configure(workflow):
    """Write notification settings (and invalidate the cache)"""
    def _configure(**values):
        return workflow.settings.update(values)
    return _configure


@pytest.fixture
def department_emails(configure):
    configure(
        email_account='taps@example.edu',
        library_email='library@example.edu',
        bursar_email='bursar@example.edu',
        academic_email='academic@example.edu',
    )


@pytest.fixture
def make_request(app, clock):
    """Create a transcript request, optionally backdated"""
    counter = {'n': 0}

    def _make(age_hours=0, **fields):
        counter['n'] += 1
        values = {
            'request_id': f"TR{counter['n']:04d}",
            'student_id': f"S{1000 + counter['n']}",
            'student_email': f"student{counter['n']}@example.edu",
            'requestor': 'Jane Doe',
            'program': 'BSc Computer Science',
            'status': 'PENDING',
            'library_status': 'PENDING',
            'bursar_status': 'PENDING',
            'academic_status': 'PENDING',
            'created': clock() - timedelta(hours=age_hours),
        }
        values.update(fields)
        request = TranscriptRequest(**values)
        db.session.add(request)
        db.session.commit()
        return request

    return _make


@pytest.fixture
def audit_actions(app):
    """List of audit actions recorded so far, optionally for one request"""
    def _actions(request_id=None):
        query = AuditLog.query
        if request_id:
            query = query.filter_by(request_id=request_id)
        return [entry.action for entry in query.order_by(AuditLog.id).all()]
    return _actions
