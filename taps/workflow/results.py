"""
Notification outcomes and the audit action vocabulary
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict

from taps.workflow.status import Department


class NotificationReason(str, Enum):
    SENT = 'SENT'
    PROCESSED = 'PROCESSED'
    DISABLED = 'DISABLED'
    NOT_CONFIGURED = 'NOT_CONFIGURED'
    NOT_READY = 'NOT_READY'
    NO_CHANGE = 'NO_CHANGE'
    FAILED = 'FAILED'


@dataclass
class NotificationResult:
    success: bool
    message: str
    reason: NotificationReason = NotificationReason.FAILED
    data: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def sent(cls, message: str = 'Email sent successfully', **data) -> 'NotificationResult':
        return cls(True, message, NotificationReason.SENT, data)

    @classmethod
    def skipped(cls, reason: NotificationReason, message: str) -> 'NotificationResult':
        return cls(False, message, reason)

    @classmethod
    def failed(cls, message: str) -> 'NotificationResult':
        return cls(False, message, NotificationReason.FAILED)

    def to_dict(self) -> Dict[str, Any]:
        result = {'success': self.success, 'message': self.message, 'reason': self.reason.value}
        if self.data:
            result['data'] = self.data
        return result


# Dedup ledger actions; exact strings
ACADEMIC_QUEUE_NOTIFICATION_SENT = 'ACADEMIC_QUEUE_NOTIFICATION_SENT'
LIBRARY_REMINDER_SENT = 'LIBRARY_REMINDER_SENT'
BURSAR_REMINDER_SENT = 'BURSAR_REMINDER_SENT'
ACADEMIC_REMINDER_SENT = 'ACADEMIC_REMINDER_SENT'

REMINDER_ACTIONS = {
    Department.LIBRARY: LIBRARY_REMINDER_SENT,
    Department.BURSAR: BURSAR_REMINDER_SENT,
    Department.ACADEMIC: ACADEMIC_REMINDER_SENT,
}

# Informational journal entries
REQUEST_CREATED = 'REQUEST_CREATED'
REQUEST_UPDATED = 'REQUEST_UPDATED'
SETTINGS_UPDATED = 'SETTINGS_UPDATED'


def queue_notification_action(department: Department) -> str:
    return f'{department.value}_QUEUE_NOTIFICATION_SENT'


def status_change_action(kind: str) -> str:
    return f'{kind}_STATUS_CHANGE_NOTIFICATION_SENT'
