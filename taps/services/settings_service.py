"""
Notification settings provider

Settings are read lazily from the single ``settings`` row, cached as an
immutable snapshot, and dropped by ``invalidate()`` after every write.
"""

import logging
from dataclasses import dataclass, field, fields
from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError

from taps.models import db, Settings, SETTINGS_ID
from taps.templates.email_templates import DEFAULT_TEMPLATES
from taps.utils.exceptions import DatabaseError, ValidationError
from taps.utils.helpers import parse_bool
from taps.utils.validators import format_emails_for_storage, validate_emails
from taps.workflow.status import Department

logger = logging.getLogger(__name__)

DEFAULT_REMINDER_HOURS = 48


@dataclass(frozen=True)
class NotificationSettings:
    """Snapshot of the settings row the workflow reads"""
    email_account: Optional[str] = None
    email_password: Optional[str] = field(default=None, repr=False)
    from_name: str = 'TAPS System'
    reply_to: Optional[str] = None
    enable_alerts: bool = True
    enable_reminders: bool = True
    library_email: Optional[str] = None
    bursar_email: Optional[str] = None
    academic_email: Optional[str] = None
    enable_reminder_library: bool = False
    enable_reminder_bursar: bool = False
    enable_reminder_academic: bool = False
    reminder_hours_library: Optional[int] = None
    reminder_hours_bursar: Optional[int] = None
    reminder_hours_academic: Optional[int] = None
    library_queue_subject: Optional[str] = None
    library_queue_template: Optional[str] = None
    bursar_queue_subject: Optional[str] = None
    bursar_queue_template: Optional[str] = None
    academic_queue_subject: Optional[str] = None
    academic_queue_template: Optional[str] = None
    academic_completed_subject: Optional[str] = None
    academic_completed_template: Optional[str] = None
    academic_correction_subject: Optional[str] = None
    academic_correction_template: Optional[str] = None
    default_reminder_hours: int = DEFAULT_REMINDER_HOURS

    @classmethod
    def from_model(cls, row: Settings, default_reminder_hours: int = DEFAULT_REMINDER_HOURS):
        values = {f.name: getattr(row, f.name) for f in fields(cls) if hasattr(row, f.name)}
        values['default_reminder_hours'] = default_reminder_hours
        return cls(**values)

    def recipient(self, department: Department) -> Optional[str]:
        return getattr(self, f'{department.value.lower()}_email')

    def reminder_enabled(self, department: Department) -> bool:
        return bool(getattr(self, f'enable_reminder_{department.value.lower()}'))

    def reminder_hours(self, department: Department) -> int:
        """Configured interval; unset or zero falls back to the default"""
        return getattr(self, f'reminder_hours_{department.value.lower()}') or self.default_reminder_hours

    def template(self, key: str):
        """(subject, body) for a template key, falling back to built-in defaults"""
        default_subject, default_body = DEFAULT_TEMPLATES[key]
        subject = getattr(self, f'{key}_subject', None) or default_subject
        body = getattr(self, f'{key}_template', None) or default_body
        return subject, body


class SettingsProvider:
    """Lazy-loading, explicitly invalidated settings cache"""

    def __init__(self, default_reminder_hours: int = DEFAULT_REMINDER_HOURS):
        self.default_reminder_hours = default_reminder_hours
        self._cached: Optional[NotificationSettings] = None

    def get(self) -> NotificationSettings:
        if self._cached is None:
            self._cached = NotificationSettings.from_model(self.load_row(), self.default_reminder_hours)
        return self._cached

    def invalidate(self) -> None:
        self._cached = None

    def load_row(self) -> Settings:
        """Settings row, created with defaults when absent"""
        row = db.session.get(Settings, SETTINGS_ID)
        if row is None:
            row = Settings(id=SETTINGS_ID, from_name='TAPS System',
                           enable_alerts=True, enable_reminders=True)
            try:
                db.session.add(row)
                db.session.commit()
            except SQLAlchemyError as e:
                db.session.rollback()
                raise DatabaseError(f"Failed to create default settings: {str(e)}")
        return row

    def update(self, changes: Dict[str, Any]) -> Settings:
        """
        Validate and apply a settings update, then invalidate the cache

        Raises:
            ValidationError: on malformed addresses or reminder hours
        """
        row = self.load_row()
        # Validate everything before touching the row
        applied = {}
        for name, value in changes.items():
            if name not in Settings.EDITABLE_FIELDS:
                continue
            if name.startswith('enable_'):
                value = parse_bool(value)
            elif name.startswith('reminder_hours_'):
                value = _parse_hours(name, value)
            elif name in ('library_email', 'bursar_email', 'academic_email', 'email_account', 'reply_to'):
                checked = validate_emails(value)
                if not checked['valid']:
                    raise ValidationError(checked['message'])
                value = format_emails_for_storage(checked['emails'])
            elif name == 'email_password' and value == '***ENCRYPTED***':
                continue
            applied[name] = value

        for name, value in applied.items():
            setattr(row, name, value)
        try:
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise DatabaseError(f"Failed to update settings: {str(e)}")
        finally:
            self.invalidate()

        logger.info("Settings updated: %s", ', '.join(sorted(applied)) or 'no changes')
        return row


def _parse_hours(field: str, value: Any) -> Optional[int]:
    if value in (None, ''):
        return None
    try:
        hours = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be a whole number of hours")
    if hours < 0:
        raise ValidationError(f"{field} must not be negative")
    return hours
