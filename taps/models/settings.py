"""
Notification settings model (single row)
"""

from taps.models.database import db, utcnow

SETTINGS_ID = 'settings'


class Settings(db.Model):
    """Process-wide notification settings"""
    __tablename__ = 'settings'

    id = db.Column(db.String(20), primary_key=True, default=SETTINGS_ID)

    # Sender
    email_account = db.Column(db.String(255), nullable=True)
    email_password = db.Column(db.String(255), nullable=True)
    from_name = db.Column(db.String(100), default='TAPS System')
    reply_to = db.Column(db.String(255), nullable=True)

    # Master switches
    enable_alerts = db.Column(db.Boolean, default=True, nullable=False)
    enable_reminders = db.Column(db.Boolean, default=True, nullable=False)

    # Department recipients
    library_email = db.Column(db.Text, nullable=True)
    bursar_email = db.Column(db.Text, nullable=True)
    academic_email = db.Column(db.Text, nullable=True)

    # Reminders
    enable_reminder_library = db.Column(db.Boolean, default=False, nullable=False)
    enable_reminder_bursar = db.Column(db.Boolean, default=False, nullable=False)
    enable_reminder_academic = db.Column(db.Boolean, default=False, nullable=False)
    reminder_hours_library = db.Column(db.Integer, nullable=True)
    reminder_hours_bursar = db.Column(db.Integer, nullable=True)
    reminder_hours_academic = db.Column(db.Integer, nullable=True)

    # Templates
    library_queue_subject = db.Column(db.String(255), nullable=True)
    library_queue_template = db.Column(db.Text, nullable=True)
    bursar_queue_subject = db.Column(db.String(255), nullable=True)
    bursar_queue_template = db.Column(db.Text, nullable=True)
    academic_queue_subject = db.Column(db.String(255), nullable=True)
    academic_queue_template = db.Column(db.Text, nullable=True)
    academic_completed_subject = db.Column(db.String(255), nullable=True)
    academic_completed_template = db.Column(db.Text, nullable=True)
    academic_correction_subject = db.Column(db.String(255), nullable=True)
    academic_correction_template = db.Column(db.Text, nullable=True)

    updated = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    EDITABLE_FIELDS = (
        'email_account', 'email_password', 'from_name', 'reply_to',
        'enable_alerts', 'enable_reminders',
        'library_email', 'bursar_email', 'academic_email',
        'enable_reminder_library', 'enable_reminder_bursar', 'enable_reminder_academic',
        'reminder_hours_library', 'reminder_hours_bursar', 'reminder_hours_academic',
        'library_queue_subject', 'library_queue_template',
        'bursar_queue_subject', 'bursar_queue_template',
        'academic_queue_subject', 'academic_queue_template',
        'academic_completed_subject', 'academic_completed_template',
        'academic_correction_subject', 'academic_correction_template',
    )

    def to_dict(self, mask_secrets: bool = True):
        """Convert to dictionary"""
        data = {field: getattr(self, field) for field in self.EDITABLE_FIELDS}
        data['id'] = self.id
        if mask_secrets and self.email_password:
            data['email_password'] = '***ENCRYPTED***'
        data['updated'] = self.updated.isoformat() if self.updated else None
        return data
