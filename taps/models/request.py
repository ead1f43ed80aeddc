"""
Transcript request model
"""

import uuid

from taps.models.database import db, utcnow


class TranscriptRequest(db.Model):
    """One row per student transcript request"""
    __tablename__ = 'transcript_requests'

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    request_id = db.Column(db.String(32), unique=True, nullable=True)

    # Student info
    student_id = db.Column(db.String(50), nullable=False)
    student_email = db.Column(db.String(255), nullable=False, index=True)
    requestor = db.Column(db.String(200), nullable=True)
    program = db.Column(db.String(200), nullable=True)

    # Overall and per-department status
    status = db.Column(db.String(50), default='PENDING', nullable=False)
    library_status = db.Column(db.String(50), default='PENDING', index=True)
    bursar_status = db.Column(db.String(50), default='PENDING', index=True)
    academic_status = db.Column(db.String(50), default='PENDING', index=True)

    # Department payload, not interpreted by the workflow
    library_dept_due_amount = db.Column(db.String(50), nullable=True)
    library_dept_due_details = db.Column(db.Text, nullable=True)
    office_of_bursar_due_amount = db.Column(db.String(50), nullable=True)
    office_of_bursar_due_details = db.Column(db.Text, nullable=True)
    library_note = db.Column(db.Text, nullable=True)
    bursar_note = db.Column(db.Text, nullable=True)
    academic_note = db.Column(db.Text, nullable=True)
    verifier_notes = db.Column(db.Text, nullable=True)
    processor_notes = db.Column(db.Text, nullable=True)

    created = db.Column(db.DateTime, default=utcnow, nullable=False, index=True)
    updated = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    audit_logs = db.relationship('AuditLog', backref='request', lazy=True,
                                 order_by='AuditLog.timestamp.desc()')

    @property
    def display_id(self) -> str:
        """Short code shown to people; falls back to the id prefix"""
        if self.request_id:
            return self.request_id
        return self.id[:8] if self.id else 'N/A'

    def status_snapshot(self) -> dict:
        """Statuses the update handler compares before and after a write"""
        return {
            'status': self.status,
            'library_status': self.library_status,
            'bursar_status': self.bursar_status,
            'academic_status': self.academic_status,
        }

    def to_dict(self):
        """Convert to dictionary"""
        return {
            'id': self.id,
            'request_id': self.display_id,
            'student_id': self.student_id,
            'student_email': self.student_email,
            'requestor': self.requestor,
            'program': self.program,
            'status': self.status,
            'library_status': self.library_status,
            'bursar_status': self.bursar_status,
            'academic_status': self.academic_status,
            'library_dept_due_amount': self.library_dept_due_amount,
            'library_dept_due_details': self.library_dept_due_details,
            'office_of_bursar_due_amount': self.office_of_bursar_due_amount,
            'office_of_bursar_due_details': self.office_of_bursar_due_details,
            'library_note': self.library_note,
            'bursar_note': self.bursar_note,
            'academic_note': self.academic_note,
            'verifier_notes': self.verifier_notes,
            'processor_notes': self.processor_notes,
            'created': self.created.isoformat() if self.created else None,
            'updated': self.updated.isoformat() if self.updated else None,
        }
