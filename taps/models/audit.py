"""
Audit log model
"""

import json

from taps.models.database import db, utcnow


class AuditLog(db.Model):
    """Append-only audit event"""
    __tablename__ = 'audit_logs'

    id = db.Column(db.Integer, primary_key=True)
    action = db.Column(db.String(100), nullable=False, index=True)
    details = db.Column(db.Text, nullable=True)
    request_id = db.Column(db.String(36), db.ForeignKey('transcript_requests.id'),
                           nullable=True, index=True)
    user_id = db.Column(db.String(64), nullable=True)
    timestamp = db.Column(db.DateTime, default=utcnow, nullable=False, index=True)

    @property
    def details_dict(self) -> dict:
        if not self.details:
            return {}
        try:
            return json.loads(self.details)
        except (TypeError, ValueError):
            return {'raw': self.details}

    def to_dict(self):
        """Convert to dictionary"""
        return {
            'id': self.id,
            'action': self.action,
            'details': self.details_dict,
            'request_id': self.request_id,
            'user_id': self.user_id,
            'timestamp': self.timestamp.isoformat() if self.timestamp else None,
        }
