"""
Database models initialization
"""

from taps.models.database import db, utcnow, init_db
from taps.models.request import TranscriptRequest
from taps.models.audit import AuditLog
from taps.models.settings import Settings, SETTINGS_ID

# Export all models
__all__ = ['db', 'utcnow', 'init_db', 'TranscriptRequest', 'AuditLog', 'Settings', 'SETTINGS_ID']
