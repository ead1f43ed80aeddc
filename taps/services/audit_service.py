"""
Audit trail service

Append-only journal of workflow events. The workflow treats it as its
idempotency ledger: "has X already been sent for this request" is answered
here, so action names must match exactly.
"""

import json
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from taps.models import db, AuditLog, utcnow

logger = logging.getLogger(__name__)


class AuditTrail:
    """Audit log reads and best-effort writes"""

    def append(self, action: str, details: Optional[Dict[str, Any]] = None,
               request_id: Optional[str] = None, user_id: Optional[str] = None,
               timestamp: Optional[datetime] = None) -> Optional[AuditLog]:
        """
        Append one event

        Failures are logged and swallowed; an already-sent email is never
        undone because its journal entry could not be written.

        Returns:
            The stored event, or None if the write failed
        """
        try:
            entry = AuditLog(
                action=action,
                details=json.dumps(details or {}, default=str),
                request_id=request_id,
                user_id=user_id,
                timestamp=timestamp or utcnow(),
            )
            db.session.add(entry)
            db.session.commit()
            return entry
        except (SQLAlchemyError, TypeError, ValueError) as e:
            logger.error("Failed to create audit log %s for %s: %s", action, request_id, e)
            db.session.rollback()
            return None

    def find_latest(self, request_id: str, action: str) -> Optional[AuditLog]:
        """Most recent event of an action for a request"""
        return (AuditLog.query
                .filter_by(request_id=request_id, action=action)
                .order_by(AuditLog.timestamp.desc(), AuditLog.id.desc())
                .first())

    def exists(self, request_id: str, action: str) -> bool:
        return self.find_latest(request_id, action) is not None

    def exists_within(self, request_id: str, action: str, window_hours: float,
                      now: Optional[datetime] = None) -> bool:
        """Whether an event of an action exists at or after now - window_hours"""
        since = (now or utcnow()) - timedelta(hours=window_hours)
        return (AuditLog.query
                .filter(AuditLog.request_id == request_id,
                        AuditLog.action == action,
                        AuditLog.timestamp >= since)
                .first()) is not None

    def list_events(self, request_id: Optional[str] = None, action: Optional[str] = None,
                    limit: int = 100) -> List[AuditLog]:
        query = AuditLog.query
        if request_id:
            query = query.filter_by(request_id=request_id)
        if action:
            query = query.filter_by(action=action)
        return query.order_by(AuditLog.timestamp.desc(), AuditLog.id.desc()).limit(limit).all()
