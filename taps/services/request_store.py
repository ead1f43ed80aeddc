"""
Transcript request store
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError

from taps.models import db, TranscriptRequest
from taps.utils.exceptions import DatabaseError, NotFoundError, ValidationError
from taps.workflow.status import Department, neutral_values

logger = logging.getLogger(__name__)

# Fields each update may touch
UPDATABLE_FIELDS = (
    'status', 'library_status', 'bursar_status', 'academic_status',
    'library_dept_due_amount', 'library_dept_due_details',
    'office_of_bursar_due_amount', 'office_of_bursar_due_details',
    'library_note', 'bursar_note', 'academic_note',
    'verifier_notes', 'processor_notes',
)


def _pending_clause(department: Department):
    column = getattr(TranscriptRequest, department.status_field)
    return or_(column.is_(None),
               func.trim(column) == '',
               func.upper(func.trim(column)).in_(sorted(neutral_values(department))))


def _decided_clause(department: Department):
    return ~_pending_clause(department)


class RequestStore:
    """Point reads, filtered lists and field updates for transcript requests"""

    def get(self, request_id: str) -> Optional[TranscriptRequest]:
        return db.session.get(TranscriptRequest, request_id)

    def get_or_404(self, request_id: str) -> TranscriptRequest:
        request = self.get(request_id)
        if request is None:
            raise NotFoundError("Request not found")
        return request

    def create(self, **fields) -> TranscriptRequest:
        """
        Insert a new request with every status PENDING

        Raises:
            ValidationError: if the request_id is already taken
        """
        request_id = fields.get('request_id')
        if request_id and TranscriptRequest.query.filter_by(request_id=request_id).first() is not None:
            raise ValidationError(f"Request ID {request_id} already exists")

        request = TranscriptRequest(
            status='PENDING',
            library_status='PENDING',
            bursar_status='PENDING',
            academic_status='PENDING',
            **fields,
        )
        try:
            db.session.add(request)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise DatabaseError(f"Failed to create request: {str(e)}")
        return request

    def update(self, request: TranscriptRequest, changes: Dict[str, Any]) -> TranscriptRequest:
        """Apply field updates; unknown fields are ignored"""
        for field, value in changes.items():
            if field in UPDATABLE_FIELDS:
                setattr(request, field, value)
        try:
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise DatabaseError(f"Failed to update request: {str(e)}")
        return request

    def find_many(self, status: Optional[str] = None, pending_department: Optional[str] = None,
                  student_email: Optional[str] = None,
                  page: int = 1, limit: Optional[int] = None) -> Tuple[List[TranscriptRequest], int]:
        """
        Filtered list query

        Returns:
            Tuple of (requests, total matching)
        """
        query = TranscriptRequest.query
        if status:
            query = query.filter(TranscriptRequest.status == status)
        if pending_department:
            query = query.filter(_pending_clause(Department.parse(pending_department)))
        if student_email:
            query = query.filter(TranscriptRequest.student_email == student_email.strip().lower())

        total = query.count()
        query = query.order_by(TranscriptRequest.created.desc())
        if limit:
            query = query.offset((max(page, 1) - 1) * limit).limit(limit)
        return query.all(), total

    def pending_for(self, department: Department, created_before: datetime) -> List[TranscriptRequest]:
        """Requests still waiting on a department and created at or before the cutoff"""
        return (TranscriptRequest.query
                .filter(_pending_clause(department),
                        TranscriptRequest.created <= created_before)
                .order_by(TranscriptRequest.created)
                .all())

    def awaiting_academic(self) -> List[TranscriptRequest]:
        """Academic pending while Library and Bursar have both decided"""
        return (TranscriptRequest.query
                .filter(_pending_clause(Department.ACADEMIC),
                        _decided_clause(Department.LIBRARY),
                        _decided_clause(Department.BURSAR))
                .order_by(TranscriptRequest.created)
                .all())
