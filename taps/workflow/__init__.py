"""
Workflow vocabulary: departments, status variants and notification outcomes
"""

from taps.workflow.status import (
    Department, Pending, Decided, DepartmentStatus,
    parse_status, status_of, upstream_cleared, neutral_values
)
from taps.workflow.results import NotificationResult, NotificationReason

__all__ = [
    'Department', 'Pending', 'Decided', 'DepartmentStatus',
    'parse_status', 'status_of', 'upstream_cleared', 'neutral_values',
    'NotificationResult', 'NotificationReason'
]
