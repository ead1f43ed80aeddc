"""
Department status model

Department status columns are free strings written by each department.
The workflow reads them through a tagged variant so the join barrier is a
type check, not a string comparison:

    Pending()                  no verdict yet (neutral state)
    Decided(verdict, detail)   the department has acted, whatever the verdict

Each department owns its neutral vocabulary. Matching is case-insensitive
and a missing or blank value counts as neutral.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Optional, Union


class Department(str, Enum):
    LIBRARY = 'LIBRARY'
    BURSAR = 'BURSAR'
    ACADEMIC = 'ACADEMIC'

    @property
    def label(self) -> str:
        return self.value.title()

    @property
    def status_field(self) -> str:
        return f'{self.value.lower()}_status'

    @classmethod
    def parse(cls, value: Union[str, 'Department']) -> 'Department':
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise ValueError(f"Unknown department: {value!r}") from None


NEUTRAL_STATES: Dict[Department, FrozenSet[str]] = {
    Department.LIBRARY: frozenset({'PENDING'}),
    Department.BURSAR: frozenset({'PENDING'}),
    Department.ACADEMIC: frozenset({'PENDING'}),
}

# Academic verdicts that route a follow-up to the transcript processor
ACADEMIC_COMPLETED_VERDICTS = frozenset({'COMPLETED', 'APPROVED'})
ACADEMIC_CORRECTION_VERDICTS = frozenset({
    'IN COMPLETE', 'INCOMPLETE', 'OUTSTANDING', 'HOLD', 'CORRECTIONS_REQUIRED',
})


@dataclass(frozen=True)
class Pending:
    raw: Optional[str] = None

    @property
    def is_decided(self) -> bool:
        return False


@dataclass(frozen=True)
class Decided:
    verdict: str
    detail: Optional[str] = None

    @property
    def is_decided(self) -> bool:
        return True


DepartmentStatus = Union[Pending, Decided]


def normalize(value: Optional[str]) -> str:
    return (value or '').strip().upper()


def parse_status(department: Union[str, Department], raw: Optional[str],
                 detail: Optional[str] = None) -> DepartmentStatus:
    """Read a stored status string as Pending or Decided"""
    department = Department.parse(department)
    if normalize(raw) in NEUTRAL_STATES[department] or not normalize(raw):
        return Pending(raw)
    return Decided(raw.strip(), detail)


def status_of(request, department: Union[str, Department]) -> DepartmentStatus:
    department = Department.parse(department)
    return parse_status(department, getattr(request, department.status_field, None))


def upstream_cleared(request) -> bool:
    """Library and Bursar have both produced a verdict"""
    return (status_of(request, Department.LIBRARY).is_decided
            and status_of(request, Department.BURSAR).is_decided)


def neutral_values(department: Union[str, Department]) -> FrozenSet[str]:
    return NEUTRAL_STATES[Department.parse(department)]
