from types import SimpleNamespace

import pytest

from taps.utils.validators import format_emails_for_storage, parse_emails, validate_emails
from taps.workflow import Decided, Department, Pending, parse_status, status_of, upstream_cleared


@pytest.mark.parametrize('raw', ['PENDING', 'Pending', ' pending ', None, ''])
def test_neutral_values_parse_as_pending(raw):
    assert isinstance(parse_status(Department.LIBRARY, raw), Pending)


@pytest.mark.parametrize('raw', ['Approved', 'Awaiting Payment', 'Hold', 'COMPLETED'])
def test_any_other_value_is_a_verdict(raw):
    status = parse_status(Department.BURSAR, raw)
    assert isinstance(status, Decided)
    assert status.verdict == raw


def test_department_parse_accepts_names_and_rejects_unknown():
    assert Department.parse('library') is Department.LIBRARY
    assert Department.parse(Department.BURSAR) is Department.BURSAR
    with pytest.raises(ValueError):
        Department.parse('registrar')


def test_upstream_cleared_needs_both_library_and_bursar():
    request = SimpleNamespace(library_status='Approved', bursar_status='PENDING', academic_status='PENDING')
    assert not upstream_cleared(request)

    request.bursar_status = 'Awaiting Payment'
    assert upstream_cleared(request)
    assert not status_of(request, Department.ACADEMIC).is_decided


def test_parse_emails_accepts_strings_lists_and_json():
    assert parse_emails('A@x.edu, b@x.edu') == ['a@x.edu', 'b@x.edu']
    assert parse_emails(['c@x.edu', ' ']) == ['c@x.edu']
    assert parse_emails('["d@x.edu", "e@x.edu"]') == ['d@x.edu', 'e@x.edu']
    assert parse_emails(None) == []


def test_validate_emails_reports_invalid_addresses():
    result = validate_emails('ok@example.edu, broken@nowhere')
    assert result['valid'] is False
    assert result['invalid'] == ['broken@nowhere']


def test_format_emails_for_storage():
    assert format_emails_for_storage(['a@x.edu', 'b@x.edu']) == 'a@x.edu, b@x.edu'
    assert format_emails_for_storage([]) is None
