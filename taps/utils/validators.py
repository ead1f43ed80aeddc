"""
Validation utilities
"""

import json
import re
from typing import Any, Dict, List, Optional, Union

from taps.utils.exceptions import ValidationError

EMAIL_PATTERN = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'


def validate_email(email: str) -> bool:
    """
    Validate email format

    Args:
        email: Email to validate

    Returns:
        True if valid email
    """
    if not email or not isinstance(email, str):
        return False

    return bool(re.match(EMAIL_PATTERN, email.strip()))


def validate_required(value: Any, field_name: str) -> None:
    """
    Validate required field

    Args:
        value: Value to validate
        field_name: Name of the field for error message

    Raises:
        ValidationError: If value is empty or None
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{field_name} is required")


def validate_string_length(value: str, min_length: int = 1, max_length: Optional[int] = None,
                          field_name: str = "Field") -> None:
    """
    Validate string length

    Raises:
        ValidationError: If length is invalid
    """
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be a string")

    if len(value) < min_length:
        raise ValidationError(f"{field_name} must be at least {min_length} characters")

    if max_length and len(value) > max_length:
        raise ValidationError(f"{field_name} must be no more than {max_length} characters")


def parse_emails(email_input: Union[str, List[str], None]) -> List[str]:
    """
    Parse email string(s) into a list of addresses

    Accepts a single address, a comma-separated string, a list, or a
    JSON array string. Addresses are stripped and lower-cased.
    """
    if not email_input:
        return []

    if isinstance(email_input, (list, tuple)):
        return [str(e).strip().lower() for e in email_input if str(e).strip()]

    text = str(email_input).strip()
    if text.startswith('['):
        try:
            parsed = json.loads(text)
        except ValueError:
            parsed = None
        if isinstance(parsed, list):
            return [str(e).strip().lower() for e in parsed if str(e).strip()]

    return [e.strip().lower() for e in text.split(',') if e.strip() and '@' in e]


def format_emails_for_storage(emails: Union[str, List[str], None]) -> Optional[str]:
    """Format an address list as a comma-separated string"""
    if not emails:
        return None
    if isinstance(emails, (list, tuple)):
        cleaned = [e.strip() for e in emails if e and e.strip()]
        return ', '.join(cleaned) or None
    return str(emails).strip() or None


def validate_emails(emails: Union[str, List[str], None]) -> Dict[str, Any]:
    """
    Validate a list of addresses

    Returns:
        {'valid': True, 'emails': [...]} or
        {'valid': False, 'invalid': [...], 'message': str}
    """
    parsed = parse_emails(emails)
    invalid = [email for email in parsed if not validate_email(email)]
    if invalid:
        return {
            'valid': False,
            'invalid': invalid,
            'message': f"Invalid email addresses: {', '.join(invalid)}",
        }
    return {'valid': True, 'emails': parsed}
