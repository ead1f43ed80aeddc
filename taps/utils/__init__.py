"""
Utilities package initialization
"""

from taps.utils.exceptions import (
    TapsException, ValidationError, NotFoundError,
    DatabaseError, EmailError, ConfigurationError
)
from taps.utils.validators import (
    validate_email, validate_required, validate_string_length,
    parse_emails, format_emails_for_storage, validate_emails
)
from taps.utils.helpers import (
    setup_logging, log_error, log_info, parse_bool, create_response
)
from taps.utils.templates import replace_template_variables, template_data

__all__ = [
    'TapsException', 'ValidationError', 'NotFoundError',
    'DatabaseError', 'EmailError', 'ConfigurationError',
    'validate_email', 'validate_required', 'validate_string_length',
    'parse_emails', 'format_emails_for_storage', 'validate_emails',
    'setup_logging', 'log_error', 'log_info', 'parse_bool', 'create_response',
    'replace_template_variables', 'template_data'
]
