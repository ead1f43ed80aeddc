"""
Helper utilities
"""

import logging
from typing import Optional, Dict, Any

from flask import current_app, has_app_context


def setup_logging() -> None:
    """Setup application logging"""
    if not current_app.debug:
        # Production logging
        logging.basicConfig(
            level=logging.INFO,
            format='%(asctime)s %(levelname)s %(name)s %(message)s'
        )
    else:
        # Development logging
        logging.basicConfig(
            level=logging.DEBUG,
            format='%(asctime)s %(levelname)s %(name)s %(message)s'
        )


def _logger() -> logging.Logger:
    if has_app_context():
        return current_app.logger
    return logging.getLogger('taps')


def log_error(message: str, exception: Optional[Exception] = None) -> None:
    """
    Log error message

    Args:
        message: Error message
        exception: Exception object
    """
    if exception:
        _logger().error(f"{message}: {str(exception)}")
    else:
        _logger().error(message)


def log_info(message: str) -> None:
    """
    Log info message

    Args:
        message: Info message
    """
    _logger().info(message)


def parse_bool(value: Any) -> bool:
    """Coerce JSON/form values such as 'true', '1', 'on' to bool"""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in ['true', 'on', '1', 'yes']


def create_response(success: bool, message: str, data: Optional[Any] = None) -> Dict[str, Any]:
    """
    Create standardized API response

    Args:
        success: Whether operation was successful
        message: Response message
        data: Optional data to include

    Returns:
        Standardized response dictionary
    """
    response = {
        'ok': success,
        'message': message
    }

    if data is not None:
        response['data'] = data

    return response
