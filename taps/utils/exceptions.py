"""
Custom exceptions for the TAPS application
"""

class TapsException(Exception):
    """Base exception for TAPS application"""
    pass

class ValidationError(TapsException):
    """Validation error"""
    pass

class NotFoundError(TapsException):
    """Requested record does not exist"""
    pass

class DatabaseError(TapsException):
    """Database error"""
    pass

class EmailError(TapsException):
    """Email transport error"""
    pass

class ConfigurationError(TapsException):
    """Required configuration is missing"""
    pass
