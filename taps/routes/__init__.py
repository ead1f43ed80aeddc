"""
Routes package initialization
"""

from taps.routes.request_routes import request_bp
from taps.routes.admin_routes import admin_bp

__all__ = ['request_bp', 'admin_bp']
