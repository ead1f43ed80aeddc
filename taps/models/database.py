"""
Database handle and shared column helpers
"""

from datetime import datetime, timezone

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()


def utcnow() -> datetime:
    """Naive UTC timestamp, matching how rows are stored"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def init_db() -> None:
    """Create all tables for the registered models"""
    db.create_all()
