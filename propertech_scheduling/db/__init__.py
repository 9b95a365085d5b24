"""
Database init - Exports for routes and services
"""

from .base import Base, TimestampMixin, utcnow
from propertech_scheduling.database import engine, SessionLocal, get_db

__all__ = ["Base", "TimestampMixin", "utcnow", "engine", "SessionLocal", "get_db"]
