"""
Core package.
"""

from .database import get_db, create_tables

__all__ = ["get_db", "create_tables"]
