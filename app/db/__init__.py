"""
Database Module
===============

Provides database session management and base model.
"""

from app.db.base import Base
from app.db.session import close_db, create_tables, drop_tables, get_db, init_db

__all__ = ["Base", "get_db", "init_db", "close_db", "create_tables", "drop_tables"]
