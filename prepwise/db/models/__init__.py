"""
Database models module.

This module imports all database models to ensure they are registered with SQLAlchemy's Base.metadata
before table creation.
"""
from prepwise.db.models.user import User
from prepwise.db.models.interview import Interview
from prepwise.db.models.feedback import Feedback

__all__ = [
    "User",
    "Interview",
    "Feedback",
]
