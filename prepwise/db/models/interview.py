"""
Interview model for storing finalized practice interviews.
"""
import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Index, JSON
from sqlalchemy.orm import relationship
from prepwise.db.base import Base


def _new_id() -> str:
    return uuid.uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Interview(Base):
    """
    A practice interview definition: role, type, level, tech stack and the
    question list the voice agent walks through.

    Question lists are written once at creation and never updated.
    """
    __tablename__ = "interviews"

    id = Column(String(32), primary_key=True, default=_new_id)
    user_id = Column(String(32), ForeignKey("users.id"), nullable=False, index=True)

    role = Column(String, nullable=False)
    type = Column(String, nullable=False)  # Technical / Behavioral / Situational / Mixed
    level = Column(String, nullable=False)  # Entry / Mid / Senior
    tech_stack = Column(JSON, nullable=False, default=list)
    questions = Column(JSON, nullable=False, default=list)

    finalized = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, index=True)

    # Relationships
    user = relationship("User", backref="interviews")

    __table_args__ = (
        Index('idx_interview_user_created', 'user_id', 'created_at'),
    )

    def __repr__(self):
        return f"<Interview(id={self.id}, user_id={self.user_id}, role={self.role!r})>"
