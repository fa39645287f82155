"""
Feedback model for scored interview assessments.
"""
import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, Integer, Text, DateTime, ForeignKey, Index, JSON
from prepwise.db.base import Base


def _new_id() -> str:
    return uuid.uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Feedback(Base):
    """
    Feedback produced after a voice interview session ends.

    Stores the score, the narrative assessment and a denormalized copy of the
    transcript. Uniqueness per (interview, user) is not enforced here; the
    last write to a given id wins.
    """
    __tablename__ = "feedback"

    id = Column(String(32), primary_key=True, default=_new_id)
    interview_id = Column(String(32), ForeignKey("interviews.id"), nullable=False, index=True)
    user_id = Column(String(32), ForeignKey("users.id"), nullable=False, index=True)

    total_score = Column(Integer, nullable=False)
    category_scores = Column(JSON, nullable=False, default=list)
    strengths = Column(JSON, nullable=False, default=list)
    areas_for_improvement = Column(JSON, nullable=False, default=list)
    final_assessment = Column(Text, nullable=False)

    transcript = Column(JSON, nullable=False, default=list)  # [{"role": ..., "content": ...}]

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, index=True)

    __table_args__ = (
        Index('idx_feedback_interview_user', 'interview_id', 'user_id'),
    )

    def __repr__(self):
        return f"<Feedback(id={self.id}, interview_id={self.interview_id}, score={self.total_score})>"
