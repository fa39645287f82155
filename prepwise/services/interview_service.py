"""
Interview record store.

Read/write helpers for interview definitions. The "available" listing filters
finalized interviews in memory after a bounded fetch instead of adding a
compound (finalized, created_at) index.
"""
import logging
from datetime import datetime, timezone
from typing import Optional
from sqlalchemy import desc
from sqlalchemy.orm import Session

from prepwise.db.models import Interview
from prepwise.schemas.interview import InterviewCreate

logger = logging.getLogger(__name__)

AVAILABLE_FETCH_LIMIT = 100
AVAILABLE_RETURN_LIMIT = 50
RECENT_LIMIT = 50


def get_interview(db: Session, interview_id: str) -> Optional[Interview]:
    """Fetch a single interview by id, or None."""
    if not interview_id:
        return None
    return db.get(Interview, interview_id)


def list_user_interviews(db: Session, user_id: str) -> list[Interview]:
    """All interviews owned by a user, newest first."""
    return (
        db.query(Interview)
        .filter(Interview.user_id == user_id)
        .order_by(desc(Interview.created_at))
        .all()
    )


def list_available_interviews(db: Session, excluding_user_id: Optional[str] = None) -> list[Interview]:
    """
    Finalized interviews others can take, newest first.

    Fetches the newest AVAILABLE_FETCH_LIMIT rows, then filters in memory and
    returns at most AVAILABLE_RETURN_LIMIT. If more than AVAILABLE_FETCH_LIMIT
    rows exist, fewer than AVAILABLE_RETURN_LIMIT finalized rows may come back.
    """
    recent = (
        db.query(Interview)
        .order_by(desc(Interview.created_at))
        .limit(AVAILABLE_FETCH_LIMIT)
        .all()
    )
    available = [
        interview for interview in recent
        if interview.finalized is True
        and (excluding_user_id is None or interview.user_id != excluding_user_id)
    ]
    return available[:AVAILABLE_RETURN_LIMIT]


def list_recent_interviews(db: Session, limit: int = RECENT_LIMIT) -> list[Interview]:
    """Newest interviews regardless of owner or finalized flag."""
    return (
        db.query(Interview)
        .order_by(desc(Interview.created_at))
        .limit(limit)
        .all()
    )


def create_interview(db: Session, draft: InterviewCreate, user_id: str) -> Interview:
    """
    Persist a finalized interview built from a confirmed question list.

    Raises:
        ValueError: if role, type or level is missing
    """
    if not draft.role or not draft.type or not draft.level:
        raise ValueError("Role, type, and level are required")

    interview = Interview(
        user_id=user_id,
        role=draft.role,
        type=draft.type,
        level=draft.level,
        tech_stack=list(draft.tech_stack),
        questions=list(draft.questions),
        finalized=True,
        created_at=datetime.now(timezone.utc),
    )
    db.add(interview)
    db.commit()
    db.refresh(interview)

    logger.info(
        f"Interview created: interview_id={interview.id}, user_id={user_id}, "
        f"type={interview.type}, questions={len(interview.questions)}"
    )
    return interview
