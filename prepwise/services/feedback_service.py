"""
Feedback generation service.

Orchestrates scoring a finished transcript and persisting the result. Never
raises for scorer or database failures; callers get a FeedbackResult and
decide where to send the user.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Sequence
from sqlalchemy import desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from prepwise.db.models import Feedback
from prepwise.services.scoring_service import (
    TranscriptScorer,
    default_assessment,
    get_transcript_scorer,
)

logger = logging.getLogger(__name__)


@dataclass
class FeedbackResult:
    """Outcome of one feedback generation attempt."""
    success: bool
    feedback_id: Optional[str] = None
    error: Optional[str] = None
    not_found: bool = False


def _normalize_transcript(transcript: Sequence) -> list[dict]:
    """Accept dicts or objects with role/content attributes."""
    normalized = []
    for message in transcript:
        if isinstance(message, dict):
            normalized.append({"role": message["role"], "content": message["content"]})
        else:
            normalized.append({"role": message.role, "content": message.content})
    return normalized


def create_feedback(
    db: Session,
    interview_id: str,
    user_id: str,
    transcript: Sequence,
    feedback_id: Optional[str] = None,
    scorer: Optional[TranscriptScorer] = None,
) -> FeedbackResult:
    """
    Score a transcript and write the feedback record.

    With feedback_id the record at that id is replaced (or created under that
    id); without it a new record is minted, so retrying without an id creates
    a duplicate.

    Args:
        db: Database session
        interview_id: Interview the session was run against
        user_id: Candidate who took the interview
        transcript: Ordered role-tagged messages, may be empty
        feedback_id: Existing feedback id to overwrite
        scorer: Scoring collaborator (defaults to get_transcript_scorer())

    Returns:
        FeedbackResult with the feedback id on success
        (not_found is set when feedback_id belongs to another user)
    """
    if not interview_id or not user_id:
        logger.warning("Feedback requested without interview_id or user_id")
        return FeedbackResult(success=False, error="interview_id and user_id are required")

    try:
        existing = db.get(Feedback, feedback_id) if feedback_id else None
    except SQLAlchemyError as e:
        logger.error(f"Failed to load feedback {feedback_id}: {e}", exc_info=True)
        return FeedbackResult(success=False, error="Could not load feedback")

    if existing is not None and existing.user_id != user_id:
        logger.warning(f"Feedback {feedback_id} belongs to another user, refusing to overwrite: user_id={user_id}")
        return FeedbackResult(success=False, error="Feedback not found", not_found=True)

    messages = _normalize_transcript(transcript)

    if not messages:
        logger.info(f"Empty transcript for interview_id={interview_id}, writing default assessment")
        assessment = default_assessment()
    else:
        scorer = scorer or get_transcript_scorer()
        try:
            assessment = scorer.score(messages)
        except Exception as e:
            logger.error(f"Failed to score transcript: interview_id={interview_id}, error={e}", exc_info=True)
            return FeedbackResult(success=False, error="Scoring failed")

    try:
        feedback = existing
        if feedback is None:
            feedback = Feedback(interview_id=interview_id, user_id=user_id)
            if feedback_id:
                feedback.id = feedback_id
            db.add(feedback)

        feedback.interview_id = interview_id
        feedback.user_id = user_id
        feedback.total_score = assessment.total_score
        feedback.category_scores = [c.model_dump() for c in assessment.category_scores]
        feedback.strengths = list(assessment.strengths)
        feedback.areas_for_improvement = list(assessment.areas_for_improvement)
        feedback.final_assessment = assessment.final_assessment
        feedback.transcript = messages
        feedback.created_at = datetime.now(timezone.utc)

        db.commit()
        db.refresh(feedback)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to save feedback: interview_id={interview_id}, error={e}", exc_info=True)
        return FeedbackResult(success=False, error="Could not save feedback")

    logger.info(
        f"Feedback saved: feedback_id={feedback.id}, interview_id={interview_id}, "
        f"user_id={user_id}, score={feedback.total_score}"
    )
    return FeedbackResult(success=True, feedback_id=feedback.id)


def get_feedback(db: Session, feedback_id: str) -> Optional[Feedback]:
    return db.get(Feedback, feedback_id)


def get_feedback_by_interview(db: Session, interview_id: str, user_id: str) -> Optional[Feedback]:
    """Latest feedback a user received for an interview."""
    return (
        db.query(Feedback)
        .filter(Feedback.interview_id == interview_id, Feedback.user_id == user_id)
        .order_by(desc(Feedback.created_at))
        .first()
    )
