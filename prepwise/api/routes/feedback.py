"""
Feedback endpoints.

Generate feedback from a finished transcript (the same path the live session
uses) and read back the caller's latest feedback for an interview.
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from prepwise.db.models.user import User
from prepwise.core.auth_dependency import get_db, get_current_user_obj
from prepwise.core.logging_config import sanitize_log_data
from prepwise.schemas.feedback import FeedbackCreate, FeedbackCreatedResponse, FeedbackResponse
from prepwise.services.feedback_service import create_feedback, get_feedback_by_interview
from prepwise.services.interview_service import get_interview
from prepwise.services.scoring_service import TranscriptScorer, get_transcript_scorer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/interviews", tags=["Feedback"])


@router.post("/{interview_id}/feedback", response_model=FeedbackCreatedResponse)
def generate_feedback(
    interview_id: str,
    payload: FeedbackCreate,
    user: User = Depends(get_current_user_obj),
    db: Session = Depends(get_db),
    scorer: TranscriptScorer = Depends(get_transcript_scorer),
):
    """
    Score a transcript and store the feedback.

    Pass feedback_id to regenerate an existing record in place.
    """
    if get_interview(db, interview_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Interview not found")

    logger.info("Feedback requested: %s", sanitize_log_data({
        "interview_id": interview_id,
        "user_id": user.id,
        "feedback_id": payload.feedback_id,
        "transcript": payload.transcript,
    }))

    result = create_feedback(
        db,
        interview_id=interview_id,
        user_id=user.id,
        transcript=payload.transcript,
        feedback_id=payload.feedback_id,
        scorer=scorer,
    )
    if result.not_found:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Feedback not found")
    if not result.success:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Could not generate feedback. Please try again later."
        )

    return FeedbackCreatedResponse(success=True, feedback_id=result.feedback_id)


@router.get("/{interview_id}/feedback", response_model=FeedbackResponse)
def read_feedback(
    interview_id: str,
    user: User = Depends(get_current_user_obj),
    db: Session = Depends(get_db),
):
    feedback = get_feedback_by_interview(db, interview_id, user.id)
    if feedback is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Feedback not found")
    return FeedbackResponse.model_validate(feedback)
