"""
Interview endpoints.

Create finalized interviews and list them for the current user or for
everyone to practice with.
"""
import logging
from typing import Literal, Optional
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session

from prepwise.db.models.user import User
from prepwise.core.auth_dependency import get_db, get_current_user_obj
from prepwise.schemas.interview import (
    InterviewCreate,
    InterviewResponse,
    InterviewCreatedResponse,
    InterviewListResponse,
)
from prepwise.services.interview_service import (
    create_interview,
    get_interview,
    list_user_interviews,
    list_available_interviews,
    list_recent_interviews,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/interviews", tags=["Interviews"])


@router.post("", status_code=status.HTTP_201_CREATED, response_model=InterviewCreatedResponse)
def create_interview_endpoint(
    payload: InterviewCreate,
    user: User = Depends(get_current_user_obj),
    db: Session = Depends(get_db)
):
    """
    Create a finalized interview from a confirmed question list.

    Requires authentication. The interview is owned by the caller.
    """
    if not payload.role or not payload.type or not payload.level:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Role, type, and level are required"
        )

    try:
        interview = create_interview(db, payload, user.id)
    except Exception as e:
        db.rollback()
        logger.error(f"Failed to create interview: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error"
        )

    return InterviewCreatedResponse(
        interview_id=interview.id,
        interview=InterviewResponse.model_validate(interview),
    )


@router.get("", response_model=InterviewListResponse)
def list_interviews(
    type: Optional[Literal["user", "available"]] = Query(None, description="user = your interviews, available = finalized interviews by others"),
    user: User = Depends(get_current_user_obj),
    db: Session = Depends(get_db)
):
    """List interviews. Without a type, returns the newest interviews."""
    try:
        if type == "user":
            interviews = list_user_interviews(db, user.id)
        elif type == "available":
            interviews = list_available_interviews(db, excluding_user_id=user.id)
        else:
            interviews = list_recent_interviews(db)
    except Exception as e:
        logger.error(f"Failed to list interviews: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error"
        )

    logger.debug(f"Interviews listed: user_id={user.id}, type={type}, count={len(interviews)}")
    return InterviewListResponse(
        interviews=[InterviewResponse.model_validate(i) for i in interviews]
    )


@router.get("/{interview_id}", response_model=InterviewResponse)
def get_interview_endpoint(
    interview_id: str,
    user: User = Depends(get_current_user_obj),
    db: Session = Depends(get_db)
):
    interview = get_interview(db, interview_id)
    if interview is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Interview not found")
    return InterviewResponse.model_validate(interview)
