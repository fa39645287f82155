"""
Question generation endpoint.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.concurrency import run_in_threadpool

from prepwise.db.models.user import User
from prepwise.core.auth_dependency import get_current_user_obj
from prepwise.schemas.interview import GenerateQuestionsRequest, GenerateQuestionsResponse
from prepwise.services.question_service import generate_questions

router = APIRouter(prefix="/generate-questions", tags=["Questions"])


@router.post("", response_model=GenerateQuestionsResponse)
async def generate_questions_endpoint(
    payload: GenerateQuestionsRequest,
    user: User = Depends(get_current_user_obj),
):
    if not payload.role or not payload.type or not payload.level:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Role, type, and level are required"
        )

    question_set = await run_in_threadpool(
        generate_questions, payload.role, payload.type, payload.level, payload.tech_stack
    )
    return GenerateQuestionsResponse(questions=question_set.questions, fallback=question_set.fallback)
