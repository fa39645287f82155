"""
Pydantic schemas for feedback endpoints.
"""
from typing import Literal, Optional
from datetime import datetime
from pydantic import BaseModel, Field


class TranscriptMessage(BaseModel):
    """One attributed utterance from a call."""
    role: Literal["user", "assistant", "system"]
    content: str


class CategoryScore(BaseModel):
    name: str
    score: int = Field(..., ge=0, le=100)
    comment: str = ""


class FeedbackCreate(BaseModel):
    """Request schema for generating feedback from a finished transcript."""
    transcript: list[TranscriptMessage] = Field(default_factory=list)
    feedback_id: Optional[str] = Field(None, description="Existing feedback to overwrite")


class FeedbackCreatedResponse(BaseModel):
    success: bool
    feedback_id: Optional[str] = None


class FeedbackResponse(BaseModel):
    """Schema for a stored feedback record."""
    id: str
    interview_id: str
    user_id: str
    total_score: int
    category_scores: list[CategoryScore]
    strengths: list[str]
    areas_for_improvement: list[str]
    final_assessment: str
    transcript: list[TranscriptMessage]
    created_at: datetime

    class Config:
        from_attributes = True
