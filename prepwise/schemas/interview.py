"""
Pydantic schemas for interview endpoints.
"""
from typing import Literal, Optional, Union
from datetime import datetime
from pydantic import BaseModel, Field, field_validator

InterviewType = Literal["Technical", "Behavioral", "Situational", "Mixed"]
ExperienceLevel = Literal["Entry", "Mid", "Senior"]

MAX_QUESTIONS = 10


def parse_tech_stack(value: Union[str, list, None]) -> list[str]:
    """Accept a list or a comma-separated string; trim and drop empties."""
    if value is None:
        return []
    if isinstance(value, str):
        items = value.split(",")
    else:
        items = value
    return [str(item).strip() for item in items if str(item).strip()]


class InterviewCreate(BaseModel):
    """
    Request schema for creating an interview.

    role/type/level are optional at the schema level so the route can answer
    with a 400 (not a 422) when one of them is missing.
    """
    role: Optional[str] = Field(None, description="Job role, e.g. 'Backend Engineer'")
    type: Optional[InterviewType] = Field(None, description="Interview type")
    level: Optional[ExperienceLevel] = Field(None, description="Experience level")
    tech_stack: list[str] = Field(default_factory=list, description="Technologies to focus on")
    questions: list[str] = Field(default_factory=list, max_length=MAX_QUESTIONS, description="Finalized question list")

    class Config:
        json_schema_extra = {
            "example": {
                "role": "Backend Engineer",
                "type": "Technical",
                "level": "Mid",
                "tech_stack": ["Go", "SQL"],
                "questions": ["How do you design an idempotent API?"],
            }
        }

    @field_validator("tech_stack", mode="before")
    @classmethod
    def split_tech_stack(cls, v):
        return parse_tech_stack(v)

    @field_validator("role")
    @classmethod
    def strip_role(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if v else v


class InterviewResponse(BaseModel):
    """Schema for a stored interview."""
    id: str
    user_id: str
    role: str
    type: str
    level: str
    tech_stack: list[str]
    questions: list[str]
    finalized: bool
    created_at: datetime

    class Config:
        from_attributes = True


class InterviewCreatedResponse(BaseModel):
    success: bool = True
    interview_id: str
    interview: InterviewResponse


class InterviewListResponse(BaseModel):
    success: bool = True
    interviews: list[InterviewResponse]


class GenerateQuestionsRequest(BaseModel):
    """Request schema for question generation."""
    role: Optional[str] = None
    type: Optional[str] = None
    level: Optional[str] = None
    tech_stack: list[str] = Field(default_factory=list)

    @field_validator("tech_stack", mode="before")
    @classmethod
    def split_tech_stack(cls, v):
        return parse_tech_stack(v)


class GenerateQuestionsResponse(BaseModel):
    success: bool = True
    questions: list[str]
    fallback: bool = False
