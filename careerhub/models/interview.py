"""Interview, prediction and response library models."""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class QuestionType(str, Enum):
    BEHAVIORAL = "behavioral"
    TECHNICAL = "technical"
    SITUATIONAL = "situational"


class Interview(BaseModel):
    """A scheduled or completed interview for a tracked job."""
    id: Optional[str] = None
    user_id: Optional[str] = None
    job_id: str
    interview_type: str = "video"
    interview_date: datetime
    duration_minutes: Optional[int] = Field(default=None, gt=0)
    location: Optional[str] = None
    meeting_link: Optional[str] = None
    interviewer_name: Optional[str] = None
    interviewer_email: Optional[str] = None
    status: str = "scheduled"
    outcome: Optional[str] = None
    notes: Optional[str] = None


class InterviewPrediction(BaseModel):
    """A row of ``interview_success_predictions``."""
    id: Optional[str] = None
    user_id: Optional[str] = None
    interview_id: str
    overall_probability: float = Field(ge=0, le=100)
    preparation_score: Optional[float] = None
    role_match_score: Optional[float] = None
    company_research_score: Optional[float] = None
    practice_hours_score: Optional[float] = None
    historical_success_rate: Optional[float] = None
    performance_trend: Optional[str] = None
    created_at: Optional[datetime] = None


class ResponseLibraryEntry(BaseModel):
    """A saved answer to an interview question."""
    id: Optional[str] = None
    user_id: Optional[str] = None
    question: str = Field(min_length=1)
    question_type: QuestionType
    current_response: Optional[str] = None
    skills: List[str] = Field(default_factory=list)
    companies_used_for: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    success_count: int = Field(default=0, ge=0)
    is_favorite: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
