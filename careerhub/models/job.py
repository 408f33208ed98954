"""Job and application tracking models."""

from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class JobStatus(str, Enum):
    """Pipeline stages a tracked job moves through."""
    INTERESTED = "Interested"
    APPLIED = "Applied"
    PHONE_SCREEN = "Phone Screen"
    INTERVIEW = "Interview"
    INTERVIEW_SCHEDULED = "Interview Scheduled"
    OFFER = "Offer"
    OFFER_RECEIVED = "Offer Received"
    ACCEPTED = "Accepted"
    REJECTED = "Rejected"
    WITHDRAWN = "Withdrawn"


INTERVIEW_STATUSES = (
    JobStatus.PHONE_SCREEN.value,
    JobStatus.INTERVIEW.value,
    JobStatus.INTERVIEW_SCHEDULED.value,
)

OFFER_STATUSES = (
    JobStatus.OFFER.value,
    JobStatus.OFFER_RECEIVED.value,
    JobStatus.ACCEPTED.value,
)


class Job(BaseModel):
    """A job the user is tracking."""
    id: Optional[str] = None
    user_id: Optional[str] = None
    job_title: str = Field(min_length=1, max_length=200)
    company_name: str = Field(min_length=1, max_length=200)
    location: Optional[str] = Field(default=None, max_length=200)
    job_url: Optional[str] = None
    job_description: Optional[str] = None
    industry: Optional[str] = None
    job_type: Optional[str] = None
    salary_range_min: Optional[int] = Field(default=None, gt=0)
    salary_range_max: Optional[int] = Field(default=None, gt=0)
    application_deadline: Optional[date] = None
    status: JobStatus = JobStatus.INTERESTED
    notes: Optional[str] = None
    is_archived: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("job_url")
    @classmethod
    def validate_url(cls, v: Optional[str]) -> Optional[str]:
        if not v:
            return None
        if not v.startswith(("http://", "https://")):
            raise ValueError("Job URL must start with http:// or https://")
        return v

    @model_validator(mode="after")
    def check_salary_range(self) -> "Job":
        if (
            self.salary_range_min is not None
            and self.salary_range_max is not None
            and self.salary_range_max < self.salary_range_min
        ):
            raise ValueError("Maximum salary must be greater than or equal to minimum salary")
        return self


class JobStatusChange(BaseModel):
    """A row of ``job_status_history``."""
    id: Optional[str] = None
    job_id: str
    user_id: Optional[str] = None
    from_status: Optional[str] = None
    to_status: str
    changed_at: Optional[datetime] = None
    notes: Optional[str] = None
