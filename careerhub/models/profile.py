"""User profile and profile section models."""

from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator


class ProficiencyLevel(str, Enum):
    """Skill proficiency levels."""
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"
    EXPERT = "Expert"


class UserProfile(BaseModel):
    """Basic profile information shown in every resume header."""
    id: Optional[str] = None
    user_id: Optional[str] = None
    first_name: str = Field(min_length=1, max_length=50)
    last_name: str = Field(min_length=1, max_length=50)
    email: EmailStr
    phone: Optional[str] = None
    location: Optional[str] = Field(default=None, max_length=100)
    headline: Optional[str] = Field(default=None, max_length=100)
    bio: Optional[str] = Field(default=None, max_length=500)
    industry: Optional[str] = None
    experience_level: Optional[str] = None
    linkedin_url: Optional[str] = None
    github_url: Optional[str] = None
    portfolio_url: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class EmploymentEntry(BaseModel):
    """One row of employment history."""
    id: Optional[str] = None
    user_id: Optional[str] = None
    company_name: str = Field(min_length=1, max_length=200)
    job_title: str = Field(min_length=1, max_length=200)
    location: Optional[str] = None
    start_date: date
    end_date: Optional[date] = None
    is_current: bool = False
    job_description: Optional[str] = Field(default=None, max_length=2000)

    @model_validator(mode="after")
    def check_dates(self) -> "EmploymentEntry":
        # A current position has no end date
        if self.is_current:
            self.end_date = None
        elif self.end_date and self.end_date < self.start_date:
            raise ValueError("End date must be on or after start date")
        return self


class EducationEntry(BaseModel):
    id: Optional[str] = None
    user_id: Optional[str] = None
    institution_name: str = Field(min_length=1, max_length=200)
    degree_type: str = Field(min_length=1)
    field_of_study: str = Field(min_length=1, max_length=200)
    education_level: str = Field(min_length=1)
    graduation_date: Optional[date] = None
    gpa: Optional[float] = Field(default=None, ge=0, le=4.0)
    show_gpa: bool = True
    is_current: bool = False
    achievements: Optional[str] = Field(default=None, max_length=1000)


class Certification(BaseModel):
    id: Optional[str] = None
    user_id: Optional[str] = None
    certification_name: str = Field(min_length=1, max_length=200)
    issuing_organization: str = Field(min_length=1, max_length=200)
    date_earned: Optional[date] = None
    expiration_date: Optional[date] = None
    does_not_expire: bool = False
    certification_number: Optional[str] = Field(default=None, max_length=100)
    category: Optional[str] = None

    @model_validator(mode="after")
    def check_dates(self) -> "Certification":
        if self.date_earned and self.expiration_date and self.expiration_date < self.date_earned:
            raise ValueError("Expiration date must be on or after date earned")
        return self


class Skill(BaseModel):
    id: Optional[str] = None
    user_id: Optional[str] = None
    skill_name: str = Field(min_length=1, max_length=100)
    proficiency_level: ProficiencyLevel
    category: str = Field(min_length=1)
    display_order: Optional[int] = None

    @field_validator("skill_name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Skill name is required")
        return v


class Project(BaseModel):
    id: Optional[str] = None
    user_id: Optional[str] = None
    project_name: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1, max_length=2000)
    role: str = Field(min_length=1, max_length=200)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    technologies: Optional[str] = None
    project_url: Optional[str] = None
    status: str = Field(min_length=1)
    outcomes: Optional[str] = Field(default=None, max_length=1000)
