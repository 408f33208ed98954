"""Professional network models."""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator


class Contact(BaseModel):
    """A row of ``professional_contacts``."""
    id: Optional[str] = None
    user_id: Optional[str] = None
    first_name: str = Field(min_length=1)
    last_name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    current_company: Optional[str] = None
    current_title: Optional[str] = None
    relationship_type: Optional[str] = None
    relationship_strength: int = Field(default=3, ge=1, le=5)
    linkedin_url: Optional[str] = None
    notes: Optional[str] = None
    last_contacted_at: Optional[datetime] = None
    next_follow_up: Optional[date] = None

    @field_validator("email", mode="before")
    @classmethod
    def empty_email_is_none(cls, v):
        return v or None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name or ''}".strip()


class ContactInteraction(BaseModel):
    """A logged touchpoint with a contact."""
    id: Optional[str] = None
    user_id: Optional[str] = None
    contact_id: str
    interaction_type: str = Field(min_length=1)
    interaction_date: datetime = Field(default_factory=datetime.now)
    notes: Optional[str] = None
    outcome: Optional[str] = None
