"""Resume and cover letter models, plus the built-in template catalogues."""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class TemplateStyle(str, Enum):
    """Resume layout styles."""
    CLASSIC = "classic"
    MODERN = "modern"
    CREATIVE = "creative"
    ENTRY = "entry"


class CoverLetterStyle(str, Enum):
    """Cover letter export styles."""
    PROFESSIONAL = "professional"
    MODERN = "modern"
    CLASSIC = "classic"
    MINIMAL = "minimal"


class ExportFormat(str, Enum):
    TEXT = "txt"
    HTML = "html"
    DOCX = "docx"
    PDF = "pdf"
    MARKDOWN = "md"
    JSON = "json"


RESUME_TEMPLATES: List[Dict[str, Any]] = [
    {
        "name": "Professional Classic",
        "description": "Traditional format ideal for corporate roles",
        "sections": ["Summary", "Experience", "Education", "Skills"],
        "style": TemplateStyle.CLASSIC.value,
    },
    {
        "name": "Modern Minimal",
        "description": "Clean, contemporary design for tech roles",
        "sections": ["Summary", "Skills", "Experience", "Projects", "Education"],
        "style": TemplateStyle.MODERN.value,
    },
    {
        "name": "Creative Portfolio",
        "description": "Visual layout for design and creative positions",
        "sections": ["About Me", "Portfolio", "Experience", "Skills", "Education"],
        "style": TemplateStyle.CREATIVE.value,
    },
    {
        "name": "Entry Level",
        "description": "Perfect for recent graduates and career changers",
        "sections": ["Objective", "Education", "Projects", "Skills", "Activities"],
        "style": TemplateStyle.ENTRY.value,
    },
]

COVER_LETTER_TEMPLATES: List[Dict[str, Any]] = [
    {
        "name": "Standard Professional",
        "description": "Traditional format suitable for most industries",
        "tone": "formal",
        "structure": ["Opening Hook", "Why This Company", "Key Qualifications", "Call to Action"],
    },
    {
        "name": "Enthusiastic Startup",
        "description": "Energetic tone for startup and tech companies",
        "tone": "enthusiastic",
        "structure": ["Attention Grabber", "Passion for Mission", "Relevant Experience", "Eager Closing"],
    },
    {
        "name": "Career Changer",
        "description": "Highlights transferable skills for industry transitions",
        "tone": "confident",
        "structure": ["Career Journey", "Transferable Skills", "Fresh Perspective", "Commitment"],
    },
    {
        "name": "Referral Based",
        "description": "Leverages networking connections",
        "tone": "warm",
        "structure": ["Referral Mention", "Mutual Connection", "Qualifications", "Follow-up Request"],
    },
]


class SectionConfig(BaseModel):
    """Which resume sections are shown, and in what order."""
    id: str
    enabled: bool = True
    order: int = 0


class Resume(BaseModel):
    """A saved resume version."""
    id: Optional[str] = None
    user_id: Optional[str] = None
    resume_name: str = Field(min_length=1, max_length=100)
    template_style: TemplateStyle = TemplateStyle.CLASSIC
    content: Dict[str, Any] = Field(default_factory=dict)
    customization_overrides: Dict[str, Any] = Field(default_factory=dict)
    job_id: Optional[str] = None
    is_default: bool = False
    version_number: int = 1
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CoverLetter(BaseModel):
    id: Optional[str] = None
    user_id: Optional[str] = None
    title: str = Field(min_length=1, max_length=200)
    content: str = Field(min_length=1)
    job_id: Optional[str] = None
    template_name: Optional[str] = None
    tone: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
