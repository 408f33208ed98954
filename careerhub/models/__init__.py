"""Data models for the application."""

from .profile import (
    Certification,
    EducationEntry,
    EmploymentEntry,
    ProficiencyLevel,
    Project,
    Skill,
    UserProfile,
)
from .job import INTERVIEW_STATUSES, OFFER_STATUSES, Job, JobStatus, JobStatusChange
from .documents import (
    COVER_LETTER_TEMPLATES,
    RESUME_TEMPLATES,
    CoverLetter,
    CoverLetterStyle,
    ExportFormat,
    Resume,
    SectionConfig,
    TemplateStyle,
)
from .interview import Interview, InterviewPrediction, QuestionType, ResponseLibraryEntry
from .contact import Contact, ContactInteraction

__all__ = [
    "Certification",
    "EducationEntry",
    "EmploymentEntry",
    "ProficiencyLevel",
    "Project",
    "Skill",
    "UserProfile",
    "INTERVIEW_STATUSES",
    "OFFER_STATUSES",
    "Job",
    "JobStatus",
    "JobStatusChange",
    "COVER_LETTER_TEMPLATES",
    "RESUME_TEMPLATES",
    "CoverLetter",
    "CoverLetterStyle",
    "ExportFormat",
    "Resume",
    "SectionConfig",
    "TemplateStyle",
    "Interview",
    "InterviewPrediction",
    "QuestionType",
    "ResponseLibraryEntry",
    "Contact",
    "ContactInteraction",
]
