"""Service layer modules."""

from .base import BaseService
from .contact_service import ContactService
from .cover_letter_service import CoverLetterService
from .export_service import ExportService
from .functions_service import FunctionsService
from .interview_service import InterviewService
from .job_service import JobService
from .profile_service import ProfileService
from .resume_service import ResumeService
from .security_service import ClientContext, SecurityService

__all__ = [
    "BaseService",
    "ContactService",
    "CoverLetterService",
    "ExportService",
    "FunctionsService",
    "InterviewService",
    "JobService",
    "ProfileService",
    "ResumeService",
    "ClientContext",
    "SecurityService",
]
