"""
Unit tests for the pydantic data models.
"""

from datetime import date, datetime

import pytest
from pydantic import ValidationError

from careerhub.models import (
    Certification,
    Contact,
    ContactInteraction,
    EmploymentEntry,
    Interview,
    InterviewPrediction,
    Job,
    JobStatus,
    ResponseLibraryEntry,
    Resume,
    Skill,
    TemplateStyle,
    UserProfile,
)


class TestJob:
    """Tests for the Job model."""

    def test_defaults(self):
        job = Job(job_title="Engineer", company_name="Acme")
        assert job.status == JobStatus.INTERESTED
        assert job.is_archived is False

    def test_status_serializes_to_display_value(self):
        job = Job(job_title="Engineer", company_name="Acme", status="Phone Screen")
        assert job.model_dump(mode="json")["status"] == "Phone Screen"

    def test_rejects_unknown_status(self):
        with pytest.raises(ValidationError):
            Job(job_title="Engineer", company_name="Acme", status="Ghosted")

    def test_salary_range_order(self):
        with pytest.raises(ValidationError, match="Maximum salary"):
            Job(job_title="Engineer", company_name="Acme", salary_range_min=100, salary_range_max=50)

    def test_url_scheme(self):
        with pytest.raises(ValidationError):
            Job(job_title="Engineer", company_name="Acme", job_url="ftp://example.com")
        assert Job(job_title="E", company_name="A", job_url="").job_url is None

    def test_requires_title(self):
        with pytest.raises(ValidationError):
            Job(job_title="", company_name="Acme")


class TestProfileModels:
    """Tests for profile and profile section models."""

    def test_profile_email_validation(self):
        with pytest.raises(ValidationError):
            UserProfile(first_name="Ada", last_name="Lovelace", email="not-an-email")

    def test_full_name(self):
        profile = UserProfile(first_name="Ada", last_name="Lovelace", email="ada@example.com")
        assert profile.full_name == "Ada Lovelace"

    def test_current_employment_clears_end_date(self):
        entry = EmploymentEntry(
            company_name="Acme", job_title="Engineer",
            start_date=date(2020, 1, 1), end_date=date(2021, 1, 1), is_current=True,
        )
        assert entry.end_date is None

    def test_employment_end_before_start(self):
        with pytest.raises(ValidationError, match="End date"):
            EmploymentEntry(
                company_name="Acme", job_title="Engineer",
                start_date=date(2021, 1, 1), end_date=date(2020, 1, 1),
            )

    def test_certification_expiry_before_earned(self):
        with pytest.raises(ValidationError):
            Certification(
                certification_name="AWS", issuing_organization="Amazon",
                date_earned=date(2023, 1, 1), expiration_date=date(2022, 1, 1),
            )

    def test_skill_name_is_stripped(self):
        skill = Skill(skill_name="  Python ", proficiency_level="Expert", category="Technical")
        assert skill.skill_name == "Python"

    def test_skill_blank_name(self):
        with pytest.raises(ValidationError):
            Skill(skill_name="   ", proficiency_level="Expert", category="Technical")


class TestDocumentAndInterviewModels:
    """Tests for resume, interview and response library models."""

    def test_resume_defaults(self):
        resume = Resume(resume_name="Main")
        assert resume.template_style == TemplateStyle.CLASSIC
        assert resume.version_number == 1
        assert resume.content == {}

    def test_interview_requires_date(self):
        with pytest.raises(ValidationError):
            Interview(job_id="job-1")
        interview = Interview(job_id="job-1", interview_date="2025-03-01T10:00:00")
        assert interview.status == "scheduled"

    def test_prediction_probability_bounds(self):
        with pytest.raises(ValidationError):
            InterviewPrediction(interview_id="i-1", overall_probability=120)

    def test_response_question_type(self):
        entry = ResponseLibraryEntry(question="Tell me about yourself", question_type="behavioral")
        assert entry.success_count == 0
        with pytest.raises(ValidationError):
            ResponseLibraryEntry(question="Q", question_type="trivia")


class TestContactModels:
    """Tests for contact models."""

    def test_relationship_strength_bounds(self):
        with pytest.raises(ValidationError):
            Contact(first_name="Grace", relationship_strength=6)

    def test_empty_email_becomes_none(self):
        assert Contact(first_name="Grace", email="").email is None

    def test_full_name_without_last_name(self):
        assert Contact(first_name="Grace").full_name == "Grace"

    def test_interaction_date_defaults_to_now(self):
        interaction = ContactInteraction(contact_id="c-1", interaction_type="email")
        assert isinstance(interaction.interaction_date, datetime)
