"""
Tests for the page-level services against the in-memory backend.

Tests:
- Jobs: CRUD, status history, archive, statistics and URL import
- Profile: upsert, sections and overview
- Resumes: templates, duplicate, default flag, validation and ATS score
- Cover letters: generation through the functions endpoint
- Interviews: predictions and the response library
- Contacts: interactions and follow-up reminders
- Functions: cached research calls
"""

from datetime import date

import pytest

from careerhub.exceptions import AuthError, FunctionInvokeError, NotFoundError
from careerhub.services import (
    ContactService,
    CoverLetterService,
    FunctionsService,
    InterviewService,
    JobService,
    ProfileService,
    ResumeService,
)
from careerhub.services.contact_service import is_follow_up_due


@pytest.fixture
def jobs(user_client):
    return JobService(user_client)


@pytest.fixture
def profiles(user_client):
    return ProfileService(user_client)


@pytest.fixture
def resumes(user_client):
    return ResumeService(user_client)


@pytest.fixture
def interviews(user_client):
    return InterviewService(user_client)


@pytest.fixture
def contacts(user_client):
    return ContactService(user_client)


@pytest.fixture
def job(jobs):
    return jobs.create_job({"job_title": "Engineer", "company_name": "Acme", "job_description": "Python role"})


class TestJobService:
    """Tests for JobService."""

    def test_requires_session(self, client):
        with pytest.raises(AuthError):
            JobService(client).list_jobs()

    def test_create_stamps_user_and_history(self, jobs, job, backend, user):
        assert job["user_id"] == user["id"]
        assert job["status"] == "Interested"
        history = backend.rows("job_status_history")
        assert len(history) == 1
        assert history[0]["from_status"] is None
        assert history[0]["to_status"] == "Interested"

    def test_only_own_jobs_are_listed(self, jobs, job, backend):
        backend.insert("jobs", {"job_title": "Other", "company_name": "X", "user_id": "someone-else"})
        assert [j["id"] for j in jobs.list_jobs()] == [job["id"]]

    def test_update_status_appends_history(self, jobs, job, backend):
        updated = jobs.update_status(job["id"], "Applied", notes="Sent via site")
        assert updated["status"] == "Applied"
        last = backend.rows("job_status_history")[-1]
        assert (last["from_status"], last["to_status"], last["notes"]) == ("Interested", "Applied", "Sent via site")

    def test_same_status_is_a_no_op(self, jobs, job, backend):
        jobs.update_status(job["id"], "Interested")
        assert len(backend.rows("job_status_history")) == 1

    def test_unknown_status(self, jobs, job):
        with pytest.raises(ValueError):
            jobs.update_status(job["id"], "Ghosted")

    def test_update_job_routes_status_through_history(self, jobs, job, backend):
        updated = jobs.update_job(job["id"], {"notes": "Referral", "status": "Phone Screen"})
        assert updated["status"] == "Phone Screen"
        assert updated["notes"] == "Referral"
        assert len(backend.rows("job_status_history")) == 2

    def test_update_validates_merged_row(self, jobs, job):
        jobs.update_job(job["id"], {"salary_range_min": 100})
        with pytest.raises(ValueError):
            jobs.update_job(job["id"], {"salary_range_max": 50})

    def test_archive_hides_job(self, jobs, job):
        jobs.archive_job(job["id"])
        assert jobs.list_jobs() == []
        assert len(jobs.list_jobs(include_archived=True)) == 1

    def test_filter_by_status(self, jobs, job):
        jobs.create_job({"job_title": "Analyst", "company_name": "Beta", "status": "Applied"})
        assert [j["job_title"] for j in jobs.list_jobs(status="Applied")] == ["Analyst"]

    def test_bulk_update(self, jobs, job):
        other = jobs.create_job({"job_title": "Analyst", "company_name": "Beta"})
        result = jobs.bulk_update_status([job["id"], other["id"]], "Rejected")
        assert result["updated"] == 2
        assert {j["status"] for j in jobs.list_jobs()} == {"Rejected"}

    def test_delete_missing_job_then_get(self, jobs, job):
        jobs.delete_job(job["id"])
        with pytest.raises(NotFoundError):
            jobs.get_job(job["id"])

    def test_statistics_seed_missing_history(self, jobs, job, backend, user):
        backend.insert("jobs", {"job_title": "Legacy", "company_name": "Old", "status": "Offer",
                                "user_id": user["id"], "is_archived": False})
        stats = jobs.get_statistics()
        assert stats["total_jobs"] == 2
        assert stats["offers"] == 1
        assert len(backend.rows("job_status_history")) == 2

    def test_import_from_url(self, jobs, backend):
        backend.functions["import-job-from-url"] = lambda body: {
            "job": {"job_title": "SRE", "company_name": "Gamma", "unknown_field": "x", "location": ""}
        }
        data = jobs.import_from_url("https://jobs.example.com/1")
        assert data == {"job_title": "SRE", "company_name": "Gamma", "job_url": "https://jobs.example.com/1"}

        saved = jobs.import_from_url("https://jobs.example.com/1", save=True)
        assert saved["id"]

    def test_import_rejects_bad_url(self, jobs):
        with pytest.raises(ValueError):
            jobs.import_from_url("ftp://example.com")


class TestProfileService:
    """Tests for ProfileService."""

    PROFILE = {"first_name": "Ada", "last_name": "Lovelace", "email": "ada@example.com", "bio": "Pioneer"}

    def test_save_profile_upserts(self, profiles, backend):
        profiles.save_profile(self.PROFILE)
        profiles.save_profile({**self.PROFILE, "headline": "Engineer"})
        rows = backend.rows("user_profiles")
        assert len(rows) == 1
        assert rows[0]["headline"] == "Engineer"
        assert profiles.get_profile()["first_name"] == "Ada"

    def test_missing_profile(self, profiles):
        assert profiles.get_profile() is None

    def test_sections(self, profiles):
        skill = profiles.create_section_item(
            "skills", {"skill_name": "Python", "proficiency_level": "Expert", "category": "Technical"}
        )
        assert profiles.list_skills()[0]["skill_name"] == "Python"
        profiles.update_section_item("skills", skill["id"], {"proficiency_level": "Advanced"})
        assert profiles.get_section_item("skills", skill["id"])["proficiency_level"] == "Advanced"
        profiles.delete_section_item("skills", skill["id"])
        assert profiles.list_skills() == []

    def test_unknown_section(self, profiles):
        with pytest.raises(ValueError, match="Unknown profile section"):
            profiles.list_section("hobbies")

    def test_full_profile_and_overview(self, profiles, jobs, job):
        profiles.save_profile({**self.PROFILE, "headline": "Engineer"})
        profiles.create_section_item("employment", {
            "company_name": "Acme", "job_title": "Engineer", "start_date": "2020-01-01",
        })
        full = profiles.get_full_profile()
        assert set(full) == {"profile", "employment", "education", "certifications", "skills", "projects"}

        overview = profiles.get_overview()
        assert overview["completeness"] == 33
        assert overview["job_stats"]["total_jobs"] == 1


class TestResumeService:
    """Tests for ResumeService."""

    def test_create_from_template(self, resumes):
        resume = resumes.create_from_template("Modern Minimal", "Tech resume")
        assert resume["template_style"] == "modern"
        assert [s["id"] for s in resume["content"]["sections"]] == [
            "summary", "skills", "experience", "projects", "education",
        ]

    def test_unknown_template(self, resumes):
        with pytest.raises(ValueError):
            resumes.create_from_template("Baroque")

    def test_duplicate(self, resumes):
        original = resumes.create_resume({"resume_name": "Main", "is_default": True, "content": {"summary": "Hi"}})
        copy = resumes.duplicate_resume(original["id"])
        assert copy["resume_name"] == "Main (Copy)"
        assert copy["version_number"] == 2
        assert copy["is_default"] is False
        assert copy["content"] == {"summary": "Hi"}

    def test_set_default_clears_others(self, resumes, backend):
        first = resumes.create_resume({"resume_name": "A", "is_default": True})
        second = resumes.create_resume({"resume_name": "B"})
        resumes.set_default(second["id"])
        flags = {r["resume_name"]: r["is_default"] for r in backend.rows("resumes")}
        assert flags == {"A": False, "B": True}
        assert first["id"] != second["id"]

    def test_build_resume_data_falls_back_to_bio(self, resumes, profiles):
        profiles.save_profile(TestProfileService.PROFILE)
        data = resumes.build_resume_data()
        assert data["summary"] == "Pioneer"
        assert data["sections"] is None
        assert data["resume_name"] == "Resume"

    def test_validate_with_ai(self, resumes, backend):
        backend.functions["validate-resume-content"] = lambda body: {"spellErrors": ["teh"], "suggestions": ["x"]}
        result = resumes.validate(use_ai=True)
        assert result["ai_score"] == 82
        assert [i["category"] for i in result["ai_issues"]] == ["Spelling", "Improvement"]
        assert result["error_count"] == 2

    def test_validate_ai_failure_propagates(self, resumes):
        with pytest.raises(FunctionInvokeError):
            resumes.validate(use_ai=True)

    def test_ats_score_needs_description(self, resumes):
        with pytest.raises(ValueError):
            resumes.ats_score("  ")

    def test_ats_score_from_profile(self, resumes, profiles):
        profiles.save_profile(TestProfileService.PROFILE)
        result = resumes.ats_score("Python Python Python developer")
        assert set(result["breakdown"]) == {"structure", "keywords", "formatting"}


class TestCoverLetterService:
    """Tests for CoverLetterService."""

    def test_generate_and_save(self, user_client, job, backend):
        captured = {}

        def generate(body):
            captured.update(body)
            return {"coverLetter": "Dear Hiring Manager"}

        backend.functions["generate-cover-letter"] = generate
        letter = CoverLetterService(user_client).generate(job["id"], template_name="Enthusiastic Startup")

        assert letter["title"] == "Engineer - Acme"
        assert letter["tone"] == "enthusiastic"
        assert captured["job"]["company_name"] == "Acme"
        assert captured["structure"][0] == "Attention Grabber"
        assert len(backend.rows("cover_letters")) == 1

    def test_empty_generation(self, user_client, job, backend):
        backend.functions["generate-cover-letter"] = lambda body: {}
        with pytest.raises(ValueError):
            CoverLetterService(user_client).generate(job["id"], save=False)

    def test_list_by_job(self, user_client, job):
        letters = CoverLetterService(user_client)
        letters.create_cover_letter({"title": "A", "content": "x", "job_id": job["id"]})
        letters.create_cover_letter({"title": "B", "content": "y"})
        assert [letter["title"] for letter in letters.list_cover_letters(job["id"])] == ["A"]


class TestInterviewService:
    """Tests for InterviewService."""

    def test_interviews_are_ordered_by_date(self, interviews, job):
        interviews.create_interview({"job_id": job["id"], "interview_date": "2025-03-10T10:00:00"})
        interviews.create_interview({"job_id": job["id"], "interview_date": "2025-03-01T10:00:00"})
        dates = [i["interview_date"] for i in interviews.list_interviews()]
        assert dates == sorted(dates)

    def test_prediction_accuracy(self, interviews, job):
        won = interviews.create_interview({
            "job_id": job["id"], "interview_date": "2025-03-01T10:00:00", "outcome": "offer",
        })
        lost = interviews.create_interview({
            "job_id": job["id"], "interview_date": "2025-03-02T10:00:00", "outcome": "rejected",
        })
        interviews.create_prediction({"interview_id": won["id"], "overall_probability": 80})
        interviews.create_prediction({"interview_id": lost["id"], "overall_probability": 30})

        accuracy = interviews.get_prediction_accuracy()
        assert accuracy["total_predictions"] == 2
        assert accuracy["accuracy"] == 100

    def test_predict_success_requires_interview(self, interviews):
        with pytest.raises(NotFoundError):
            interviews.predict_success("missing")

    def test_response_library(self, interviews):
        entry = interviews.create_response({"question": "Why us?", "question_type": "behavioral"})
        interviews.create_response({"question": "Big O?", "question_type": "technical"})

        assert interviews.toggle_favorite(entry["id"])["is_favorite"] is True
        assert [r["question"] for r in interviews.list_responses(favorites_only=True)] == ["Why us?"]
        assert len(interviews.list_responses(question_type="technical")) == 1

        interviews.record_success(entry["id"], company="Acme")
        updated = interviews.record_success(entry["id"], company="Acme")
        assert updated["success_count"] == 2
        assert updated["companies_used_for"] == ["Acme"]

        stats = interviews.get_response_stats()
        assert stats == {"total": 2, "by_type": {"behavioral": 1, "technical": 1},
                         "favorites": 1, "total_success_count": 2}

    def test_coach_needs_a_response(self, interviews):
        entry = interviews.create_response({"question": "Why us?", "question_type": "behavioral"})
        with pytest.raises(ValueError):
            interviews.coach_response(entry["id"])


class TestContactService:
    """Tests for ContactService."""

    def test_log_interaction_stamps_contact(self, contacts, backend):
        contact = contacts.create_contact({"first_name": "Grace", "current_company": "Navy"})
        contacts.log_interaction({
            "contact_id": contact["id"], "interaction_type": "coffee", "interaction_date": "2025-02-10T09:00:00",
        })
        assert contacts.get_contact(contact["id"])["last_contacted_at"].startswith("2025-02-10T09:00:00")
        assert len(contacts.list_interactions(contact["id"])) == 1

    def test_log_interaction_for_missing_contact(self, contacts, backend):
        with pytest.raises(NotFoundError):
            contacts.log_interaction({"contact_id": "missing", "interaction_type": "email"})
        assert backend.rows("contact_interactions") == []

    def test_due_follow_ups(self, contacts):
        due = contacts.create_contact({"first_name": "Due", "next_follow_up": "2025-02-01"})
        contacts.create_contact({"first_name": "Later", "next_follow_up": "2025-04-01"})
        contacts.create_contact({"first_name": "Never"})

        assert [c["id"] for c in contacts.get_due_follow_ups(date(2025, 3, 1))] == [due["id"]]

    def test_set_and_clear_follow_up(self, contacts):
        contact = contacts.create_contact({"first_name": "Grace"})
        assert contacts.set_follow_up(contact["id"], date(2025, 5, 1))["next_follow_up"] == "2025-05-01"
        assert contacts.set_follow_up(contact["id"], None)["next_follow_up"] is None

    def test_is_follow_up_due(self):
        assert is_follow_up_due({"next_follow_up": "2025-03-01"}, date(2025, 3, 1))
        assert not is_follow_up_due({"next_follow_up": None}, date(2025, 3, 1))


def test_research_results_are_cached(user_client, backend, cache):
    backend.functions["research-salary"] = lambda body: {"median": 100000}
    functions = FunctionsService(user_client, cache)

    assert functions.research_salary("Engineer", "London") == {"median": 100000}
    assert functions.research_salary("Engineer", "London") == {"median": 100000}
    assert len(backend.calls_to("/functions/v1/research-salary")) == 1
