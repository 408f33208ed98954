"""
Unit tests for derived statistics.

Tests:
- Profile completeness, badges and job summary
- Job pipeline statistics and CSV report
- Prediction accuracy and response library summaries
"""

from datetime import datetime, timezone

from careerhub.services.statistics import (
    achievement_badges,
    average_days_in_stage,
    average_time_to_offer,
    deadline_adherence,
    job_statistics,
    job_statistics_csv,
    monthly_application_volume,
    parse_datetime,
    prediction_accuracy,
    profile_completeness,
    profile_job_stats,
    profile_overview,
    response_library_stats,
    response_rate,
)
from careerhub.utils.math_utils import round_half_up


NOW = datetime(2025, 3, 1, tzinfo=timezone.utc)

BASIC_PROFILE = {
    "first_name": "Ada",
    "last_name": "Lovelace",
    "email": "ada@example.com",
    "headline": "Engineer",
}


class TestParseDatetime:
    """Tests for parse_datetime."""

    def test_zulu_suffix(self):
        assert parse_datetime("2025-01-01T00:00:00Z") == datetime(2025, 1, 1, tzinfo=timezone.utc)

    def test_naive_becomes_utc(self):
        assert parse_datetime("2025-01-01").tzinfo == timezone.utc

    def test_empty(self):
        assert parse_datetime("") is None
        assert parse_datetime(None) is None

    def test_short_fraction_is_padded(self):
        assert parse_datetime("2024-01-05T10:00:00.12+00:00") == datetime(
            2024, 1, 5, 10, 0, 0, 120000, tzinfo=timezone.utc
        )

    def test_long_fraction_is_truncated(self):
        assert parse_datetime("2024-01-05T10:00:00.1234567Z") == datetime(
            2024, 1, 5, 10, 0, 0, 123456, tzinfo=timezone.utc
        )


class TestRoundHalfUp:
    """Tests for round_half_up."""

    def test_halves_go_up(self):
        assert round_half_up(12.5) == 13
        assert round_half_up(87.5) == 88
        assert round_half_up(0.5) == 1

    def test_other_values(self):
        assert round_half_up(12.49) == 12
        assert round_half_up(66.67) == 67
        assert round_half_up(0) == 0


class TestProfileStatistics:
    """Tests for profile dashboard statistics."""

    def test_completeness_counts_sections(self):
        assert profile_completeness(BASIC_PROFILE, 1, 0, 0, 1, 0) == 50
        assert profile_completeness(None, 0, 0, 0, 0, 0) == 0
        assert profile_completeness(BASIC_PROFILE, 1, 1, 1, 1, 1) == 100

    def test_basic_info_requires_headline(self):
        profile = {**BASIC_PROFILE, "headline": ""}
        assert profile_completeness(profile, 0, 0, 0, 0, 0) == 0

    def test_badges(self):
        badges = achievement_badges(100, 3, 10, 5, 3)
        assert badges == ["Profile Master", "Career Pro", "Skill Collector", "Project Hero", "Certified Expert"]
        assert achievement_badges(50, 0, 0, 0, 0) == []

    def test_profile_job_stats(self):
        jobs = [{"status": "Applied"}, {"status": "Applied"}, {"status": "Interview"}, {"status": "Accepted"}]
        stats = profile_job_stats(jobs)
        assert stats["applied"] == 2
        assert stats["interviewed"] == 2
        assert stats["offers"] == 1
        assert stats["response_rate"] == 100

    def test_profile_response_rate_rounds_half_up(self):
        jobs = [{"status": "Applied"}] * 8 + [{"status": "Interview"}]
        assert profile_job_stats(jobs)["response_rate"] == 13

    def test_overview_uses_default_benchmark(self):
        overview = profile_overview(BASIC_PROFILE, [{}], [], [], [{}] * 2, [])
        assert overview["completeness"] == 50
        assert overview["benchmark"][0] == {"name": "Skills", "you": 2, "benchmark": 10}
        assert overview["job_stats"]["total_jobs"] == 0


class TestJobStatistics:
    """Tests for job pipeline statistics."""

    def test_response_rate(self):
        assert response_rate({"Applied": 2, "Interview": 1, "Offer": 1}) == 50
        assert response_rate({}) == 0

    def test_response_rate_rounds_half_up(self):
        assert response_rate({"Applied": 7, "Rejected": 1}) == 13

    def test_average_days_in_stage(self):
        jobs = [
            {"status": "Applied", "updated_at": "2025-02-19T00:00:00+00:00"},
            {"status": "Applied", "updated_at": "2025-02-25T00:00:00+00:00"},
            {"status": "Offer", "created_at": "2025-02-28T00:00:00+00:00"},
        ]
        assert average_days_in_stage(jobs, now=NOW) == {"Applied": 7, "Offer": 1}

    def test_monthly_volume_is_chronological(self):
        jobs = [
            {"created_at": "2025-02-03T00:00:00Z"},
            {"created_at": "2024-12-10T00:00:00Z"},
            {"created_at": "2025-02-20T00:00:00Z"},
        ]
        assert monthly_application_volume(jobs) == [
            {"month": "Dec 2024", "applications": 1},
            {"month": "Feb 2025", "applications": 2},
        ]

    def test_monthly_volume_keeps_last_months(self):
        jobs = [{"created_at": f"2024-{m:02d}-01T00:00:00Z"} for m in range(1, 13)]
        volume = monthly_application_volume(jobs, months=3)
        assert [v["month"] for v in volume] == ["Oct 2024", "Nov 2024", "Dec 2024"]

    def test_deadline_adherence(self):
        jobs = [
            {"status": "Applied", "created_at": "2025-01-05T00:00:00+00:00", "application_deadline": "2025-01-10"},
            {"status": "Applied", "created_at": "2025-01-15T00:00:00+00:00", "application_deadline": "2025-01-10"},
            {"status": "Interested", "application_deadline": "2025-02-01"},
            {"status": "Interested", "application_deadline": "2025-04-01"},
            {"status": "Applied"},
        ]
        assert deadline_adherence(jobs, now=NOW) == {"met": 1, "missed": 2}

    def test_average_time_to_offer(self):
        jobs = [{"id": "j1", "status": "Offer"}, {"id": "j2", "status": "Applied"}]
        history = [
            {"job_id": "j1", "changed_at": "2025-01-01T00:00:00Z"},
            {"job_id": "j1", "changed_at": "2025-01-11T00:00:00Z"},
            {"job_id": "j2", "changed_at": "2025-01-01T00:00:00Z"},
        ]
        assert average_time_to_offer(jobs, history) == 10
        assert average_time_to_offer(jobs, []) is None

    def test_job_statistics_summary(self):
        jobs = [
            {"status": "Interested", "created_at": "2025-02-01T00:00:00Z"},
            {"status": "Applied", "created_at": "2025-02-02T00:00:00Z"},
            {"status": "Phone Screen", "created_at": "2025-02-03T00:00:00Z"},
            {"status": "Rejected", "created_at": "2025-02-04T00:00:00Z"},
        ]
        stats = job_statistics(jobs, now=NOW)
        assert stats["total_jobs"] == 4
        assert stats["interviews"] == 1
        assert stats["rejected"] == 1
        assert stats["response_rate"] == 67
        assert stats["avg_time_to_offer"] is None

    def test_csv_report(self):
        stats = job_statistics([{"status": "Applied", "created_at": "2025-02-02T00:00:00Z"}], now=NOW)
        lines = job_statistics_csv(stats).splitlines()
        assert lines[0] == "Metric,Value"
        assert "Response Rate,0%" in lines
        assert "Average Time to Offer (days),N/A" in lines
        assert lines[-1] == "Applied,27"


class TestInterviewStatistics:
    """Tests for prediction accuracy and response library stats."""

    def test_prediction_accuracy(self):
        interviews = [
            {"id": "i1", "outcome": "offer"},
            {"id": "i2", "outcome": "rejected"},
            {"id": "i3", "outcome": None},
        ]
        predictions = [
            {"interview_id": "i1", "overall_probability": 75},
            {"interview_id": "i2", "overall_probability": 80},
            {"interview_id": "i3", "overall_probability": 50},
        ]
        result = prediction_accuracy(predictions, interviews)
        assert result["total_predictions"] == 2
        assert result["accurate_predictions"] == 1
        assert result["accuracy"] == 50
        assert result["recent"][0]["interview_id"] == "i2"

    def test_latest_historical_rate(self):
        predictions = [
            {"interview_id": "x", "historical_success_rate": 40, "created_at": "2025-01-01T00:00:00Z"},
            {"interview_id": "y", "historical_success_rate": 55, "performance_trend": "improving",
             "created_at": "2025-02-01T00:00:00Z"},
        ]
        result = prediction_accuracy(predictions, [])
        assert result["accuracy"] == 0
        assert result["latest_historical_rate"] == 55
        assert result["latest_trend"] == "improving"

    def test_response_library_stats(self):
        responses = [
            {"question_type": "behavioral", "is_favorite": True, "success_count": 2},
            {"question_type": "behavioral", "success_count": None},
            {"question_type": "technical", "is_favorite": False, "success_count": 1},
        ]
        assert response_library_stats(responses) == {
            "total": 3,
            "by_type": {"behavioral": 2, "technical": 1},
            "favorites": 1,
            "total_success_count": 3,
        }
