"""
Derived statistics computed from already-fetched rows.

Everything here is a single pass over lists of dicts as returned by the
backend; nothing is fetched or stored.
"""

import csv
import io
import re
from collections import Counter, defaultdict
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Union

from careerhub.models.job import INTERVIEW_STATUSES, OFFER_STATUSES, JobStatus
from careerhub.utils.logger import get_logger
from careerhub.utils.math_utils import round_half_up


logger = get_logger(__name__)

SECONDS_PER_DAY = 60 * 60 * 24

PROFILE_SECTIONS = 6

INDUSTRY_BENCHMARKS = {
    "Technology": {"avg_skills": 12, "avg_projects": 4, "avg_certs": 2},
    "Healthcare": {"avg_skills": 8, "avg_projects": 2, "avg_certs": 4},
    "Finance": {"avg_skills": 10, "avg_projects": 3, "avg_certs": 3},
    "Education": {"avg_skills": 7, "avg_projects": 3, "avg_certs": 2},
    "default": {"avg_skills": 10, "avg_projects": 3, "avg_certs": 2},
}

# The profile page counts offers that reached the candidate as interview stages too
PROFILE_INTERVIEW_STATUSES = INTERVIEW_STATUSES + ("Offer Received", "Accepted")
PROFILE_OFFER_STATUSES = ("Offer Received", "Accepted")

POSITIVE_OUTCOMES = ("offer", "accepted")
PREDICTION_THRESHOLD = 60

# Fractional seconds of any length; the backend trims trailing zeros (".12")
FRACTION_PATTERN = re.compile(r"(\d{2}:\d{2}:\d{2})\.(\d+)")


def parse_datetime(value: Union[str, datetime, date, None]) -> Optional[datetime]:
    """Parse a backend timestamp into an aware UTC datetime."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    else:
        text = str(value).replace("Z", "+00:00")
        # fromisoformat before 3.11 only takes 3 or 6 digit fractions
        text = FRACTION_PATTERN.sub(lambda m: f"{m.group(1)}.{m.group(2)[:6].ljust(6, '0')}", text)
        parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _percent(part: int, whole: int) -> int:
    return round_half_up(part / whole * 100) if whole > 0 else 0


# -- profile ---------------------------------------------------------------

def has_basic_info(profile: Optional[Dict[str, Any]]) -> bool:
    if not profile:
        return False
    return all(profile.get(field) for field in ("first_name", "last_name", "email", "headline"))


def profile_completeness(
    profile: Optional[Dict[str, Any]],
    employment_count: int,
    education_count: int,
    certifications_count: int,
    skills_count: int,
    projects_count: int,
) -> int:
    """
    Percentage of the six profile sections that have content.

    Sections: basic info, employment, education, certifications, skills, projects.
    """
    completed = sum([
        has_basic_info(profile),
        employment_count > 0,
        education_count > 0,
        certifications_count > 0,
        skills_count > 0,
        projects_count > 0,
    ])
    return round_half_up(completed / PROFILE_SECTIONS * 100)


def achievement_badges(
    completeness: int,
    employment_count: int,
    skills_count: int,
    projects_count: int,
    certifications_count: int,
) -> List[str]:
    badges = []
    if completeness == 100:
        badges.append("Profile Master")
    if employment_count >= 3:
        badges.append("Career Pro")
    if skills_count >= 10:
        badges.append("Skill Collector")
    if projects_count >= 5:
        badges.append("Project Hero")
    if certifications_count >= 3:
        badges.append("Certified Expert")
    return badges


def industry_benchmark(industry: Optional[str]) -> Dict[str, int]:
    return INDUSTRY_BENCHMARKS.get(industry or "", INDUSTRY_BENCHMARKS["default"])


def benchmark_comparison(
    industry: Optional[str], skills_count: int, projects_count: int, certifications_count: int
) -> List[Dict[str, Any]]:
    benchmark = industry_benchmark(industry)
    return [
        {"name": "Skills", "you": skills_count, "benchmark": benchmark["avg_skills"]},
        {"name": "Projects", "you": projects_count, "benchmark": benchmark["avg_projects"]},
        {"name": "Certifications", "you": certifications_count, "benchmark": benchmark["avg_certs"]},
    ]


def profile_job_stats(jobs: Iterable[Dict[str, Any]]) -> Dict[str, int]:
    """Job summary shown on the profile page: ``interviewed / applied``."""
    jobs = list(jobs)
    counts = Counter(job.get("status") for job in jobs)
    applied = counts[JobStatus.APPLIED.value]
    interviewed = sum(counts[s] for s in PROFILE_INTERVIEW_STATUSES)
    offers = sum(counts[s] for s in PROFILE_OFFER_STATUSES)
    return {
        "total_jobs": len(jobs),
        "applied": applied,
        "interviewed": interviewed,
        "offers": offers,
        "response_rate": _percent(interviewed, applied),
    }


def profile_overview(
    profile: Optional[Dict[str, Any]],
    employment: List[Dict],
    education: List[Dict],
    certifications: List[Dict],
    skills: List[Dict],
    projects: List[Dict],
    jobs: Optional[List[Dict]] = None,
) -> Dict[str, Any]:
    """Everything the profile dashboard shows, from the fetched sections."""
    counts = {
        "employment_count": len(employment),
        "education_count": len(education),
        "certifications_count": len(certifications),
        "skills_count": len(skills),
        "projects_count": len(projects),
    }
    completeness = profile_completeness(profile, **counts)
    industry = (profile or {}).get("industry")

    return {
        "has_basic_info": has_basic_info(profile),
        **counts,
        "completeness": completeness,
        "badges": achievement_badges(
            completeness,
            counts["employment_count"],
            counts["skills_count"],
            counts["projects_count"],
            counts["certifications_count"],
        ),
        "industry": industry,
        "benchmark": benchmark_comparison(
            industry, counts["skills_count"], counts["projects_count"], counts["certifications_count"]
        ),
        "job_stats": profile_job_stats(jobs or []),
    }


# -- jobs ------------------------------------------------------------------

def job_status_counts(jobs: Iterable[Dict[str, Any]]) -> Dict[str, int]:
    return dict(Counter(job.get("status") for job in jobs if job.get("status")))


def response_rate(counts: Dict[str, int]) -> int:
    """``responded / (applied + responded)`` where responded = interviews + offers + rejected."""
    applied = counts.get(JobStatus.APPLIED.value, 0)
    responded = (
        sum(counts.get(s, 0) for s in INTERVIEW_STATUSES)
        + sum(counts.get(s, 0) for s in OFFER_STATUSES)
        + counts.get(JobStatus.REJECTED.value, 0)
    )
    return _percent(responded, applied + responded)


def average_days_in_stage(jobs: Iterable[Dict[str, Any]], now: Optional[datetime] = None) -> Dict[str, int]:
    """Average days each job has spent in its current status."""
    now = now or datetime.now(timezone.utc)
    stage_days: Dict[str, List[int]] = defaultdict(list)

    for job in jobs:
        status = job.get("status")
        since = parse_datetime(job.get("updated_at") or job.get("created_at"))
        if not status or since is None:
            continue
        days = max(0, round_half_up((now - since).total_seconds() / SECONDS_PER_DAY))
        stage_days[status].append(days)

    return {stage: round_half_up(sum(days) / len(days)) for stage, days in stage_days.items()}


def monthly_application_volume(jobs: Iterable[Dict[str, Any]], months: int = 6) -> List[Dict[str, Any]]:
    """Jobs added per "Mon YYYY" bucket, oldest first, keeping the last ``months`` buckets."""
    buckets: Counter = Counter()
    for job in jobs:
        created = parse_datetime(job.get("created_at"))
        if created is not None:
            buckets[(created.year, created.month)] += 1

    ordered = sorted(buckets.items())[-months:]
    return [
        {"month": date(year, month, 1).strftime("%b %Y"), "applications": count}
        for (year, month), count in ordered
    ]


def deadline_adherence(jobs: Iterable[Dict[str, Any]], now: Optional[datetime] = None) -> Dict[str, int]:
    now = now or datetime.now(timezone.utc)
    met = missed = 0

    for job in jobs:
        deadline = parse_datetime(job.get("application_deadline"))
        if deadline is None:
            continue
        status = job.get("status")
        if status == JobStatus.APPLIED.value and job.get("created_at"):
            if parse_datetime(job["created_at"]) <= deadline:
                met += 1
            else:
                missed += 1
        elif status == JobStatus.INTERESTED.value and deadline < now:
            missed += 1

    return {"met": met, "missed": missed}


def average_time_to_offer(jobs: Iterable[Dict[str, Any]], history: Iterable[Dict[str, Any]]) -> Optional[int]:
    """Average days between the first and last status change of jobs that reached an offer."""
    by_job: Dict[Any, List[datetime]] = defaultdict(list)
    for row in history:
        changed = parse_datetime(row.get("changed_at"))
        if changed is not None:
            by_job[row.get("job_id")].append(changed)

    durations = []
    for job in jobs:
        if job.get("status") not in OFFER_STATUSES:
            continue
        changes = sorted(by_job.get(job.get("id"), []))
        if not changes:
            continue
        days = round_half_up((changes[-1] - changes[0]).total_seconds() / SECONDS_PER_DAY)
        if days >= 0:
            durations.append(days)

    return round_half_up(sum(durations) / len(durations)) if durations else None


def job_statistics(
    jobs: List[Dict[str, Any]],
    history: Optional[List[Dict[str, Any]]] = None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Summary statistics for the jobs dashboard.

    Args:
        jobs: Job rows
        history: ``job_status_history`` rows for those jobs
        now: Reference time (defaults to the current UTC time)

    Returns:
        Dict of counts, rates and per-stage / per-month breakdowns
    """
    counts = job_status_counts(jobs)
    interviews = sum(counts.get(s, 0) for s in INTERVIEW_STATUSES)
    offers = sum(counts.get(s, 0) for s in OFFER_STATUSES)

    return {
        "total_jobs": len(jobs),
        "status_counts": counts,
        "interested": counts.get(JobStatus.INTERESTED.value, 0),
        "applied": counts.get(JobStatus.APPLIED.value, 0),
        "interviews": interviews,
        "offers": offers,
        "rejected": counts.get(JobStatus.REJECTED.value, 0),
        "response_rate": response_rate(counts),
        "avg_time_in_stage": average_days_in_stage(jobs, now=now),
        "monthly_volume": monthly_application_volume(jobs),
        "deadline_adherence": deadline_adherence(jobs, now=now),
        "avg_time_to_offer": average_time_to_offer(jobs, history or []),
    }


def job_statistics_csv(stats: Dict[str, Any]) -> str:
    """Render ``job_statistics`` output as a two-column CSV report."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    time_to_offer = stats.get("avg_time_to_offer")

    writer.writerows([
        ["Metric", "Value"],
        ["Total Jobs", stats["total_jobs"]],
        ["Interested", stats["interested"]],
        ["Applied", stats["applied"]],
        ["Interviews", stats["interviews"]],
        ["Offers", stats["offers"]],
        ["Response Rate", f"{stats['response_rate']}%"],
        ["Deadlines Met", stats["deadline_adherence"]["met"]],
        ["Deadlines Missed", stats["deadline_adherence"]["missed"]],
        ["Average Time to Offer (days)", time_to_offer if time_to_offer is not None else "N/A"],
        [],
        ["Stage", "Average Days"],
    ])
    writer.writerows([stage, days] for stage, days in stats["avg_time_in_stage"].items())
    return buffer.getvalue()


# -- interviews ------------------------------------------------------------

def prediction_accuracy(predictions: List[Dict[str, Any]], interviews: List[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Compare success predictions with actual interview outcomes.

    A prediction is positive at ``overall_probability >= 60``; an outcome is
    positive when it is ``offer`` or ``accepted``.
    """
    outcomes = {i.get("id"): i.get("outcome") for i in interviews}

    matched = []
    for pred in predictions:
        outcome = outcomes.get(pred.get("interview_id"))
        if not outcome:
            continue
        predicted_positive = (pred.get("overall_probability") or 0) >= PREDICTION_THRESHOLD
        actual_positive = outcome in POSITIVE_OUTCOMES
        matched.append({
            **pred,
            "actual_outcome": outcome,
            "correct": predicted_positive == actual_positive,
        })

    total = len(matched)
    accurate = sum(1 for p in matched if p["correct"])

    historical = sorted(
        (p for p in predictions if p.get("historical_success_rate") is not None),
        key=lambda p: parse_datetime(p.get("created_at")) or datetime.min.replace(tzinfo=timezone.utc),
    )
    latest = historical[-1] if historical else None

    return {
        "total_predictions": total,
        "accurate_predictions": accurate,
        "accuracy": (accurate / total * 100) if total else 0,
        "latest_historical_rate": latest.get("historical_success_rate") if latest else None,
        "latest_trend": (latest.get("performance_trend") or "stable") if latest else None,
        "recent": list(reversed(matched[-5:])),
    }


def response_library_stats(responses: Iterable[Dict[str, Any]]) -> Dict[str, Any]:
    responses = list(responses)
    by_type = Counter(r.get("question_type") for r in responses if r.get("question_type"))
    return {
        "total": len(responses),
        "by_type": dict(by_type),
        "favorites": sum(1 for r in responses if r.get("is_favorite")),
        "total_success_count": sum(r.get("success_count") or 0 for r in responses),
    }
