"""
AI assistant endpoints.

Thin wrappers around the serverless functions that take their inputs
straight from the request body.
"""

from flask import Blueprint, jsonify

from careerhub.services.functions_service import FunctionsService
from careerhub.web.helpers import extension, json_body, user_client


bp = Blueprint("assistant", __name__, url_prefix="/api/ai")


def _functions() -> FunctionsService:
    return FunctionsService(user_client(), extension()["cache"])


def _reply(result):
    return jsonify({"success": True, "result": result})


@bp.route("/resume-content", methods=["POST"])
def resume_content():
    data = json_body("profile")
    return _reply(_functions().generate_resume_content(data["profile"], data.get("job"), data.get("section")))


@bp.route("/tailor-experience", methods=["POST"])
def tailor_experience():
    data = json_body("experience", "job_description")
    return _reply(_functions().tailor_resume_experience(data["experience"], data["job_description"]))


@bp.route("/interview-questions", methods=["POST"])
def interview_questions():
    data = json_body("job")
    return _reply(_functions().generate_interview_questions(data["job"], data.get("question_types")))


@bp.route("/interview-preparation", methods=["POST"])
def interview_preparation():
    data = json_body("interview", "job")
    return _reply(_functions().generate_interview_preparation(data["interview"], data["job"]))


@bp.route("/mock-interview", methods=["POST"])
def mock_interview():
    data = json_body("job")
    return _reply(_functions().generate_mock_interview(
        data["job"], data.get("interview_type", "behavioral"), int(data.get("question_count", 5)),
    ))


@bp.route("/coach-response", methods=["POST"])
def coach_response():
    data = json_body("question", "response")
    return _reply(_functions().coach_interview_response(data["question"], data["response"], data.get("question_type")))


@bp.route("/evaluate-code", methods=["POST"])
def evaluate_code():
    data = json_body("problem", "solution")
    return _reply(_functions().evaluate_coding_solution(
        data["problem"], data["solution"], data.get("language", "python"),
    ))


@bp.route("/technical-questions", methods=["POST"])
def technical_questions():
    data = json_body("job")
    return _reply(_functions().generate_technical_questions(data["job"], data.get("difficulty", "intermediate")))


@bp.route("/company-research", methods=["POST"])
def company_research():
    data = json_body("company_name")
    return _reply(_functions().generate_company_research(data["company_name"], data.get("job_title")))


@bp.route("/salary", methods=["POST"])
def salary_research():
    data = json_body("job_title")
    return _reply(_functions().research_salary(data["job_title"], data.get("location"), data.get("experience_level")))


@bp.route("/job-match", methods=["POST"])
def job_match():
    data = json_body("job", "profile")
    return _reply(_functions().analyze_job_match(data["job"], data["profile"]))


@bp.route("/skill-gaps", methods=["POST"])
def skill_gaps():
    data = json_body("job", "skills")
    return _reply(_functions().analyze_skill_gaps(data["job"], data["skills"]))


@bp.route("/contact-suggestions", methods=["POST"])
def contact_suggestions():
    data = json_body("profile")
    return _reply(_functions().generate_contact_suggestions(data["profile"], data.get("target_companies")))
