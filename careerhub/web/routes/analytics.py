"""Derived statistics endpoints."""

from flask import Blueprint, Response, jsonify

from careerhub.services import statistics
from careerhub.services.interview_service import InterviewService
from careerhub.services.job_service import JobService
from careerhub.services.profile_service import ProfileService
from careerhub.web.helpers import service


bp = Blueprint("analytics", __name__, url_prefix="/api/analytics")


@bp.route("/jobs", methods=["GET"])
def job_statistics():
    return jsonify({"success": True, **service(JobService).get_statistics()})


@bp.route("/jobs.csv", methods=["GET"])
def job_statistics_csv():
    csv_text = statistics.job_statistics_csv(service(JobService).get_statistics())
    return Response(
        csv_text,
        mimetype="text/csv",
        headers={"Content-Disposition": "attachment; filename=job-statistics.csv"},
    )


@bp.route("/profile", methods=["GET"])
def profile_statistics():
    return jsonify({"success": True, **service(ProfileService).get_overview()})


@bp.route("/predictions", methods=["GET"])
def prediction_accuracy():
    return jsonify({"success": True, **service(InterviewService).get_prediction_accuracy()})


@bp.route("/responses", methods=["GET"])
def response_library():
    return jsonify({"success": True, **service(InterviewService).get_response_stats()})
