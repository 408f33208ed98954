"""Job tracking endpoints."""

from flask import Blueprint, jsonify, request

from careerhub.services.functions_service import FunctionsService
from careerhub.services.job_service import JobService
from careerhub.web.helpers import extension, json_body, query_flag, service


bp = Blueprint("jobs", __name__, url_prefix="/api/jobs")


@bp.route("", methods=["GET"])
def list_jobs():
    jobs = service(JobService).list_jobs(
        status=request.args.get("status") or None,
        include_archived=query_flag("include_archived"),
    )
    return jsonify({"success": True, "jobs": jobs, "count": len(jobs)})


@bp.route("", methods=["POST"])
def create_job():
    job = service(JobService).create_job(json_body("job_title", "company_name"))
    return jsonify({"success": True, "job": job}), 201


@bp.route("/<job_id>", methods=["GET"])
def get_job(job_id):
    return jsonify({"success": True, "job": service(JobService).get_job(job_id)})


@bp.route("/<job_id>", methods=["PATCH", "PUT"])
def update_job(job_id):
    job = service(JobService).update_job(job_id, json_body())
    return jsonify({"success": True, "job": job})


@bp.route("/<job_id>", methods=["DELETE"])
def delete_job(job_id):
    service(JobService).delete_job(job_id)
    return jsonify({"success": True})


@bp.route("/<job_id>/status", methods=["POST"])
def update_status(job_id):
    data = json_body("status")
    job = service(JobService).update_status(job_id, data["status"], data.get("notes"))
    return jsonify({"success": True, "job": job})


@bp.route("/<job_id>/archive", methods=["POST"])
def archive_job(job_id):
    data = json_body()
    job = service(JobService).archive_job(job_id, bool(data.get("archived", True)))
    return jsonify({"success": True, "job": job})


@bp.route("/<job_id>/history", methods=["GET"])
def status_history(job_id):
    history = service(JobService).get_status_history([job_id])
    return jsonify({"success": True, "history": history})


@bp.route("/bulk-status", methods=["POST"])
def bulk_status():
    data = json_body("job_ids", "status")
    if not isinstance(data["job_ids"], list):
        raise ValueError("job_ids must be a list")
    result = service(JobService).bulk_update_status(data["job_ids"], data["status"])
    return jsonify({"success": True, **result})


@bp.route("/import", methods=["POST"])
def import_job():
    data = json_body("url")
    jobs = service(JobService)
    functions = FunctionsService(jobs.client, extension()["cache"])
    job = jobs.import_from_url(data["url"], functions=functions, save=bool(data.get("save")))
    return jsonify({"success": True, "job": job}), 201 if data.get("save") else 200
