"""Resume and cover letter endpoints."""

from flask import Blueprint, jsonify, request

from careerhub.services.cover_letter_service import CoverLetterService
from careerhub.services.functions_service import FunctionsService
from careerhub.services.resume_service import ResumeService
from careerhub.web.helpers import extension, json_body, query_flag, service


resumes_bp = Blueprint("resumes", __name__, url_prefix="/api/resumes")
cover_letters_bp = Blueprint("cover_letters", __name__, url_prefix="/api/cover-letters")


# -- resumes -----------------------------------------------------------------

@resumes_bp.route("", methods=["GET"])
def list_resumes():
    return jsonify({"success": True, "resumes": service(ResumeService).list_resumes()})


@resumes_bp.route("", methods=["POST"])
def create_resume():
    resume = service(ResumeService).create_resume(json_body("resume_name"))
    return jsonify({"success": True, "resume": resume}), 201


@resumes_bp.route("/templates", methods=["GET"])
def resume_templates():
    return jsonify({"success": True, "templates": ResumeService.list_templates()})


@resumes_bp.route("/from-template", methods=["POST"])
def create_from_template():
    data = json_body("template_name")
    resume = service(ResumeService).create_from_template(data["template_name"], data.get("resume_name"))
    return jsonify({"success": True, "resume": resume}), 201


@resumes_bp.route("/preview", methods=["GET"])
def preview_data():
    return jsonify({"success": True, "data": service(ResumeService).build_resume_data()})


@resumes_bp.route("/<resume_id>", methods=["GET"])
def get_resume(resume_id):
    return jsonify({"success": True, "resume": service(ResumeService).get_resume(resume_id)})


@resumes_bp.route("/<resume_id>", methods=["PATCH", "PUT"])
def update_resume(resume_id):
    resume = service(ResumeService).update_resume(resume_id, json_body())
    return jsonify({"success": True, "resume": resume})


@resumes_bp.route("/<resume_id>", methods=["DELETE"])
def delete_resume(resume_id):
    service(ResumeService).delete_resume(resume_id)
    return jsonify({"success": True})


@resumes_bp.route("/<resume_id>/duplicate", methods=["POST"])
def duplicate_resume(resume_id):
    data = json_body()
    resume = service(ResumeService).duplicate_resume(resume_id, data.get("resume_name"))
    return jsonify({"success": True, "resume": resume}), 201


@resumes_bp.route("/<resume_id>/default", methods=["POST"])
def set_default(resume_id):
    return jsonify({"success": True, "resume": service(ResumeService).set_default(resume_id)})


@resumes_bp.route("/<resume_id>/validate", methods=["GET", "POST"])
def validate_resume(resume_id):
    resumes = service(ResumeService)
    use_ai = query_flag("ai")
    functions = FunctionsService(resumes.client, extension()["cache"]) if use_ai else None
    result = resumes.validate(resume_id, use_ai=use_ai, functions=functions)
    return jsonify({"success": True, **result})


@resumes_bp.route("/<resume_id>/ats", methods=["POST"])
def ats_score(resume_id):
    data = json_body()
    resumes = service(ResumeService)
    job_description = data.get("job_description")
    if not job_description and data.get("job_id"):
        job = resumes.client.table("jobs").select("job_description").eq("id", data["job_id"]).single().execute().data
        job_description = job.get("job_description")
    result = resumes.ats_score(job_description or "", resume_id=resume_id, resume_text=data.get("resume_text"))
    return jsonify({"success": True, **result})


# -- cover letters -------------------------------------------------------------

@cover_letters_bp.route("", methods=["GET"])
def list_cover_letters():
    letters = service(CoverLetterService).list_cover_letters(request.args.get("job_id") or None)
    return jsonify({"success": True, "cover_letters": letters})


@cover_letters_bp.route("", methods=["POST"])
def create_cover_letter():
    letter = service(CoverLetterService).create_cover_letter(json_body("title", "content"))
    return jsonify({"success": True, "cover_letter": letter}), 201


@cover_letters_bp.route("/templates", methods=["GET"])
def cover_letter_templates():
    return jsonify({"success": True, "templates": CoverLetterService.list_templates()})


@cover_letters_bp.route("/generate", methods=["POST"])
def generate_cover_letter():
    data = json_body("job_id")
    letters = service(CoverLetterService)
    letter = letters.generate(
        data["job_id"],
        template_name=data.get("template_name"),
        tone=data.get("tone"),
        save=bool(data.get("save", True)),
        functions=FunctionsService(letters.client, extension()["cache"]),
    )
    return jsonify({"success": True, "cover_letter": letter}), 201


@cover_letters_bp.route("/<letter_id>", methods=["GET"])
def get_cover_letter(letter_id):
    return jsonify({"success": True, "cover_letter": service(CoverLetterService).get_cover_letter(letter_id)})


@cover_letters_bp.route("/<letter_id>", methods=["PATCH", "PUT"])
def update_cover_letter(letter_id):
    letter = service(CoverLetterService).update_cover_letter(letter_id, json_body())
    return jsonify({"success": True, "cover_letter": letter})


@cover_letters_bp.route("/<letter_id>", methods=["DELETE"])
def delete_cover_letter(letter_id):
    service(CoverLetterService).delete_cover_letter(letter_id)
    return jsonify({"success": True})
