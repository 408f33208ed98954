"""Download endpoints for resumes, cover letters and the response library."""

from flask import Blueprint, jsonify

from careerhub.services.cover_letter_service import CoverLetterService
from careerhub.services.export_service import ExportService
from careerhub.services.interview_service import InterviewService
from careerhub.services.profile_service import ProfileService
from careerhub.services.resume_service import ResumeService
from careerhub.web.helpers import extension, json_body, send_export, service


bp = Blueprint("exports", __name__, url_prefix="/api/exports")


def _exporter() -> ExportService:
    settings = extension()["settings"]
    return ExportService(settings.export, settings.exports_dir)


def _finish(exporter: ExportService, content: bytes, filename: str, mimetype: str, save: bool):
    if save:
        path = exporter.save_export(content, filename)
        return jsonify({"success": True, "filename": filename, "path": str(path)})
    return send_export(content, filename, mimetype)


def _cover_letter_context(letters: CoverLetterService, letter_id: str, data: dict) -> dict:
    letter = letters.get_cover_letter(letter_id)
    job = {}
    if letter.get("job_id"):
        job = (
            letters.client.table("jobs").select("job_title,company_name")
            .eq("id", letter["job_id"]).maybe_single().execute().data or {}
        )
    profile = ProfileService(letters.client).get_profile() or {}
    return {
        "content": letter["content"],
        "company_name": data.get("company_name") or job.get("company_name") or "",
        "job_title": data.get("job_title") or job.get("job_title") or letter.get("title", ""),
        "applicant_name": (
            data.get("applicant_name")
            or f"{profile.get('first_name') or ''} {profile.get('last_name') or ''}".strip()
        ),
        "contact_info": {
            "email": profile.get("email") or "",
            "phone": profile.get("phone") or "",
            "location": profile.get("location") or "",
        },
    }


@bp.route("/resume", methods=["POST"])
def export_resume():
    data = json_body("format")
    resume_data = service(ResumeService).build_resume_data(data.get("resume_id"))
    customization = resume_data.get("customization") or {}
    exporter = _exporter()

    content, filename, mimetype = exporter.export_resume(
        resume_data,
        data["format"],
        filename=data.get("filename") or resume_data.get("resume_name"),
        sections=data.get("sections") or resume_data.get("sections"),
        template_style=data.get("template_style") or resume_data.get("template_style"),
        include_watermark=data.get("include_watermark"),
        primary_color=data.get("primary_color") or customization.get("primary_color"),
    )
    return _finish(exporter, content, filename, mimetype, bool(data.get("save")))


@bp.route("/cover-letter/<letter_id>", methods=["POST"])
def export_cover_letter(letter_id):
    data = json_body("format")
    context = _cover_letter_context(service(CoverLetterService), letter_id, data)
    exporter = _exporter()

    content, filename, mimetype = exporter.export_cover_letter(
        context["content"],
        context["company_name"],
        context["job_title"],
        context["applicant_name"],
        data["format"],
        format_style=data.get("style"),
        include_letterhead=bool(data.get("include_letterhead", True)),
        contact_info=context["contact_info"],
    )
    return _finish(exporter, content, filename, mimetype, bool(data.get("save")))


@bp.route("/cover-letter/<letter_id>/email", methods=["GET"])
def cover_letter_email(letter_id):
    context = _cover_letter_context(service(CoverLetterService), letter_id, {})
    email = ExportService.cover_letter_email(
        context["content"], context["company_name"], context["job_title"], context["applicant_name"],
    )
    return jsonify({"success": True, "email": email})


@bp.route("/responses", methods=["POST"])
def export_responses():
    data = json_body("format")
    responses = service(InterviewService).list_responses()
    exporter = _exporter()

    content, filename, mimetype = exporter.export_responses(
        responses,
        data["format"],
        include_types=data.get("include_types"),
        favorites_only=bool(data.get("favorites_only")),
    )
    return _finish(exporter, content, filename, mimetype, bool(data.get("save")))
