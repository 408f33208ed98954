"""
Resume service: saved resume versions, templates, validation and ATS scoring.
"""

from typing import Any, Dict, List, Optional

from careerhub.models.documents import RESUME_TEMPLATES, Resume
from careerhub.services.base import BaseService
from careerhub.services.export_service import ExportService
from careerhub.services.functions_service import FunctionsService
from careerhub.services.profile_service import ProfileService
from careerhub.utils.logger import get_logger
from careerhub.utils.resume_validator import ResumeValidator, calculate_score, extract_text_content


logger = get_logger(__name__)


class ResumeService(BaseService):
    """CRUD for resumes plus build, validate and score helpers."""

    table = "resumes"

    def list_resumes(self) -> List[Dict[str, Any]]:
        return self._list(self.table, order_by="updated_at")

    def get_resume(self, resume_id: str) -> Dict[str, Any]:
        return self._get(self.table, resume_id)

    def create_resume(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return self._create(self.table, Resume, data)

    def update_resume(self, resume_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        return self._update(self.table, Resume, resume_id, changes)

    def delete_resume(self, resume_id: str) -> None:
        self._delete(self.table, resume_id)

    # -- templates ---------------------------------------------------------

    @staticmethod
    def list_templates() -> List[Dict[str, Any]]:
        return RESUME_TEMPLATES

    def create_from_template(self, template_name: str, resume_name: Optional[str] = None) -> Dict[str, Any]:
        template = next((t for t in RESUME_TEMPLATES if t["name"] == template_name), None)
        if template is None:
            raise ValueError(f"Unknown resume template: {template_name}")

        return self.create_resume({
            "resume_name": resume_name or template["name"],
            "template_style": template["style"],
            "content": {"sections": [
                {"id": section.lower().replace(" ", "_"), "enabled": True, "order": idx}
                for idx, section in enumerate(template["sections"])
            ]},
        })

    def duplicate_resume(self, resume_id: str, resume_name: Optional[str] = None) -> Dict[str, Any]:
        """Copy a resume as a new, non-default version."""
        source = self.get_resume(resume_id)
        name = resume_name or f"{source.get('resume_name', 'Resume')} (Copy)"
        copy = self.create_resume({
            "resume_name": name[:100],
            "template_style": source.get("template_style") or "classic",
            "content": source.get("content") or {},
            "customization_overrides": source.get("customization_overrides") or {},
            "job_id": source.get("job_id"),
            "is_default": False,
            "version_number": (source.get("version_number") or 1) + 1,
        })
        logger.info(f"📑 Duplicated resume {resume_id} as {copy.get('id')}")
        return copy

    def set_default(self, resume_id: str) -> Dict[str, Any]:
        """Mark one resume as the default and clear the flag on all others."""
        self.get_resume(resume_id)
        (
            self.client.table(self.table)
            .update({"is_default": False})
            .eq("user_id", self.user_id)
            .neq("id", resume_id)
            .execute()
        )
        return self.update_resume(resume_id, {"is_default": True})

    # -- build / validate ----------------------------------------------------

    def build_resume_data(self, resume_id: Optional[str] = None) -> Dict[str, Any]:
        """
        Assemble the data every resume format renders from.

        Args:
            resume_id: Saved resume whose summary and section settings to use;
                without one the bare profile is used

        Returns:
            Dict with profile, summary, the five section lists, sections,
            template_style and resume_name
        """
        data = ProfileService(self.client, self._user_id).get_full_profile()
        resume = self.get_resume(resume_id) if resume_id else {}
        content = resume.get("content") or {}
        profile = data.get("profile") or {}

        data["summary"] = content.get("summary") or profile.get("bio") or ""
        data["sections"] = content.get("sections")
        data["template_style"] = resume.get("template_style") or "classic"
        data["resume_name"] = resume.get("resume_name") or "Resume"
        data["customization"] = resume.get("customization_overrides") or {}
        return data

    def validate(
        self,
        resume_id: Optional[str] = None,
        use_ai: bool = False,
        functions: Optional[FunctionsService] = None,
    ) -> Dict[str, Any]:
        """
        Rule-based validation, optionally followed by the AI content check.

        AI findings are reported alongside the rule-based issues but the score
        only reflects the rule-based ones.
        """
        data = self.build_resume_data(resume_id)
        result = ResumeValidator().validate(data)
        result["ai_issues"] = []

        if use_ai:
            functions = functions or FunctionsService(self.client)
            reply = functions.validate_resume_content(extract_text_content(data), data["resume_name"])
            ai_issues = ResumeValidator.issues_from_ai_result(reply or {})
            result["ai_issues"] = [issue.model_dump() for issue in ai_issues]
            result["ai_score"] = calculate_score(ai_issues)
            logger.info(f"🤖 AI validation added {len(ai_issues)} issue(s)")

        return result

    def ats_score(self, job_description: str, resume_id: Optional[str] = None,
                  resume_text: Optional[str] = None) -> Dict[str, Any]:
        """Score the resume text against a job description for ATS keyword coverage."""
        if not job_description or not job_description.strip():
            raise ValueError("A job description is required for ATS scoring")
        if resume_text is None:
            data = self.build_resume_data(resume_id)
            resume_text = ExportService().resume_to_text(data, data.get("sections"), include_watermark=False)
        return ResumeValidator().calculate_ats_score(resume_text, job_description)
