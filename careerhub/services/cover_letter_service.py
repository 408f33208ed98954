"""Cover letter service."""

from typing import Any, Dict, List, Optional

from careerhub.models.documents import COVER_LETTER_TEMPLATES, CoverLetter
from careerhub.services.base import BaseService
from careerhub.services.functions_service import FunctionsService
from careerhub.services.profile_service import ProfileService
from careerhub.utils.logger import get_logger


logger = get_logger(__name__)


class CoverLetterService(BaseService):

    table = "cover_letters"

    def list_cover_letters(self, job_id: Optional[str] = None) -> List[Dict[str, Any]]:
        filters = {"job_id": job_id} if job_id else {}
        return self._list(self.table, **filters)

    def get_cover_letter(self, letter_id: str) -> Dict[str, Any]:
        return self._get(self.table, letter_id)

    def create_cover_letter(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return self._create(self.table, CoverLetter, data)

    def update_cover_letter(self, letter_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        return self._update(self.table, CoverLetter, letter_id, changes)

    def delete_cover_letter(self, letter_id: str) -> None:
        self._delete(self.table, letter_id)

    @staticmethod
    def list_templates() -> List[Dict[str, Any]]:
        return COVER_LETTER_TEMPLATES

    def generate(
        self,
        job_id: str,
        template_name: Optional[str] = None,
        tone: Optional[str] = None,
        save: bool = True,
        functions: Optional[FunctionsService] = None,
    ) -> Dict[str, Any]:
        """
        Draft a cover letter for a tracked job with ``generate-cover-letter``.

        Args:
            job_id: Job to write for
            template_name: One of ``COVER_LETTER_TEMPLATES``; its tone is used when ``tone`` is omitted
            tone: Writing tone
            save: Store the draft as a new cover letter

        Returns:
            The saved row, or the unsaved draft fields
        """
        template = None
        if template_name:
            template = next((t for t in COVER_LETTER_TEMPLATES if t["name"] == template_name), None)
            if template is None:
                raise ValueError(f"Unknown cover letter template: {template_name}")
        tone = tone or (template["tone"] if template else "professional")

        job = self.client.table("jobs").select("*").eq("id", job_id).eq("user_id", self.user_id).single().execute().data
        profile = ProfileService(self.client, self._user_id).get_full_profile()

        functions = functions or FunctionsService(self.client)
        reply = functions.generate_cover_letter(
            job, profile, tone=tone, template=template_name,
            structure=template["structure"] if template else None,
        )
        content = (reply or {}).get("coverLetter") or (reply or {}).get("content") or ""
        if not content:
            raise ValueError("Cover letter generation returned no content")

        draft = {
            "title": f"{job.get('job_title', 'Cover Letter')} - {job.get('company_name', '')}".strip(" -")[:200],
            "content": content,
            "job_id": job_id,
            "template_name": template_name,
            "tone": tone,
        }
        logger.info(f"✉️ Generated cover letter for {job.get('company_name')}")
        if save:
            return self.create_cover_letter(draft)
        return draft
