"""
Profile service.

Covers the user profile row and its five list sections (employment,
education, certifications, skills, projects).
"""

from typing import Any, Dict, List, Optional

from careerhub.models.profile import (
    Certification,
    EducationEntry,
    EmploymentEntry,
    Project,
    Skill,
    UserProfile,
)
from careerhub.services import statistics
from careerhub.services.base import BaseService
from careerhub.utils.logger import get_logger


logger = get_logger(__name__)


# section key -> (table, model, order column, ascending)
PROFILE_SECTIONS = {
    "employment": ("employment_history", EmploymentEntry, "start_date", False),
    "education": ("education", EducationEntry, "graduation_date", False),
    "certifications": ("certifications", Certification, "date_earned", False),
    "skills": ("skills", Skill, "display_order", True),
    "projects": ("projects", Project, "start_date", False),
}


class ProfileService(BaseService):
    """Read and edit the signed-in user's profile."""

    def get_profile(self) -> Optional[Dict[str, Any]]:
        return (
            self.client.table("user_profiles")
            .select("*")
            .eq("user_id", self.user_id)
            .maybe_single()
            .execute()
            .data
        )

    def save_profile(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Create or replace the profile row (one per user)."""
        profile = UserProfile.model_validate(data)
        row = {**self.to_row(profile), "user_id": self.user_id}
        result = self.client.table("user_profiles").upsert(row, on_conflict="user_id").execute()
        logger.info("👤 Profile saved")
        return result.data[0] if result.data else row

    # -- sections ----------------------------------------------------------

    @staticmethod
    def _section(section: str):
        try:
            return PROFILE_SECTIONS[section]
        except KeyError:
            raise ValueError(f"Unknown profile section: {section}") from None

    def list_section(self, section: str) -> List[Dict[str, Any]]:
        table, _, order_by, ascending = self._section(section)
        return self._list(table, order_by=order_by, ascending=ascending)

    def get_section_item(self, section: str, item_id: str) -> Dict[str, Any]:
        table = self._section(section)[0]
        return self._get(table, item_id)

    def create_section_item(self, section: str, data: Dict[str, Any]) -> Dict[str, Any]:
        table, model_cls, _, _ = self._section(section)
        return self._create(table, model_cls, data)

    def update_section_item(self, section: str, item_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        table, model_cls, _, _ = self._section(section)
        return self._update(table, model_cls, item_id, changes)

    def delete_section_item(self, section: str, item_id: str) -> None:
        table = self._section(section)[0]
        self._delete(table, item_id)

    def list_employment(self) -> List[Dict[str, Any]]:
        return self.list_section("employment")

    def list_education(self) -> List[Dict[str, Any]]:
        return self.list_section("education")

    def list_certifications(self) -> List[Dict[str, Any]]:
        return self.list_section("certifications")

    def list_skills(self) -> List[Dict[str, Any]]:
        return self.list_section("skills")

    def list_projects(self) -> List[Dict[str, Any]]:
        return self.list_section("projects")

    # -- aggregate views ---------------------------------------------------

    def get_full_profile(self) -> Dict[str, Any]:
        """Profile row plus every section, the shape resume export and validation expect."""
        return {
            "profile": self.get_profile() or {},
            **{section: self.list_section(section) for section in PROFILE_SECTIONS},
        }

    def get_overview(self) -> Dict[str, Any]:
        """Completeness, badges, industry benchmark and job summary for the dashboard."""
        full = self.get_full_profile()
        jobs = self.client.table("jobs").select("status").eq("user_id", self.user_id).execute().data or []
        return statistics.profile_overview(
            full["profile"] or None,
            full["employment"],
            full["education"],
            full["certifications"],
            full["skills"],
            full["projects"],
            jobs=jobs,
        )
