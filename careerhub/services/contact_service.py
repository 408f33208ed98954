"""
Professional network service: contacts, logged interactions and follow-up reminders.
"""

from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional

from careerhub.models.contact import Contact, ContactInteraction
from careerhub.services.base import BaseService
from careerhub.services.functions_service import FunctionsService
from careerhub.services.statistics import parse_datetime
from careerhub.utils.logger import get_logger


logger = get_logger(__name__)


def is_follow_up_due(contact: Dict[str, Any], today: Optional[date] = None) -> bool:
    """A contact is due once ``next_follow_up`` is today or earlier."""
    due = parse_datetime(contact.get("next_follow_up"))
    if due is None:
        return False
    return due.date() <= (today or date.today())


class ContactService(BaseService):

    table = "professional_contacts"
    interactions_table = "contact_interactions"

    def list_contacts(self) -> List[Dict[str, Any]]:
        return self._list(self.table)

    def get_contact(self, contact_id: str) -> Dict[str, Any]:
        return self._get(self.table, contact_id)

    def create_contact(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return self._create(self.table, Contact, data)

    def update_contact(self, contact_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        return self._update(self.table, Contact, contact_id, changes)

    def delete_contact(self, contact_id: str) -> None:
        self._delete(self.table, contact_id)

    # -- interactions ------------------------------------------------------

    def list_interactions(self, contact_id: Optional[str] = None) -> List[Dict[str, Any]]:
        filters = {"contact_id": contact_id} if contact_id else {}
        return self._list(self.interactions_table, order_by="interaction_date", **filters)

    def log_interaction(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Record a touchpoint and stamp the contact's ``last_contacted_at``.

        Args:
            data: Interaction fields; ``contact_id`` and ``interaction_type`` are required

        Returns:
            The created interaction row
        """
        interaction = ContactInteraction.model_validate(data)
        self.get_contact(interaction.contact_id)
        created = self._create(self.interactions_table, ContactInteraction, data)

        contacted_at = interaction.interaction_date
        if contacted_at.tzinfo is None:
            contacted_at = contacted_at.replace(tzinfo=timezone.utc)
        self.update_contact(interaction.contact_id, {"last_contacted_at": contacted_at.isoformat()})
        logger.info(f"🤝 Logged {interaction.interaction_type} with contact {interaction.contact_id}")
        return created

    def delete_interaction(self, interaction_id: str) -> None:
        self._delete(self.interactions_table, interaction_id)

    # -- follow-ups --------------------------------------------------------

    def set_follow_up(self, contact_id: str, follow_up: Optional[date]) -> Dict[str, Any]:
        value = follow_up.isoformat() if isinstance(follow_up, (date, datetime)) else follow_up
        return self.update_contact(contact_id, {"next_follow_up": value})

    def get_due_follow_ups(self, today: Optional[date] = None) -> List[Dict[str, Any]]:
        today = today or date.today()
        due = (
            self.client.table(self.table)
            .select("*")
            .eq("user_id", self.user_id)
            .lte("next_follow_up", today.isoformat())
            .order("next_follow_up", ascending=True)
            .execute()
            .data or []
        )
        return [c for c in due if is_follow_up_due(c, today)]

    def relationship_health(self, contact_id: str, functions: Optional[FunctionsService] = None) -> Dict[str, Any]:
        contact = self.get_contact(contact_id)
        interactions = self.list_interactions(contact_id)
        functions = functions or FunctionsService(self.client)
        return functions.calculate_relationship_health(contact, interactions)

    def follow_up_template(self, contact_id: str, context: Optional[str] = None,
                           functions: Optional[FunctionsService] = None) -> Dict[str, Any]:
        contact = self.get_contact(contact_id)
        functions = functions or FunctionsService(self.client)
        return functions.generate_follow_up_template(contact, context)
