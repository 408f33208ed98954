"""
Shared CRUD plumbing for the page-level services.

Every service works on rows owned by one user: reads are filtered by
``user_id`` and writes stamp it. Nothing is kept between calls.
"""

from typing import Any, Dict, List, Optional, Type

from pydantic import BaseModel

from careerhub.backend.client import BackendClient
from careerhub.exceptions import AuthError
from careerhub.utils.logger import get_logger


logger = get_logger(__name__)


class BaseService:
    """Base class holding the shared client and the current user id."""

    def __init__(self, client: BackendClient, user_id: Optional[str] = None):
        """
        Args:
            client: Backend client, normally bound to the signed-in user's session
            user_id: Id of the signed-in user (falls back to the session's user)
        """
        self.client = client
        self._user_id = user_id

    @property
    def user_id(self) -> str:
        user_id = self._user_id
        if not user_id:
            session = self.client.auth.get_session()
            user_id = session.user_id if session else None
        if not user_id:
            raise AuthError("Not authenticated", status=401)
        return user_id

    @staticmethod
    def to_row(model: BaseModel) -> Dict[str, Any]:
        """Serialize a model for insertion, leaving out ids the backend assigns."""
        return model.model_dump(mode="json", exclude_none=True, exclude={"id", "user_id"})

    def _list(
        self,
        table: str,
        order_by: Optional[str] = "created_at",
        ascending: bool = False,
        **filters: Any,
    ) -> List[Dict[str, Any]]:
        query = self.client.table(table).select("*").eq("user_id", self.user_id)
        for column, value in filters.items():
            query = query.eq(column, value)
        if order_by:
            query = query.order(order_by, ascending=ascending)
        return query.execute().data or []

    def _get(self, table: str, row_id: str) -> Dict[str, Any]:
        return (
            self.client.table(table)
            .select("*")
            .eq("id", row_id)
            .eq("user_id", self.user_id)
            .single()
            .execute()
            .data
        )

    def _create(self, table: str, model_cls: Type[BaseModel], data: Dict[str, Any]) -> Dict[str, Any]:
        model = model_cls.model_validate(data)
        row = {**self.to_row(model), "user_id": self.user_id}
        result = self.client.table(table).insert(row).execute()
        created = result.data[0] if isinstance(result.data, list) and result.data else result.data
        logger.info(f"✅ Created {table} row {created.get('id') if created else ''}")
        return created

    def _update(
        self,
        table: str,
        model_cls: Type[BaseModel],
        row_id: str,
        changes: Dict[str, Any],
    ) -> Dict[str, Any]:
        """
        Validate ``changes`` merged onto the current row, then write only the changed fields.

        Returns:
            The updated row as returned by the backend
        """
        current = self._get(table, row_id)
        merged = model_cls.model_validate({**current, **changes})
        fields = (set(changes) & set(model_cls.model_fields)) - {"id", "user_id"}
        validated = merged.model_dump(mode="json", include=fields)
        result = (
            self.client.table(table)
            .update(validated)
            .eq("id", row_id)
            .eq("user_id", self.user_id)
            .execute()
        )
        logger.info(f"✏️ Updated {table} row {row_id}")
        return result.data[0] if result.data else {**current, **validated}

    def _delete(self, table: str, row_id: str) -> None:
        self.client.table(table).delete().eq("id", row_id).eq("user_id", self.user_id).execute()
        logger.info(f"🗑️ Deleted {table} row {row_id}")
