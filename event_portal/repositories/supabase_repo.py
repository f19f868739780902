import logging
from enum import Enum
from typing import Generic, List, Optional, Type

from supabase import Client

from event_portal.db.supabase_client import get_supabase
from event_portal.repositories.base import (
    CommentRepository,
    EventRepository,
    NotificationRepository,
    PersistenceError,
    Repositories,
    Repository,
    T,
    UserRepository,
)
from event_portal.schemas.event import Event, EventComment
from event_portal.schemas.notification import Notification
from event_portal.schemas.user import User

logger = logging.getLogger(__name__)


class SupabaseRepository(Repository[T], Generic[T]):
    """
    Supabase (Postgres) implementation of Repository

    Notes:
    - one table per entity, columns = model fields (snake_case)
    - every client failure is raised as PersistenceError
    - no retries here; the client / platform owns that
    """

    table: str = ""
    model: Type[T]
    order_column = "created_at"

    def __init__(self, client: Optional[Client] = None):
        self._client = client

    @property
    def client(self) -> Client:
        if self._client is None:
            self._client = get_supabase()
        return self._client

    def _to_row(self, entity: T) -> dict:
        return entity.model_dump(mode="json")

    def _from_row(self, row: dict) -> T:
        return self.model.model_validate(row)

    def _fail(self, op: str, exc: Exception) -> PersistenceError:
        logger.error(
            f"Supabase {op} failed on {self.table}",
            extra={"props": {"table": self.table, "op": op, "error": str(exc)}},
        )
        return PersistenceError(f"{op} failed on {self.table}")

    # -------------------------
    # Read
    # -------------------------
    def find_by_id(self, entity_id: str) -> Optional[T]:
        try:
            res = (
                self.client
                .table(self.table)
                .select("*")
                .eq("id", entity_id)
                .limit(1)
                .execute()
            )
        except Exception as exc:
            raise self._fail("find_by_id", exc) from exc

        if not res or not res.data:
            return None
        return self._from_row(res.data[0])

    def find(self, **criteria) -> List[T]:
        try:
            query = self.client.table(self.table).select("*")
            for field, value in criteria.items():
                if isinstance(value, Enum):
                    value = value.value
                query = query.eq(field, value)
            res = query.order(self.order_column, desc=False).execute()
        except Exception as exc:
            raise self._fail("find", exc) from exc

        return [self._from_row(r) for r in (res.data or [])]

    # -------------------------
    # Write
    # -------------------------
    def save(self, entity: T) -> T:
        try:
            self.client.table(self.table).upsert(self._to_row(entity)).execute()
        except Exception as exc:
            raise self._fail("save", exc) from exc
        return entity

    def save_all(self, entities: List[T]) -> List[T]:
        if not entities:
            return []
        try:
            self.client.table(self.table).upsert(
                [self._to_row(e) for e in entities]
            ).execute()
        except Exception as exc:
            raise self._fail("save_all", exc) from exc
        return entities

    def delete(self, entity_id: str) -> None:
        try:
            self.client.table(self.table).delete().eq("id", entity_id).execute()
        except Exception as exc:
            raise self._fail("delete", exc) from exc


class SupabaseEventRepository(SupabaseRepository[Event], EventRepository):
    table = "events"
    model = Event


class SupabaseUserRepository(SupabaseRepository[User], UserRepository):
    table = "users"
    model = User
    order_column = "id"


class SupabaseCommentRepository(SupabaseRepository[EventComment], CommentRepository):
    table = "event_comments"
    model = EventComment


class SupabaseNotificationRepository(SupabaseRepository[Notification], NotificationRepository):
    """
    `related` is stored as jsonb; related_entity_id / related_entity_type
    columns are written alongside for SQL-side filtering.
    """
    table = "notifications"
    model = Notification

    def _to_row(self, entity: Notification) -> dict:
        row = entity.model_dump(mode="json")
        row["related_entity_id"] = entity.related_entity_id
        row["related_entity_type"] = entity.related_entity_type
        return row


def supabase_repositories(client: Optional[Client] = None) -> Repositories:
    return Repositories(
        events=SupabaseEventRepository(client),
        users=SupabaseUserRepository(client),
        comments=SupabaseCommentRepository(client),
        notifications=SupabaseNotificationRepository(client),
    )
