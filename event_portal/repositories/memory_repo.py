from typing import Dict, Generic, List, Optional, Type

from event_portal.repositories.base import (
    CommentRepository,
    EventRepository,
    NotificationRepository,
    Repositories,
    Repository,
    T,
    UserRepository,
)
from event_portal.schemas.event import Event, EventComment
from event_portal.schemas.notification import Notification
from event_portal.schemas.user import User


class MemoryRepository(Repository[T], Generic[T]):
    """
    dict-backed table: db[table] = {id: entity}.
    Entities are copied in and out so callers never share state with the store.
    """

    table: str = ""
    model: Type[T]

    def __init__(self, db: Dict[str, Dict[str, T]]):
        self.db = db

    @property
    def rows(self) -> Dict[str, T]:
        return self.db.setdefault(self.table, {})

    def find_by_id(self, entity_id: str) -> Optional[T]:
        row = self.rows.get(entity_id)
        return row.model_copy(deep=True) if row is not None else None

    def save(self, entity: T) -> T:
        self.rows[entity.id] = entity.model_copy(deep=True)
        return entity

    def find(self, **criteria) -> List[T]:
        return [
            row.model_copy(deep=True)
            for row in self.rows.values()
            if all(getattr(row, k) == v for k, v in criteria.items())
        ]

    def delete(self, entity_id: str) -> None:
        self.rows.pop(entity_id, None)


class MemoryEventRepository(MemoryRepository[Event], EventRepository):
    table = "events"
    model = Event


class MemoryUserRepository(MemoryRepository[User], UserRepository):
    table = "users"
    model = User


class MemoryCommentRepository(MemoryRepository[EventComment], CommentRepository):
    table = "event_comments"
    model = EventComment


class MemoryNotificationRepository(MemoryRepository[Notification], NotificationRepository):
    table = "notifications"
    model = Notification


def memory_repositories(db: Optional[dict] = None) -> Repositories:
    db = {} if db is None else db
    return Repositories(
        events=MemoryEventRepository(db),
        users=MemoryUserRepository(db),
        comments=MemoryCommentRepository(db),
        notifications=MemoryNotificationRepository(db),
    )
