from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel

from event_portal.schemas.event import Event, EventComment
from event_portal.schemas.notification import Notification
from event_portal.schemas.user import User

T = TypeVar("T", bound=BaseModel)


class PersistenceError(Exception):
    """Raised by any repository when the storage backend fails. Never retried here."""


class Repository(ABC, Generic[T]):
    """
    Abstract storage boundary for one entity type.

    The workflow core only relies on these operations; query planning,
    transactions and retries belong to the implementation.
    """

    @abstractmethod
    def find_by_id(self, entity_id: str) -> Optional[T]:
        """Return the entity or None."""
        pass

    @abstractmethod
    def save(self, entity: T) -> T:
        """Create or overwrite (last write wins)."""
        pass

    def save_all(self, entities: List[T]) -> List[T]:
        """Persist several entities as one batch, preserving order."""
        return [self.save(e) for e in entities]

    @abstractmethod
    def find(self, **criteria) -> List[T]:
        """Equality match on every given field, insertion order."""
        pass

    @abstractmethod
    def delete(self, entity_id: str) -> None:
        pass


# -------------------------
# Entity-specific contracts
# -------------------------
class EventRepository(Repository[Event], ABC):
    pass


class UserRepository(Repository[User], ABC):
    pass


class CommentRepository(Repository[EventComment], ABC):
    pass


class NotificationRepository(Repository[Notification], ABC):
    pass


@dataclass
class Repositories:
    events: EventRepository
    users: UserRepository
    comments: CommentRepository
    notifications: NotificationRepository
