from datetime import datetime
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field

from event_portal.domain.events.status import NotificationType, UserRole


# -------------------------
# Soft links (never enforced as foreign keys)
# -------------------------
class EventRef(BaseModel):
    kind: Literal["event"] = "event"
    event_id: str


class SystemRef(BaseModel):
    kind: Literal["system"] = "system"


class ReminderRef(BaseModel):
    kind: Literal["reminder"] = "reminder"
    reminder_id: str


RelatedRef = Annotated[
    Union[EventRef, SystemRef, ReminderRef],
    Field(discriminator="kind"),
]


class Notification(BaseModel):
    id: str
    user_id: str
    type: NotificationType = NotificationType.SYSTEM_ANNOUNCEMENT
    title: str
    message: str
    is_read: bool = False

    related: Optional[RelatedRef] = None
    action_url: Optional[str] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def related_entity_type(self) -> Optional[str]:
        return self.related.kind if self.related else None

    @property
    def related_entity_id(self) -> Optional[str]:
        if isinstance(self.related, EventRef):
            return self.related.event_id
        if isinstance(self.related, ReminderRef):
            return self.related.reminder_id
        return None


# -------------------------
# API payloads
# -------------------------
class NotificationPage(BaseModel):
    notifications: List[Notification]
    unread_count: int
    total: int


class UnreadCount(BaseModel):
    count: int


class BroadcastRequest(BaseModel):
    """
    System announcement fan-out.
    Recipients = user_ids + every user holding one of `roles`.
    """
    title: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)
    user_ids: List[str] = []
    roles: List[UserRole] = []
    action_url: Optional[str] = None
