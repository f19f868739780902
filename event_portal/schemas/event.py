# Event aggregate + request / response payloads
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from event_portal.domain.events.status import CommentType, EventStatus


# =================================================
# Entities
# =================================================
class Event(BaseModel):
    """
    The aggregate whose status is driven by the workflow engine.

    - organizer_id / branch_id are fixed at creation
    - status only changes through the transition table
    - actual_* metrics gate the move into `completed`
    """
    model_config = ConfigDict(validate_assignment=True)

    id: str
    title: str
    description: str = ""
    location: str = ""
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    budget: float = 0.0

    event_type_id: Optional[str] = None
    branch_id: str
    organizer_id: str

    status: EventStatus = EventStatus.DRAFT
    is_planned: bool = True

    # Planned metrics (advisory)
    planned_budget: Optional[float] = None
    planned_enquiries: Optional[int] = None
    planned_orders: Optional[int] = None

    # Actual metrics (post-event results)
    actual_budget: Optional[float] = None
    actual_enquiries: Optional[int] = None
    actual_orders: Optional[int] = None

    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class EventComment(BaseModel):
    id: str
    event_id: str
    user_id: str
    comment: str
    comment_type: CommentType = CommentType.GENERAL
    status_from: Optional[EventStatus] = None
    status_to: Optional[EventStatus] = None
    created_at: Optional[datetime] = None


# =================================================
# Requests
# =================================================
class EventCreate(BaseModel):
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    location: str = Field(..., min_length=1)
    start_date: datetime
    end_date: datetime
    branch_id: str
    event_type_id: str
    budget: float = 0.0
    is_planned: bool = True

    planned_budget: Optional[float] = None
    planned_enquiries: Optional[int] = None
    planned_orders: Optional[int] = None
    actual_budget: Optional[float] = None
    actual_enquiries: Optional[int] = None
    actual_orders: Optional[int] = None


class EventUpdate(BaseModel):
    """
    Partial update. Only fields present in the request are applied.
    branch / organizer are intentionally absent (immutable after creation).
    """
    title: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    event_type_id: Optional[str] = None
    budget: Optional[float] = None
    is_planned: Optional[bool] = None

    planned_budget: Optional[float] = None
    planned_enquiries: Optional[int] = None
    planned_orders: Optional[int] = None
    actual_budget: Optional[float] = None
    actual_enquiries: Optional[int] = None
    actual_orders: Optional[int] = None


# set at creation, never cleared by an update
REQUIRED_EVENT_FIELDS = (
    "title",
    "description",
    "location",
    "start_date",
    "end_date",
    "event_type_id",
    "budget",
    "is_planned",
)


class StatusChangeRequest(BaseModel):
    # plain str: unknown values are reported as a workflow validation error
    status: str
    comment: Optional[str] = None


class CommentCreate(BaseModel):
    comment: str


# =================================================
# Responses
# =================================================
class StatusChangeResponse(BaseModel):
    message: str = "Event status updated successfully"
    previous_status: EventStatus
    new_status: EventStatus


class PermissionResponse(BaseModel):
    allowed: bool
    reason: str


class TransitionOption(BaseModel):
    status: EventStatus
    allowed: bool
    reason: str


class Pagination(BaseModel):
    current_page: int
    total_pages: int
    total_count: int
    limit: int
    has_next: bool
    has_prev: bool


class EventPage(BaseModel):
    events: List[Event]
    pagination: Pagination
