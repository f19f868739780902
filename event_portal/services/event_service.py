import logging
import math
from typing import List, Optional

from event_portal.core.errors import ForbiddenError, ValidationError
from event_portal.domain.events import permissions
from event_portal.domain.events.status import EventStatus, UserRole
from event_portal.schemas.event import (
    Event,
    EventCreate,
    EventPage,
    EventUpdate,
    Pagination,
    REQUIRED_EVENT_FIELDS,
)
from event_portal.services.workflow_service import EventWorkflowService
from event_portal.utils.id_generator import generate_event_id

logger = logging.getLogger(__name__)


class EventService:
    """
    Event CRUD around the workflow engine.
    Status is never written here: it only moves through change_status().
    """

    def __init__(self, workflow: EventWorkflowService):
        self.workflow = workflow
        self.repos = workflow.repos
        self.notifier = workflow.notifier
        self.clock = workflow.clock

    # -------------------------
    # Create
    # -------------------------
    def create_event(self, actor_id: str, payload: EventCreate) -> Event:
        actor = self.workflow.get_user(actor_id)

        if payload.end_date < payload.start_date:
            raise ValidationError("End date must be after start date")

        now = self.clock.now()
        event = Event(
            id=generate_event_id(now),
            organizer_id=actor.id,
            status=EventStatus.DRAFT,
            is_active=True,
            created_at=now,
            updated_at=now,
            **payload.model_dump(),
        )
        self.repos.events.save(event)
        logger.info(
            "Event created",
            extra={"props": {"event_id": event.id, "organizer_id": actor.id, "branch_id": event.branch_id}},
        )

        try:
            self.notifier.notify_event_created(event)
        except Exception:
            logger.exception("Event created notification failed", extra={"props": {"event_id": event.id}})

        return event

    # -------------------------
    # Read
    # -------------------------
    def get_event(self, event_id: str) -> Event:
        return self.workflow.get_event(event_id)

    def list_events(
        self,
        status: Optional[EventStatus] = None,
        branch_id: Optional[str] = None,
        search: Optional[str] = None,
        page: int = 1,
        size: int = 10,
    ) -> EventPage:
        criteria = {"is_active": True}
        if status is not None:
            criteria["status"] = EventStatus(status)
        if branch_id:
            criteria["branch_id"] = branch_id

        rows = self.repos.events.find(**criteria)

        if search:
            needle = search.lower()
            rows = [
                e for e in rows
                if needle in e.title.lower()
                or needle in e.description.lower()
                or needle in e.location.lower()
            ]

        rows.sort(key=lambda e: e.updated_at, reverse=True)

        total = len(rows)
        total_pages = math.ceil(total / size) if size else 0
        start = (page - 1) * size
        return EventPage(
            events=rows[start:start + size],
            pagination=Pagination(
                current_page=page,
                total_pages=total_pages,
                total_count=total,
                limit=size,
                has_next=page < total_pages,
                has_prev=page > 1,
            ),
        )

    def pending_approvals(self, actor_id: str) -> List[Event]:
        """Events waiting on this actor's approval step."""
        actor = self.workflow.get_user(actor_id)
        events = self.repos.events

        if actor.role == UserRole.GENERAL_MANAGER:
            if actor.branch_id is None:
                return []
            rows = events.find(status=EventStatus.PENDING_GM, branch_id=actor.branch_id, is_active=True)
        elif actor.role == UserRole.MARKETING_HEAD:
            rows = events.find(status=EventStatus.PENDING_MARKETING, is_active=True)
        elif actor.role == UserRole.ADMIN:
            rows = events.find(status=EventStatus.PENDING_GM, is_active=True)
            rows += events.find(status=EventStatus.PENDING_MARKETING, is_active=True)
        else:
            return []

        return sorted(rows, key=lambda e: e.created_at)

    # -------------------------
    # Update / delete
    # -------------------------
    def update_event(self, event_id: str, actor_id: str, payload: EventUpdate) -> Event:
        event = self.workflow.get_event(event_id)
        actor = self.workflow.get_user(actor_id)

        verdict = permissions.check_edit_permission(actor, event)
        if not verdict.allowed:
            raise ForbiddenError(verdict.reason)

        changes = payload.model_dump(exclude_unset=True)
        if not changes:
            return event

        cleared = [f for f in REQUIRED_EVENT_FIELDS if f in changes and changes[f] is None]
        if cleared:
            raise ValidationError(f"Field cannot be null: {', '.join(cleared)}")

        start = changes.get("start_date", event.start_date)
        end = changes.get("end_date", event.end_date)
        if start and end and end < start:
            raise ValidationError("End date must be after start date")

        for field, value in changes.items():
            setattr(event, field, value)
        event.updated_at = self.clock.now()
        self.repos.events.save(event)

        logger.info(
            "Event updated",
            extra={"props": {"event_id": event.id, "actor_id": actor.id, "fields": sorted(changes)}},
        )
        return event

    def delete_event(self, event_id: str, actor_id: str) -> None:
        event = self.workflow.get_event(event_id)
        actor = self.workflow.get_user(actor_id)

        verdict = permissions.check_delete_permission(actor, event)
        if not verdict.allowed:
            raise ForbiddenError(verdict.reason)

        for comment in self.repos.comments.find(event_id=event.id):
            self.repos.comments.delete(comment.id)
        self.repos.events.delete(event.id)

        logger.info("Event deleted", extra={"props": {"event_id": event.id, "actor_id": actor.id}})
