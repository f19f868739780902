import logging
from dataclasses import dataclass
from typing import List, Optional

from event_portal.core.errors import ForbiddenError, NotFoundError, ValidationError
from event_portal.domain.clock import SystemClock
from event_portal.domain.events import permissions
from event_portal.domain.events.permissions import PermissionResult
from event_portal.domain.events.rules import comment_type_for, missing_actual_metrics
from event_portal.domain.events.status import STATUS_VALUES, CommentType, EventStatus
from event_portal.domain.events.transitions import allowed_targets
from event_portal.repositories.base import Repositories
from event_portal.schemas.event import Event, EventComment, TransitionOption
from event_portal.schemas.user import User
from event_portal.services.notification_service import NotificationService
from event_portal.utils.id_generator import generate_uuid

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StatusChangeResult:
    previous_status: EventStatus
    new_status: EventStatus


class EventWorkflowService:
    """
    Drives an event through its lifecycle.

    The status write is the only step whose failure aborts a request.
    Comment and notification side effects run after it; a failed comment
    write propagates, a failed notification is logged and dropped.
    """

    def __init__(self, repos: Repositories, notifier: Optional[NotificationService] = None, clock=None):
        self.repos = repos
        self.clock = clock or SystemClock()
        self.notifier = notifier or NotificationService(repos.notifications, repos.users, self.clock)

    # -------------------------
    # Loading
    # -------------------------
    def get_event(self, event_id: str) -> Event:
        event = self.repos.events.find_by_id(event_id)
        if event is None:
            raise NotFoundError("Event not found")
        return event

    def get_user(self, user_id: Optional[str]) -> User:
        user = self.repos.users.find_by_id(user_id) if user_id else None
        if user is None:
            raise NotFoundError("User not found")
        return user

    # -------------------------
    # Status change
    # -------------------------
    def change_status(
        self,
        event_id: str,
        new_status: str,
        actor_id: str,
        comment: Optional[str] = None,
    ) -> StatusChangeResult:
        if new_status not in STATUS_VALUES:
            raise ValidationError("Invalid status value")
        target = EventStatus(new_status)

        event = self.get_event(event_id)
        actor = self.get_user(actor_id)
        previous = event.status

        if target == EventStatus.COMPLETED:
            missing = missing_actual_metrics(event)
            if missing:
                raise ValidationError(
                    f"Cannot mark event as completed. Missing actual values: "
                    f"{', '.join(missing)}. Please update the event with actual results first."
                )

        verdict = permissions.evaluate_transition(actor, event, target)
        if not verdict.allowed:
            logger.info(
                "Status change denied",
                extra={"props": {
                    "event_id": event.id,
                    "actor_id": actor.id,
                    "from": previous.value,
                    "to": target.value,
                    "reason": verdict.reason,
                }},
            )
            if verdict.invalid_transition:
                raise ValidationError(verdict.reason)
            raise ForbiddenError(verdict.reason)

        event.status = target
        event.updated_at = self.clock.now()
        self.repos.events.save(event)

        text = (comment or "").strip()
        if text:
            self._save_comment(
                event.id,
                actor.id,
                text,
                comment_type_for(target),
                status_from=previous,
                status_to=target,
            )

        try:
            self.notifier.notify_status_change(event, previous, target, actor, text)
        except Exception:
            logger.exception(
                "Status change notification failed",
                extra={"props": {"event_id": event.id, "to": target.value}},
            )

        logger.info(
            "Event status changed",
            extra={"props": {
                "event_id": event.id,
                "actor_id": actor.id,
                "from": previous.value,
                "to": target.value,
            }},
        )
        return StatusChangeResult(previous_status=previous, new_status=target)

    def available_transitions(self, event_id: str, actor_id: str) -> List[TransitionOption]:
        """Every outgoing edge of the current status, evaluated for this actor."""
        event = self.get_event(event_id)
        actor = self.get_user(actor_id)

        options = []
        for target in allowed_targets(event.status):
            verdict = permissions.evaluate_transition(actor, event, target)
            options.append(
                TransitionOption(status=target, allowed=verdict.allowed, reason=verdict.reason)
            )
        return options

    # -------------------------
    # Comments
    # -------------------------
    def _save_comment(
        self,
        event_id: str,
        user_id: str,
        text: str,
        comment_type: CommentType,
        status_from: Optional[EventStatus] = None,
        status_to: Optional[EventStatus] = None,
    ) -> EventComment:
        row = EventComment(
            id=generate_uuid(),
            event_id=event_id,
            user_id=user_id,
            comment=text,
            comment_type=comment_type,
            status_from=status_from,
            status_to=status_to,
            created_at=self.clock.now(),
        )
        return self.repos.comments.save(row)

    def add_comment(self, event_id: str, actor_id: str, text: Optional[str]) -> EventComment:
        text = (text or "").strip()
        if not text:
            raise ValidationError("Comment text is required")

        event = self.get_event(event_id)
        actor = self.get_user(actor_id)
        return self._save_comment(event.id, actor.id, text, CommentType.GENERAL)

    def list_comments(self, event_id: str) -> List[EventComment]:
        event = self.get_event(event_id)
        rows = self.repos.comments.find(event_id=event.id)
        return sorted(rows, key=lambda c: c.created_at)

    # -------------------------
    # Permission queries
    # -------------------------
    def check_edit_permission(self, event_id: str, actor_id: str) -> PermissionResult:
        return permissions.check_edit_permission(self.get_user(actor_id), self.get_event(event_id))

    def check_delete_permission(self, event_id: str, actor_id: str) -> PermissionResult:
        return permissions.check_delete_permission(self.get_user(actor_id), self.get_event(event_id))
