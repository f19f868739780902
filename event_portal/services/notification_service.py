import logging
from typing import Iterable, List, Optional

from event_portal.domain.clock import SystemClock
from event_portal.domain.events.rules import truncate_comment
from event_portal.domain.events.status import EventStatus, NotificationType, UserRole
from event_portal.repositories.base import NotificationRepository, UserRepository
from event_portal.schemas.event import Event
from event_portal.schemas.notification import (
    EventRef,
    Notification,
    NotificationPage,
    RelatedRef,
    SystemRef,
)
from event_portal.schemas.user import User
from event_portal.utils.id_generator import generate_uuid

logger = logging.getLogger(__name__)


def event_link(event: Event) -> str:
    return f"/events/{event.id}"


class NotificationService:
    """
    Notification dispatcher.

    Only creates inbox rows; mail / push delivery lives outside this service.
    Every row is independent: bulk creation writes one row per recipient,
    in the order given, with no de-duplication across calls.
    """

    def __init__(self, notifications: NotificationRepository, users: UserRepository, clock=None):
        self.notifications = notifications
        self.users = users
        self.clock = clock or SystemClock()

    # -------------------------
    # Creation
    # -------------------------
    def _build(
        self,
        user_id: str,
        type: NotificationType,
        title: str,
        message: str,
        related: Optional[RelatedRef],
        action_url: Optional[str],
    ) -> Notification:
        now = self.clock.now()
        return Notification(
            id=generate_uuid(),
            user_id=user_id,
            type=type,
            title=title,
            message=message,
            is_read=False,
            related=related,
            action_url=action_url,
            created_at=now,
            updated_at=now,
        )

    def create(
        self,
        user_id: str,
        type: NotificationType,
        title: str,
        message: str,
        related: Optional[RelatedRef] = None,
        action_url: Optional[str] = None,
    ) -> Notification:
        notification = self._build(user_id, type, title, message, related, action_url)
        return self.notifications.save(notification)

    def create_bulk(
        self,
        user_ids: Iterable[str],
        type: NotificationType,
        title: str,
        message: str,
        related: Optional[RelatedRef] = None,
        action_url: Optional[str] = None,
    ) -> List[Notification]:
        rows = [
            self._build(uid, type, title, message, related, action_url)
            for uid in user_ids
        ]
        if not rows:
            return []
        return self.notifications.save_all(rows)

    def broadcast(
        self,
        title: str,
        message: str,
        user_ids: Iterable[str] = (),
        roles: Iterable[UserRole] = (),
        action_url: Optional[str] = None,
    ) -> List[Notification]:
        """System announcement to explicit users plus every holder of `roles`."""
        recipients = list(user_ids)
        for role in roles:
            recipients.extend(u.id for u in self.users.find(role=role))

        created = self.create_bulk(
            recipients,
            NotificationType.SYSTEM_ANNOUNCEMENT,
            title,
            message,
            related=SystemRef(),
            action_url=action_url,
        )
        logger.info(
            "System announcement sent",
            extra={"props": {"recipients": len(created), "title": title}},
        )
        return created

    # -------------------------
    # Inbox
    # -------------------------
    def list_for_user(self, user_id: str, limit: int = 10, offset: int = 0) -> NotificationPage:
        rows = self.notifications.find(user_id=user_id)
        rows = sorted(rows, key=lambda n: n.created_at, reverse=True)
        return NotificationPage(
            notifications=rows[offset:offset + limit],
            unread_count=sum(1 for n in rows if not n.is_read),
            total=len(rows),
        )

    def unread_count(self, user_id: str) -> int:
        return len(self.notifications.find(user_id=user_id, is_read=False))

    def mark_as_read(self, notification_id: str, user_id: str) -> bool:
        """Only the owning user may flip is_read. Returns False when nothing matched."""
        notification = self.notifications.find_by_id(notification_id)
        if notification is None or notification.user_id != user_id:
            return False

        notification.is_read = True
        notification.updated_at = self.clock.now()
        self.notifications.save(notification)
        return True

    def mark_all_as_read(self, user_id: str) -> int:
        unread = self.notifications.find(user_id=user_id, is_read=False)
        now = self.clock.now()
        for n in unread:
            n.is_read = True
            n.updated_at = now
        self.notifications.save_all(unread)
        return len(unread)

    # -------------------------
    # Event workflow side effects
    # -------------------------
    def notify_event_created(self, event: Event) -> List[Notification]:
        """New draft: general managers of the branch + every marketing head."""
        approvers: List[str] = [
            u.id
            for u in self.users.find(role=UserRole.GENERAL_MANAGER, branch_id=event.branch_id)
        ]
        approvers += [u.id for u in self.users.find(role=UserRole.MARKETING_HEAD)]
        approvers = [uid for uid in approvers if uid != event.organizer_id]

        return self.create_bulk(
            approvers,
            NotificationType.EVENT_CREATED,
            "New Event Created",
            f'A new event "{event.title}" has been created and requires approval.',
            related=EventRef(event_id=event.id),
            action_url=event_link(event),
        )

    def notify_status_change(
        self,
        event: Event,
        old_status: EventStatus,
        new_status: EventStatus,
        actor: User,
        comment: Optional[str] = None,
    ) -> List[Notification]:
        """
        At most one milestone notification for the organizer (fires whoever
        the actor is), plus a comment notification when someone other than
        the organizer left a comment.
        """
        organizer_id = event.organizer_id
        comment = (comment or "").strip()
        related = EventRef(event_id=event.id)
        link = event_link(event)
        created: List[Notification] = []

        milestone = self._milestone(event, old_status, new_status, actor, comment)
        if milestone is not None:
            type, title, message = milestone
            created.append(
                self.create(organizer_id, type, title, message, related=related, action_url=link)
            )

        if comment and actor.id != organizer_id:
            created.append(
                self.create(
                    organizer_id,
                    NotificationType.EVENT_UPDATED,
                    "New Comment on Your Event",
                    f'{actor.username} added a comment to "{event.title}": "{truncate_comment(comment)}"',
                    related=related,
                    action_url=link,
                )
            )

        return created

    @staticmethod
    def _milestone(event: Event, old_status: EventStatus, new_status: EventStatus, actor: User, comment: str):
        title = event.title

        if new_status == EventStatus.APPROVED:
            suffix = f' with comment: "{comment}"' if comment else ""
            return (
                NotificationType.EVENT_APPROVED,
                "Event Approved!",
                f'Great news! Your event "{title}" has been approved{suffix}.',
            )

        if new_status == EventStatus.REJECTED:
            tail = f' with feedback: "{comment}".' if comment else ". Please review and revise."
            return (
                NotificationType.EVENT_REJECTED,
                "Event Needs Revision",
                f'Your event "{title}" was rejected by {actor.username}{tail}',
            )

        if new_status == EventStatus.PENDING_MARKETING and old_status == EventStatus.PENDING_GM:
            return (
                NotificationType.EVENT_UPDATED,
                "Event Progressed to Marketing Review",
                f'Your event "{title}" was approved by GM and is now being reviewed by Marketing Head.',
            )

        if new_status == EventStatus.COMPLETED:
            return (
                NotificationType.EVENT_UPDATED,
                "Event Completed Successfully!",
                f'Congratulations! Your event "{title}" has been marked as completed. Well done!',
            )

        if new_status == EventStatus.DRAFT and old_status == EventStatus.REJECTED:
            return (
                NotificationType.EVENT_UPDATED,
                "Event Ready for Revision",
                f'Your event "{title}" is back in draft mode. Please make the necessary changes and resubmit.',
            )

        return None
