import logging
from datetime import datetime, time, timedelta, timezone
from typing import Dict, Optional

from event_portal.domain.clock import SystemClock
from event_portal.domain.events.status import EventStatus, NotificationType, UserRole
from event_portal.repositories.base import Repositories
from event_portal.schemas.event import Event
from event_portal.schemas.notification import EventRef
from event_portal.services.notification_service import NotificationService, event_link

logger = logging.getLogger(__name__)

COMPLETION_MARKER = "mark as complete"
COMPLETION_RESEND_AFTER = timedelta(hours=24)
GM_APPROVAL_WAIT = timedelta(days=3)
MARKETING_APPROVAL_WAIT = timedelta(days=2)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Naive timestamps are treated as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class ReminderService:
    """
    Periodic reminder generation.

    run() is meant to be triggered by an external scheduler (cron, admin
    endpoint); nothing here schedules itself. Day boundaries are UTC.
    """

    def __init__(self, repos: Repositories, notifier: NotificationService, clock=None):
        self.repos = repos
        self.notifier = notifier
        self.clock = clock or SystemClock()

    def run(self) -> Dict[str, int]:
        summary = {
            "starting_tomorrow": self.remind_starting_tomorrow(),
            "completion_due": self.remind_completion_due(),
            "pending_gm": self.remind_pending_gm(),
            "pending_marketing": self.remind_pending_marketing(),
        }
        logger.info("Reminder run completed", extra={"props": summary})
        return summary

    # -------------------------
    # Helpers
    # -------------------------
    def _today_start(self) -> datetime:
        now = as_utc(self.clock.now())
        return datetime.combine(now.date(), time.min, tzinfo=timezone.utc)

    def _organizer_name(self, event: Event) -> str:
        organizer = self.repos.users.find_by_id(event.organizer_id)
        return organizer.username if organizer else event.organizer_id

    def _remind(self, user_id: str, event: Event, title: str, message: str) -> None:
        self.notifier.create(
            user_id,
            NotificationType.REMINDER,
            title,
            message,
            related=EventRef(event_id=event.id),
            action_url=event_link(event),
        )

    def _approved_events(self):
        return self.repos.events.find(status=EventStatus.APPROVED, is_active=True)

    # -------------------------
    # Organizer reminders
    # -------------------------
    def remind_starting_tomorrow(self) -> int:
        tomorrow = self._today_start() + timedelta(days=1)
        day_after = tomorrow + timedelta(days=1)

        sent = 0
        for event in self._approved_events():
            start = as_utc(event.start_date)
            if start is None or not (tomorrow <= start < day_after):
                continue
            self._remind(
                event.organizer_id,
                event,
                "Event Starting Tomorrow",
                f'Don\'t forget! Your event "{event.title}" is scheduled to start tomorrow at {event.location}.',
            )
            sent += 1
        return sent

    def remind_completion_due(self) -> int:
        """Approved events that ended before yesterday closed, at most once per 24h."""
        cutoff = self._today_start() - timedelta(microseconds=1)
        since = as_utc(self.clock.now()) - COMPLETION_RESEND_AFTER

        sent = 0
        for event in self._approved_events():
            end = as_utc(event.end_date)
            if end is None or end >= cutoff:
                continue
            if self._completion_reminder_sent(event, since):
                continue
            self._remind(
                event.organizer_id,
                event,
                "Please Complete Event Report",
                f'Your event "{event.title}" has ended. '
                f"Please add the actual results and {COMPLETION_MARKER}.",
            )
            sent += 1
        return sent

    def _completion_reminder_sent(self, event: Event, since: datetime) -> bool:
        for n in self.repos.notifications.find(user_id=event.organizer_id, type=NotificationType.REMINDER):
            if (
                n.related_entity_id == event.id
                and COMPLETION_MARKER in n.message
                and as_utc(n.created_at) > since
            ):
                return True
        return False

    # -------------------------
    # Approver reminders
    # -------------------------
    def remind_pending_gm(self) -> int:
        cutoff = as_utc(self.clock.now()) - GM_APPROVAL_WAIT

        sent = 0
        for event in self.repos.events.find(status=EventStatus.PENDING_GM, is_active=True):
            created = as_utc(event.created_at)
            if created is None or created >= cutoff:
                continue
            organizer = self._organizer_name(event)
            for gm in self.repos.users.find(role=UserRole.GENERAL_MANAGER, branch_id=event.branch_id):
                self._remind(
                    gm.id,
                    event,
                    "Approval Pending: Action Required",
                    f'Event "{event.title}" by {organizer} has been waiting for your approval for 3+ days.',
                )
                sent += 1
        return sent

    def remind_pending_marketing(self) -> int:
        cutoff = as_utc(self.clock.now()) - MARKETING_APPROVAL_WAIT
        heads = self.repos.users.find(role=UserRole.MARKETING_HEAD)

        sent = 0
        for event in self.repos.events.find(status=EventStatus.PENDING_MARKETING, is_active=True):
            updated = as_utc(event.updated_at)
            if updated is None or updated >= cutoff:
                continue
            organizer = self._organizer_name(event)
            for head in heads:
                self._remind(
                    head.id,
                    event,
                    "Final Approval Pending",
                    f'Event "{event.title}" by {organizer} needs your final approval (waiting 2+ days).',
                )
                sent += 1
        return sent
