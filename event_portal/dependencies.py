# event_portal/dependencies.py
import logging
from typing import Optional

from fastapi import FastAPI, Header, Request

from event_portal.core.config import settings
from event_portal.core.errors import ForbiddenError, NotFoundError
from event_portal.domain.clock import SystemClock
from event_portal.domain.events.status import UserRole
from event_portal.repositories.base import Repositories
from event_portal.repositories.memory_repo import memory_repositories
from event_portal.services.event_service import EventService
from event_portal.services.notification_service import NotificationService
from event_portal.services.reminder_service import ReminderService
from event_portal.services.workflow_service import EventWorkflowService

logger = logging.getLogger(__name__)


def init_repositories(app: FastAPI) -> None:
    """
    Initialize infrastructure dependencies.
    Must be idempotent: state already set (e.g. by tests) is kept.
    """
    if getattr(app.state, "clock", None) is None:
        app.state.clock = SystemClock()

    if getattr(app.state, "repos", None) is not None:
        return

    if settings.storage_backend == "supabase":
        from event_portal.repositories.supabase_repo import supabase_repositories

        app.state.repos = supabase_repositories()
    else:
        app.state.repos = memory_repositories()

    logger.info(
        "Repositories initialized",
        extra={"props": {"backend": settings.storage_backend}},
    )

    if settings.seed_demo_data:
        from event_portal.services.demo_loader import seed_demo_data

        seed_demo_data(app.state.repos, clock=app.state.clock)


# -------------------------
# Request-scoped dependencies
# -------------------------
def get_repos(request: Request) -> Repositories:
    return request.app.state.repos


def get_clock(request: Request):
    return getattr(request.app.state, "clock", None) or SystemClock()


def get_actor_id(x_user_id: Optional[str] = Header(default=None)) -> str:
    """Authentication happens upstream; the gateway forwards the user id."""
    if not x_user_id:
        raise NotFoundError("User not found")
    return x_user_id


def get_notification_service(request: Request) -> NotificationService:
    repos = get_repos(request)
    return NotificationService(repos.notifications, repos.users, get_clock(request))


def get_workflow_service(request: Request) -> EventWorkflowService:
    repos = get_repos(request)
    return EventWorkflowService(repos, get_notification_service(request), get_clock(request))


def get_event_service(request: Request) -> EventService:
    return EventService(get_workflow_service(request))


def get_reminder_service(request: Request) -> ReminderService:
    repos = get_repos(request)
    return ReminderService(repos, get_notification_service(request), get_clock(request))


def require_admin(request: Request, x_user_id: Optional[str] = Header(default=None)) -> str:
    actor_id = get_actor_id(x_user_id)
    actor = get_repos(request).users.find_by_id(actor_id)
    if actor is None:
        raise NotFoundError("User not found")
    if actor.role != UserRole.ADMIN:
        raise ForbiddenError("Admin access required")
    return actor_id
