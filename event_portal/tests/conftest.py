from datetime import datetime, timedelta, timezone

import pytest

from event_portal.domain.clock import FixedClock
from event_portal.domain.events.status import EventStatus, UserRole
from event_portal.repositories.memory_repo import memory_repositories
from event_portal.schemas.event import Event
from event_portal.schemas.user import User
from event_portal.services.notification_service import NotificationService
from event_portal.services.workflow_service import EventWorkflowService

NOW = datetime(2026, 3, 10, 9, 0, tzinfo=timezone.utc)

BRANCH = "BR-BKK"
OTHER_BRANCH = "BR-CNX"


USERS = {
    "organizer": User(id="u-sm", username="somchai", role=UserRole.SALES_MANAGER, branch_id=BRANCH),
    "other_sm": User(id="u-sm-2", username="malee", role=UserRole.SALES_MANAGER, branch_id=BRANCH),
    "gm": User(id="u-gm", username="prasert", role=UserRole.GENERAL_MANAGER, branch_id=BRANCH),
    "gm_other": User(id="u-gm-2", username="wichai", role=UserRole.GENERAL_MANAGER, branch_id=OTHER_BRANCH),
    "gm_nobranch": User(id="u-gm-3", username="anan", role=UserRole.GENERAL_MANAGER),
    "mh": User(id="u-mh", username="nittaya", role=UserRole.MARKETING_HEAD),
    "mm": User(id="u-mm", username="arthit", role=UserRole.MARKETING_MANAGER),
    "admin": User(id="u-admin", username="admin", role=UserRole.ADMIN),
    "plain": User(id="u-plain", username="guest", role=UserRole.USER, branch_id=BRANCH),
}


def make_event(**overrides) -> Event:
    fields = dict(
        id="EVT-2026-test0001",
        title="Showroom Weekend",
        description="Test drive weekend",
        location="Bangkok Showroom",
        start_date=NOW + timedelta(days=10),
        end_date=NOW + timedelta(days=11),
        budget=100000,
        event_type_id="ET-1",
        branch_id=BRANCH,
        organizer_id=USERS["organizer"].id,
        status=EventStatus.DRAFT,
        created_at=NOW,
        updated_at=NOW,
    )
    fields.update(overrides)
    return Event(**fields)


@pytest.fixture
def users():
    return {k: u.model_copy() for k, u in USERS.items()}


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture
def repos(users):
    repos = memory_repositories()
    repos.users.save_all(list(users.values()))
    return repos


@pytest.fixture
def notifier(repos, clock):
    return NotificationService(repos.notifications, repos.users, clock)


@pytest.fixture
def workflow(repos, notifier, clock):
    return EventWorkflowService(repos, notifier, clock)


@pytest.fixture
def add_event(repos):
    def _add(**overrides) -> Event:
        event = make_event(**overrides)
        repos.events.save(event)
        return event

    return _add
