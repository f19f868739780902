import logging
from datetime import timedelta
from pathlib import Path
from typing import Dict

import yaml

from event_portal.domain.clock import SystemClock
from event_portal.repositories.base import Repositories
from event_portal.schemas.event import Event
from event_portal.schemas.user import User

logger = logging.getLogger(__name__)

# -------------------------
# Demo data dir
# -------------------------
DATA_DIR = Path(__file__).resolve().parent.parent / "data" / "demo"
SEED_FILE = "seed.yaml"


def load_seed(filename: str = SEED_FILE) -> dict:
    path = DATA_DIR / filename
    if not path.exists():
        raise FileNotFoundError(f"Demo data not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def seed_demo_data(repos: Repositories, clock=None, filename: str = SEED_FILE) -> Dict[str, int]:
    """
    Seed demo users + events.
    Safe to re-run (ids are fixed, save overwrites).
    """
    clock = clock or SystemClock()
    now = clock.now()
    data = load_seed(filename)

    users = [User.model_validate(row) for row in data.get("users", [])]
    repos.users.save_all(users)

    events = []
    for row in data.get("events", []):
        row = dict(row)
        start = now + timedelta(days=row.pop("start_in_days", 7))
        end = start + timedelta(days=row.pop("duration_days", 1))
        stamped = now - timedelta(days=row.pop("age_days", 0))
        events.append(
            Event(
                start_date=start,
                end_date=end,
                created_at=stamped,
                updated_at=stamped,
                **row,
            )
        )
    repos.events.save_all(events)

    summary = {"users": len(users), "events": len(events)}
    logger.info("Demo data seeded", extra={"props": summary})
    return summary
