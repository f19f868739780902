import uuid
from datetime import datetime


def generate_event_id(now: datetime) -> str:
    """
    Generate ID: EVT-{YEAR}-{RANDOM}
    Ex: EVT-2026-3f9a1c2e
    """
    return f"EVT-{now.year}-{uuid.uuid4().hex[:8]}"


def generate_uuid() -> str:
    return str(uuid.uuid4())
