# event_portal/main.py
from __future__ import annotations

from event_portal.bootstrap import create_app
from event_portal.lifecycle import register_lifecycle

app = create_app()
register_lifecycle(app)
