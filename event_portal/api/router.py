from fastapi import APIRouter

from event_portal.api.demo import router as demo_router
from event_portal.api.events import router as events_router
from event_portal.api.notifications import router as notifications_router
from event_portal.api.reminders import router as reminders_router

api_router = APIRouter()

# -------------------------------------------------
# demo / bootstrap
# -------------------------------------------------
api_router.include_router(
    demo_router,
    prefix="/demo",
    tags=["demo"],
)

# -------------------------------------------------
# core business
# -------------------------------------------------
api_router.include_router(
    events_router,
    prefix="/events",
    tags=["events"],
)

api_router.include_router(
    notifications_router,
    prefix="/notifications",
    tags=["notifications"],
)

# -------------------------------------------------
# scheduled jobs (manual trigger)
# -------------------------------------------------
api_router.include_router(
    reminders_router,
    prefix="/reminders",
    tags=["reminders"],
)
