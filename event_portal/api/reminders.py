from fastapi import APIRouter, Depends

from event_portal.dependencies import get_reminder_service, require_admin
from event_portal.services.reminder_service import ReminderService

router = APIRouter(tags=["reminders"])


@router.post("/run")
def run_reminders(
    _admin_id: str = Depends(require_admin),
    service: ReminderService = Depends(get_reminder_service),
):
    """Manual trigger; production runs this from the scheduler."""
    return {"status": "ok", "created": service.run()}
