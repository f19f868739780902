# event_portal/api/notifications.py
from fastapi import APIRouter, Depends, Query

from event_portal.core.errors import NotFoundError
from event_portal.dependencies import get_actor_id, get_notification_service, require_admin
from event_portal.schemas.notification import BroadcastRequest, NotificationPage, UnreadCount
from event_portal.services.notification_service import NotificationService

router = APIRouter(tags=["notifications"])


@router.get("", response_model=NotificationPage)
def list_notifications(
    limit: int = Query(default=10, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    actor_id: str = Depends(get_actor_id),
    service: NotificationService = Depends(get_notification_service),
):
    return service.list_for_user(actor_id, limit=limit, offset=offset)


@router.get("/unread-count", response_model=UnreadCount)
def unread_count(
    actor_id: str = Depends(get_actor_id),
    service: NotificationService = Depends(get_notification_service),
):
    return UnreadCount(count=service.unread_count(actor_id))


@router.put("/mark-all-read")
def mark_all_read(
    actor_id: str = Depends(get_actor_id),
    service: NotificationService = Depends(get_notification_service),
):
    updated = service.mark_all_as_read(actor_id)
    return {"message": "All notifications marked as read", "updated": updated}


@router.put("/{notification_id}/read")
def mark_read(
    notification_id: str,
    actor_id: str = Depends(get_actor_id),
    service: NotificationService = Depends(get_notification_service),
):
    if not service.mark_as_read(notification_id, actor_id):
        raise NotFoundError("Notification not found")
    return {"message": "Notification marked as read"}


@router.post("/broadcast")
def broadcast(
    payload: BroadcastRequest,
    _admin_id: str = Depends(require_admin),
    service: NotificationService = Depends(get_notification_service),
):
    created = service.broadcast(
        payload.title,
        payload.message,
        user_ids=payload.user_ids,
        roles=payload.roles,
        action_url=payload.action_url,
    )
    return {"message": "Announcement sent", "recipients": len(created)}
