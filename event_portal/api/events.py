# event_portal/api/events.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from event_portal.dependencies import get_actor_id, get_event_service, get_workflow_service
from event_portal.domain.events.status import EventStatus
from event_portal.schemas.event import (
    CommentCreate,
    Event,
    EventComment,
    EventCreate,
    EventPage,
    EventUpdate,
    PermissionResponse,
    StatusChangeRequest,
    StatusChangeResponse,
    TransitionOption,
)
from event_portal.services.event_service import EventService
from event_portal.services.workflow_service import EventWorkflowService

router = APIRouter(tags=["events"])


# =================================================
# Collection
# =================================================
@router.get("", response_model=EventPage)
def list_events(
    status_filter: Optional[EventStatus] = Query(default=None, alias="status"),
    branch_id: Optional[str] = None,
    search: Optional[str] = None,
    page: int = Query(default=1, ge=1),
    size: int = Query(default=10, ge=1, le=100),
    service: EventService = Depends(get_event_service),
):
    return service.list_events(
        status=status_filter,
        branch_id=branch_id,
        search=search,
        page=page,
        size=size,
    )


@router.get("/pending-approvals", response_model=List[Event])
def pending_approvals(
    actor_id: str = Depends(get_actor_id),
    service: EventService = Depends(get_event_service),
):
    return service.pending_approvals(actor_id)


@router.post("", response_model=Event, status_code=status.HTTP_201_CREATED)
def create_event(
    payload: EventCreate,
    actor_id: str = Depends(get_actor_id),
    service: EventService = Depends(get_event_service),
):
    return service.create_event(actor_id, payload)


# =================================================
# Single event
# =================================================
@router.get("/{event_id}", response_model=Event)
def get_event(event_id: str, service: EventService = Depends(get_event_service)):
    return service.get_event(event_id)


@router.put("/{event_id}", response_model=Event)
def update_event(
    event_id: str,
    payload: EventUpdate,
    actor_id: str = Depends(get_actor_id),
    service: EventService = Depends(get_event_service),
):
    return service.update_event(event_id, actor_id, payload)


@router.delete("/{event_id}")
def delete_event(
    event_id: str,
    actor_id: str = Depends(get_actor_id),
    service: EventService = Depends(get_event_service),
):
    service.delete_event(event_id, actor_id)
    return {"message": "Event deleted successfully"}


# =================================================
# Workflow
# =================================================
@router.patch("/{event_id}/status", response_model=StatusChangeResponse)
def change_status(
    event_id: str,
    payload: StatusChangeRequest,
    actor_id: str = Depends(get_actor_id),
    workflow: EventWorkflowService = Depends(get_workflow_service),
):
    result = workflow.change_status(event_id, payload.status, actor_id, payload.comment)
    return StatusChangeResponse(
        previous_status=result.previous_status,
        new_status=result.new_status,
    )


@router.get("/{event_id}/transitions", response_model=List[TransitionOption])
def available_transitions(
    event_id: str,
    actor_id: str = Depends(get_actor_id),
    workflow: EventWorkflowService = Depends(get_workflow_service),
):
    return workflow.available_transitions(event_id, actor_id)


@router.get("/{event_id}/permissions/edit", response_model=PermissionResponse)
def edit_permission(
    event_id: str,
    actor_id: str = Depends(get_actor_id),
    workflow: EventWorkflowService = Depends(get_workflow_service),
):
    verdict = workflow.check_edit_permission(event_id, actor_id)
    return PermissionResponse(allowed=verdict.allowed, reason=verdict.reason)


@router.get("/{event_id}/permissions/delete", response_model=PermissionResponse)
def delete_permission(
    event_id: str,
    actor_id: str = Depends(get_actor_id),
    workflow: EventWorkflowService = Depends(get_workflow_service),
):
    verdict = workflow.check_delete_permission(event_id, actor_id)
    return PermissionResponse(allowed=verdict.allowed, reason=verdict.reason)


# =================================================
# Comments
# =================================================
@router.get("/{event_id}/comments", response_model=List[EventComment])
def list_comments(event_id: str, workflow: EventWorkflowService = Depends(get_workflow_service)):
    return workflow.list_comments(event_id)


@router.post("/{event_id}/comments", response_model=EventComment, status_code=status.HTTP_201_CREATED)
def add_comment(
    event_id: str,
    payload: CommentCreate,
    actor_id: str = Depends(get_actor_id),
    workflow: EventWorkflowService = Depends(get_workflow_service),
):
    return workflow.add_comment(event_id, actor_id, payload.comment)
