from __future__ import annotations

from typing import List

from event_portal.domain.events.status import CommentType, EventStatus
from event_portal.schemas.event import Event

COMMENT_PREVIEW_LIMIT = 100


def missing_actual_metrics(event: Event) -> List[str]:
    """Labels of the actual results still missing before completion, in display order."""
    missing: List[str] = []

    if event.actual_budget is None or event.actual_budget <= 0:
        missing.append("Actual Cost")
    if event.actual_enquiries is None:
        missing.append("Actual Leads")
    if event.actual_orders is None:
        missing.append("Actual Orders")

    return missing


def comment_type_for(new_status: EventStatus) -> CommentType:
    if new_status in (EventStatus.APPROVED, EventStatus.PENDING_MARKETING):
        return CommentType.APPROVAL
    if new_status == EventStatus.REJECTED:
        return CommentType.REJECTION
    if new_status == EventStatus.DRAFT:
        return CommentType.FEEDBACK
    return CommentType.GENERAL


def truncate_comment(text: str, limit: int = COMMENT_PREVIEW_LIMIT) -> str:
    if len(text) <= limit:
        return text
    return f"{text[:limit]}..."
