"""
Permission evaluator for the event lifecycle.

Every check is a pure function of (actor, event[, requested status]) and
returns a PermissionResult whose `reason` is shown to the caller verbatim,
so each denial names the rule that failed.
"""
from __future__ import annotations

from dataclasses import dataclass

from event_portal.domain.events.status import EventStatus, UserRole
from event_portal.domain.events.transitions import CREATOR_ONLY_SOURCES, get_transition
from event_portal.schemas.event import Event
from event_portal.schemas.user import User

INVALID_TRANSITION = "Invalid status transition"


@dataclass(frozen=True)
class PermissionResult:
    allowed: bool
    reason: str
    # set when the requested edge does not exist at all (a request error, not a permission error)
    invalid_transition: bool = False

    @classmethod
    def allow(cls, reason: str) -> "PermissionResult":
        return cls(allowed=True, reason=reason)

    @classmethod
    def deny(cls, reason: str) -> "PermissionResult":
        return cls(allowed=False, reason=reason)


def is_organizer(actor: User, event: Event) -> bool:
    return actor.id == event.organizer_id


def is_same_branch(actor: User, event: Event) -> bool:
    return actor.branch_id is not None and actor.branch_id == event.branch_id


# =====================================================
# Status transitions
# =====================================================
def evaluate_transition(actor: User, event: Event, new_status: EventStatus) -> PermissionResult:
    """
    Gate order:
    1. edge must exist in the transition table
    2. draft / rejected sources are reserved for the organizer (admin exempt)
    3. actor role must be listed on the edge
    """
    rule = get_transition(event.status, new_status)
    if rule is None:
        return PermissionResult(allowed=False, reason=INVALID_TRANSITION, invalid_transition=True)

    if (
        rule.source in CREATOR_ONLY_SOURCES
        and actor.role != UserRole.ADMIN
        and not is_organizer(actor, event)
    ):
        return PermissionResult.deny("Only the event creator can submit their own events")

    if actor.role not in rule.allowed_roles:
        return PermissionResult.deny(rule.rationale)

    return PermissionResult.allow("Transition allowed")


# =====================================================
# Editing event fields
# =====================================================
def check_edit_permission(actor: User, event: Event) -> PermissionResult:
    if actor.role == UserRole.ADMIN:
        return PermissionResult.allow("Admin access")

    status = event.status

    if actor.role == UserRole.SALES_MANAGER:
        if not is_organizer(actor, event):
            return PermissionResult.deny("Sales managers can only edit events they created")
        if status in (EventStatus.DRAFT, EventStatus.REJECTED):
            return PermissionResult.allow("Creator can edit in draft/rejected status")
        if status == EventStatus.PENDING_GM:
            return PermissionResult.allow("Creator can edit while pending GM approval (limited changes)")
        return PermissionResult.deny("Events cannot be edited after GM approval")

    if actor.role == UserRole.GENERAL_MANAGER:
        if actor.branch_id is None:
            return PermissionResult.deny("GM has no branch assigned. Please contact admin.")
        if not is_same_branch(actor, event):
            return PermissionResult.deny(
                f"GMs can only edit events from their branch. "
                f"Your branch: {actor.branch_id}, Event branch: {event.branch_id}"
            )
        if status in (EventStatus.DRAFT, EventStatus.PENDING_GM):
            return PermissionResult.allow("GM can edit events in their branch pending approval")
        return PermissionResult.deny("Events cannot be edited after GM approval")

    if actor.role == UserRole.MARKETING_HEAD:
        if status == EventStatus.PENDING_MARKETING:
            return PermissionResult.allow("Marketing Head can edit events pending final approval")
        return PermissionResult.deny("Marketing Head can only edit events pending their approval")

    if actor.role == UserRole.MARKETING_MANAGER:
        if status in (EventStatus.APPROVED, EventStatus.COMPLETED):
            return PermissionResult.allow("Marketing Manager can edit post-event metrics")
        return PermissionResult.deny("Marketing Manager can only edit metrics after approval")

    return PermissionResult.deny("You do not have permission to edit this event")


# =====================================================
# Deleting events
# =====================================================
def check_delete_permission(actor: User, event: Event) -> PermissionResult:
    if actor.role == UserRole.ADMIN:
        return PermissionResult.allow("Admin access")

    status = event.status

    if status in (EventStatus.APPROVED, EventStatus.COMPLETED):
        return PermissionResult.deny("Cannot delete approved or completed events")

    if actor.role == UserRole.SALES_MANAGER and is_organizer(actor, event):
        if status in (EventStatus.DRAFT, EventStatus.REJECTED):
            return PermissionResult.allow("Creator can delete in draft/rejected status")
        return PermissionResult.deny("Cannot delete events after submission to GM")

    if actor.role == UserRole.GENERAL_MANAGER and is_same_branch(actor, event):
        if status in (EventStatus.DRAFT, EventStatus.PENDING_GM, EventStatus.REJECTED):
            return PermissionResult.allow("GM can delete events in their branch before final approval")

    if actor.role == UserRole.MARKETING_HEAD and status == EventStatus.PENDING_MARKETING:
        return PermissionResult.allow("Marketing Head can delete events pending their approval")

    return PermissionResult.deny("You do not have permission to delete this event")
