from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Optional, Tuple

from event_portal.domain.events.status import EventStatus, UserRole


@dataclass(frozen=True)
class TransitionRule:
    """
    One legal edge of the event lifecycle.
    - allowed_roles: roles that may move an event along this edge
    - rationale: user-facing text returned when the role check fails
    """
    source: EventStatus
    target: EventStatus
    allowed_roles: FrozenSet[UserRole]
    rationale: str

    @property
    def key(self) -> str:
        return f"{self.source.value}->{self.target.value}"


def _rule(source: EventStatus, target: EventStatus, roles, rationale: str) -> TransitionRule:
    return TransitionRule(
        source=source,
        target=target,
        allowed_roles=frozenset(roles),
        rationale=rationale,
    )


S = EventStatus
R = UserRole

# =====================================================
# Transition Table
# draft -> pending_gm -> pending_marketing -> approved -> completed
# rejected -> draft closes the revision cycle
# =====================================================
TRANSITIONS: Dict[Tuple[EventStatus, EventStatus], TransitionRule] = {
    (r.source, r.target): r
    for r in [
        _rule(S.DRAFT, S.PENDING_GM, [R.SALES_MANAGER, R.ADMIN],
              "Only the event creator (Sales Manager) can submit for GM approval"),
        _rule(S.DRAFT, S.PENDING_MARKETING, [R.GENERAL_MANAGER, R.ADMIN],
              "General Manager can submit their own events directly to Marketing Head"),
        _rule(S.PENDING_GM, S.PENDING_MARKETING, [R.GENERAL_MANAGER, R.ADMIN],
              "Only General Manager can approve and forward to Marketing Head"),
        _rule(S.PENDING_GM, S.REJECTED, [R.GENERAL_MANAGER, R.ADMIN],
              "Only General Manager can reject events"),
        _rule(S.PENDING_GM, S.DRAFT, [R.GENERAL_MANAGER, R.ADMIN],
              "Only General Manager can send back to draft"),
        _rule(S.PENDING_MARKETING, S.APPROVED, [R.MARKETING_HEAD, R.ADMIN],
              "Only Marketing Head can give final approval"),
        _rule(S.PENDING_MARKETING, S.REJECTED, [R.MARKETING_HEAD, R.ADMIN],
              "Only Marketing Head can reject events"),
        _rule(S.PENDING_MARKETING, S.PENDING_GM, [R.MARKETING_HEAD, R.ADMIN],
              "Only Marketing Head can send back to GM"),
        _rule(S.APPROVED, S.COMPLETED,
              [R.SALES_MANAGER, R.GENERAL_MANAGER, R.MARKETING_HEAD, R.MARKETING_MANAGER, R.ADMIN],
              "Event can be marked complete by authorized users"),
        _rule(S.REJECTED, S.DRAFT, [R.SALES_MANAGER, R.GENERAL_MANAGER, R.ADMIN],
              "Event creator can revise rejected events"),
    ]
}

# Source states whose edges are reserved for the organizer (or admin)
CREATOR_ONLY_SOURCES = frozenset({S.DRAFT, S.REJECTED})


def get_transition(source: EventStatus, target: EventStatus) -> Optional[TransitionRule]:
    return TRANSITIONS.get((EventStatus(source), EventStatus(target)))


def allowed_targets(source: EventStatus) -> List[EventStatus]:
    source = EventStatus(source)
    return [target for (src, target) in TRANSITIONS if src == source]
