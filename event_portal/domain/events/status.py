from __future__ import annotations

from enum import Enum


class EventStatus(str, Enum):
    DRAFT = "draft"
    PENDING_GM = "pending_gm"
    PENDING_MARKETING = "pending_marketing"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMPLETED = "completed"


class UserRole(str, Enum):
    ADMIN = "admin"
    USER = "user"
    MANAGER = "manager"
    SALES_MANAGER = "sales_manager"
    GENERAL_MANAGER = "general_manager"
    MARKETING_HEAD = "marketing_head"
    MARKETING_MANAGER = "marketing_manager"


class CommentType(str, Enum):
    FEEDBACK = "feedback"
    APPROVAL = "approval"
    REJECTION = "rejection"
    GENERAL = "general"


class NotificationType(str, Enum):
    EVENT_CREATED = "event_created"
    EVENT_APPROVED = "event_approved"
    EVENT_REJECTED = "event_rejected"
    EVENT_UPDATED = "event_updated"
    BUDGET_APPROVED = "budget_approved"
    BUDGET_REJECTED = "budget_rejected"
    SYSTEM_ANNOUNCEMENT = "system_announcement"
    REMINDER = "reminder"


STATUS_VALUES = frozenset(s.value for s in EventStatus)
