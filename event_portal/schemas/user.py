from typing import Optional

from pydantic import BaseModel, ConfigDict

from event_portal.domain.events.status import UserRole


class User(BaseModel):
    """
    Read-only view of a portal user.
    branch_id = None means organization-wide scope (GM / Marketing Head level)
    """
    model_config = ConfigDict(validate_assignment=True)

    id: str
    username: str
    email: Optional[str] = None
    role: UserRole = UserRole.USER
    branch_id: Optional[str] = None
