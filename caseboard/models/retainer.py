"""
Retainer and session data models.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class RetainerStatus(str, Enum):
    """Lifecycle status of a retainer agreement."""
    PENDING = "pending"
    SIGNED = "signed"
    ACTIVE = "active"
    CLOSED = "closed"


class SessionRole(str, Enum):
    """Role of the signed-in user."""
    ATTORNEY = "attorney"
    INTAKE_MANAGER = "intake_manager"
    ADMIN = "admin"


class Retainer(BaseModel):
    """A client retainer agreement."""

    retainer_id: str
    client_name: str
    case_type: str = ""
    region_code: str = ""
    status: RetainerStatus = Field(default=RetainerStatus.PENDING)
    fee_amount: float = Field(default=0.0, ge=0.0)
    assigned_to: Optional[str] = None  # Owner id of the assigned attorney
    organization_id: Optional[str] = None
    signed_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=datetime.now)


class RetainerQuery(BaseModel):
    """Filters for listing retainers. Unset filters are not applied."""

    assigned_to: Optional[str] = None
    organization_id: Optional[str] = None
    status: Optional[RetainerStatus] = None
    limit: int = Field(default=200, gt=0, le=1000)


class Session(BaseModel):
    """Identity of the signed-in user."""

    owner_id: str = Field(..., min_length=1)
    role: SessionRole = Field(default=SessionRole.ATTORNEY)
    organization_id: Optional[str] = None

    @property
    def sees_organization(self) -> bool:
        """Managers and admins see their whole organization."""
        return self.role in (SessionRole.INTAKE_MANAGER, SessionRole.ADMIN)
