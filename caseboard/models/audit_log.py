"""
Audit log data models.

Defines data structures for action logging and transparency.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class ActionType(str, Enum):
    """Types of actions that can be logged."""
    # Intake actions
    INTAKE_ORDER_CREATED = "intake_order_created"
    MAP_DOCUMENT_LOADED = "map_document_loaded"

    # Profile actions
    PROFILE_LOADED = "profile_loaded"
    PROFILE_UPDATED = "profile_updated"
    PROFILE_EDIT_DISCARDED = "profile_edit_discarded"

    # System actions
    SYSTEM_STARTUP = "system_startup"
    SYSTEM_SHUTDOWN = "system_shutdown"


class Actor(str, Enum):
    """Who performed the action."""
    USER = "user"
    SYSTEM = "system"


class Outcome(str, Enum):
    """Result of the action."""
    SUCCESS = "success"
    FAILURE = "failure"


class AuditLog(BaseModel):
    """Represents a single audit log entry."""

    log_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = Field(default_factory=datetime.now)
    action_type: ActionType
    actor: Actor
    details: Dict[str, Any] = Field(default_factory=dict)
    outcome: Outcome = Field(default=Outcome.SUCCESS)
    owner_id: Optional[str] = None  # Profile owner, when relevant
    order_id: Optional[str] = None  # Intake order, when relevant
    error_message: Optional[str] = None

    def to_readable_string(self) -> str:
        """Convert log entry to human-readable string."""
        timestamp_str = self.timestamp.strftime("%Y-%m-%d %H:%M:%S")
        actor_str = self.actor.value.upper()
        action_str = self.action_type.value.replace("_", " ").title()
        outcome_str = self.outcome.value.upper()

        base = f"[{timestamp_str}] {actor_str}: {action_str} - {outcome_str}"

        if self.error_message:
            base += f" - Error: {self.error_message}"

        return base

    class Config:
        """Pydantic configuration."""
        json_schema_extra = {
            "example": {
                "action_type": "intake_order_created",
                "actor": "user",
                "details": {"region_code": "TX", "volume": 5},
                "outcome": "success",
                "order_id": "order-123"
            }
        }
