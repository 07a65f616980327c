"""
Data models for Caseboard.

This module exports all data models for easy import.
"""

from .audit_log import (
    ActionType,
    Actor,
    AuditLog,
    Outcome,
)
from .profile import (
    EDITABLE_FIELDS,
    TAB_FIELDS,
    AttorneyProfile,
    ProfileTab,
    fields_for_tab,
)
from .region import (
    FORECAST_WINDOW_DAYS,
    WINDOW_DAY_OPTIONS,
    IntakeOrder,
    Region,
    RegionStatus,
    StatusFilter,
)
from .retainer import (
    Retainer,
    RetainerQuery,
    RetainerStatus,
    Session,
    SessionRole,
)

__all__ = [
    # Region models
    "Region",
    "RegionStatus",
    "StatusFilter",
    "IntakeOrder",
    "WINDOW_DAY_OPTIONS",
    "FORECAST_WINDOW_DAYS",
    # Profile models
    "AttorneyProfile",
    "ProfileTab",
    "TAB_FIELDS",
    "EDITABLE_FIELDS",
    "fields_for_tab",
    # Retainer models
    "Retainer",
    "RetainerQuery",
    "RetainerStatus",
    "Session",
    "SessionRole",
    # Audit log models
    "AuditLog",
    "ActionType",
    "Actor",
    "Outcome",
]
