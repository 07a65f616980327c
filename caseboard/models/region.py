"""
Region and intake order data models.

Regions are the map's geographic units; intake orders add volume to them.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Tuple

from pydantic import BaseModel, Field, field_validator


class RegionStatus(str, Enum):
    """Intake status of a region."""
    ACTIVE = "active"
    LOW = "low"
    INACTIVE = "inactive"


class StatusFilter(str, Enum):
    """Map status filter; ALL shows every region."""
    ALL = "all"
    ACTIVE = "active"
    LOW = "low"
    INACTIVE = "inactive"


# Windows offered by the order form. Only the 30-day window feeds the forecast.
WINDOW_DAY_OPTIONS: Tuple[int, ...] = (7, 14, 30, 60, 90)
FORECAST_WINDOW_DAYS = 30


class Region(BaseModel):
    """Intake volume tracked for one region."""

    code: str = Field(..., min_length=1, max_length=8)
    display_name: str
    current_volume: int = Field(default=0, ge=0)
    target_volume: int = Field(default=0, ge=0)
    forecast_next_30_days: int = Field(default=0, ge=0)
    status: RegionStatus = Field(default=RegionStatus.LOW)
    fulfilled_count: int = Field(default=0, ge=0)
    pending_count: int = Field(default=0, ge=0)

    @field_validator('code')
    @classmethod
    def normalize_code(cls, v: str) -> str:
        """Region codes are stored uppercased."""
        return v.strip().upper()

    def recompute_status(self) -> RegionStatus:
        """
        Recompute status from volumes.

        ``inactive`` is never produced here; it is only ever loaded.

        Returns:
            The new status
        """
        if self.current_volume >= self.target_volume:
            self.status = RegionStatus.ACTIVE
        else:
            self.status = RegionStatus.LOW
        return self.status

    def matches(self, status_filter: StatusFilter) -> bool:
        """Check whether the region passes a status filter."""
        return status_filter == StatusFilter.ALL or self.status.value == status_filter.value

    class Config:
        """Pydantic configuration."""
        json_schema_extra = {
            "example": {
                "code": "TX",
                "display_name": "Texas",
                "current_volume": 45,
                "target_volume": 50,
                "forecast_next_30_days": 5,
                "status": "low",
                "fulfilled_count": 40,
                "pending_count": 5
            }
        }


class IntakeOrder(BaseModel):
    """An intake order recorded against a region. Immutable once created."""

    order_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    region_code: str = Field(..., min_length=1)
    volume: int = Field(..., gt=0)
    sales_forecast: int = Field(default=0, ge=0)
    window_days: int = Field(default=FORECAST_WINDOW_DAYS, gt=0)
    created_at: datetime = Field(default_factory=datetime.now)

    model_config = {"frozen": True}

    @property
    def counts_toward_forecast(self) -> bool:
        """Whether this order's sales forecast feeds the 30-day forecast."""
        return self.window_days == FORECAST_WINDOW_DAYS
