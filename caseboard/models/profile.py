"""
Attorney profile data models.

One profile exists per owner. The settings page splits its fields into
three tabs, each owning a disjoint subset.
"""

import re
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

from pydantic import BaseModel, Field, ValidationError, field_validator

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class ProfileTab(str, Enum):
    """Settings tabs that edit the profile."""
    GENERAL = "general"
    EXPERTISE = "expertise"
    CAPACITY = "capacity"


TAB_FIELDS: Dict[ProfileTab, Tuple[str, ...]] = {
    ProfileTab.GENERAL: (
        "full_name",
        "firm_name",
        "email",
        "phone",
        "bar_number",
        "office_state",
        "bio",
    ),
    ProfileTab.EXPERTISE: (
        "practice_areas",
        "languages",
        "licensed_states",
        "years_experience",
    ),
    ProfileTab.CAPACITY: (
        "accepting_new_cases",
        "max_active_cases",
        "weekly_intake_limit",
        "availability_notes",
    ),
}

EDITABLE_FIELDS: Tuple[str, ...] = tuple(
    name for fields in TAB_FIELDS.values() for name in fields
)


class AttorneyProfile(BaseModel):
    """Persisted attorney profile record."""

    owner_id: str = Field(..., min_length=1)

    # General
    full_name: str = Field(default="", max_length=200)
    firm_name: str = Field(default="", max_length=200)
    email: str = Field(default="", max_length=320)
    phone: str = Field(default="", max_length=40)
    bar_number: str = Field(default="", max_length=40)
    office_state: str = Field(default="", max_length=2)
    bio: str = Field(default="", max_length=4000)

    # Expertise
    practice_areas: List[str] = Field(default_factory=list)
    languages: List[str] = Field(default_factory=lambda: ["English"])
    licensed_states: List[str] = Field(default_factory=list)
    years_experience: int = Field(default=0, ge=0, le=80)

    # Capacity
    accepting_new_cases: bool = Field(default=True)
    max_active_cases: int = Field(default=25, ge=0, le=1000)
    weekly_intake_limit: int = Field(default=5, ge=0, le=500)
    availability_notes: str = Field(default="", max_length=1000)

    updated_at: Optional[datetime] = None

    @field_validator('email')
    @classmethod
    def validate_email(cls, v: str) -> str:
        """Allow an empty email, otherwise require a plausible address."""
        v = v.strip()
        if v and not EMAIL_PATTERN.match(v):
            raise ValueError("Invalid email address")
        return v

    @field_validator('office_state')
    @classmethod
    def normalize_office_state(cls, v: str) -> str:
        """Office state is a two-letter region code."""
        return v.strip().upper()

    @field_validator('licensed_states')
    @classmethod
    def normalize_licensed_states(cls, v: List[str]) -> List[str]:
        """Uppercase and de-duplicate licensed states, keeping order."""
        seen: List[str] = []
        for code in v:
            code = code.strip().upper()
            if code and code not in seen:
                seen.append(code)
        return seen

    def editable_values(self) -> Dict[str, Any]:
        """Get a deep copy of all editable field values."""
        return self.model_dump(include=set(EDITABLE_FIELDS))

    @classmethod
    def validation_errors(
        cls,
        owner_id: str,
        values: Dict[str, Any],
        fields: Iterable[str]
    ) -> List[str]:
        """
        Validate draft values, reporting only errors for the given fields.

        Args:
            owner_id: Profile owner
            values: Full set of draft values
            fields: Fields whose errors should be reported

        Returns:
            Human-readable error messages (empty when valid)
        """
        wanted = set(fields)
        try:
            cls(owner_id=owner_id, **values)
        except ValidationError as e:
            messages = []
            for error in e.errors():
                field = str(error["loc"][0]) if error["loc"] else ""
                if field in wanted:
                    messages.append(f"{field.replace('_', ' ').capitalize()}: {error['msg']}")
            return messages
        return []

    class Config:
        """Pydantic configuration."""
        json_schema_extra = {
            "example": {
                "owner_id": "attorney-001",
                "full_name": "Dana Whitfield",
                "firm_name": "Whitfield & Ames LLP",
                "email": "dana@whitfieldames.com",
                "office_state": "TX",
                "practice_areas": ["Personal Injury", "Workers' Compensation"],
                "licensed_states": ["TX", "OK"],
                "max_active_cases": 40,
                "weekly_intake_limit": 8
            }
        }


def fields_for_tab(tab: ProfileTab) -> List[str]:
    """Get the field names owned by a settings tab."""
    return list(TAB_FIELDS[tab])
