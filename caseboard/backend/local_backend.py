"""
SQLite-backed profile and retainer backend.

Used when no hosted backend is configured. Enforces the same owner-only
write policy the hosted backend applies through row-level security.
"""

import json
from datetime import datetime
from typing import Any, Dict, List

from pydantic import ValidationError

from ..database.db_manager import DatabaseManager
from ..models.profile import AttorneyProfile
from ..models.retainer import Retainer, RetainerQuery
from ..utils import get_logger
from .base import (
    AccessDeniedError,
    BackendError,
    ProfileBackend,
    ProfileNotFoundError,
    RetainerBackend,
    check_update_fields,
)

JSON_FIELDS = ("practice_areas", "languages", "licensed_states")
BOOL_FIELDS = ("accepting_new_cases",)

PROFILE_COLUMNS = (
    "owner_id", "full_name", "firm_name", "email", "phone", "bar_number",
    "office_state", "bio", "practice_areas", "languages", "licensed_states",
    "years_experience", "accepting_new_cases", "max_active_cases",
    "weekly_intake_limit", "availability_notes", "updated_at",
)


class LocalBackend(ProfileBackend, RetainerBackend):
    """Profile and retainer backend on the local database."""

    def __init__(self, db_manager: DatabaseManager) -> None:
        """
        Initialize local backend.

        Args:
            db_manager: Database manager instance
        """
        self.db_manager = db_manager
        self.logger = get_logger("local_backend")

    def fetch_profile(self, owner_id: str) -> AttorneyProfile:
        """Fetch the profile owned by ``owner_id``."""
        rows = self.db_manager.execute_query(
            "SELECT * FROM attorney_profiles WHERE owner_id = ?",
            (owner_id,)
        )
        if not rows:
            raise ProfileNotFoundError(f"No profile for owner {owner_id}")
        return self._row_to_profile(rows[0])

    def update_profile(
        self,
        owner_id: str,
        fields: Dict[str, Any],
        acting_owner_id: str
    ) -> AttorneyProfile:
        """Update only the given fields of a profile."""
        if acting_owner_id != owner_id:
            raise AccessDeniedError(
                f"{acting_owner_id} may not update the profile of {owner_id}"
            )
        check_update_fields(fields)

        current = self.fetch_profile(owner_id)
        merged = current.model_dump()
        merged.update(fields)
        try:
            validated = AttorneyProfile(**merged)
        except ValidationError as e:
            raise BackendError(f"Invalid profile update: {e}") from e

        if not fields:
            return current

        names = sorted(fields)
        assignments = ", ".join(f"{name} = ?" for name in names)
        params = [self._to_column(name, getattr(validated, name)) for name in names]
        params.extend([datetime.now().isoformat(), owner_id])

        updated = self.db_manager.execute_update(
            f"UPDATE attorney_profiles SET {assignments}, updated_at = ? WHERE owner_id = ?",
            tuple(params)
        )
        if updated == 0:
            raise ProfileNotFoundError(f"No profile for owner {owner_id}")

        self.logger.info(f"Updated profile {owner_id}: {', '.join(names)}")
        return self.fetch_profile(owner_id)

    def save_profile(self, profile: AttorneyProfile) -> None:
        """Insert or fully replace a profile (used for seeding)."""
        placeholders = ", ".join("?" for _ in PROFILE_COLUMNS)
        values = profile.model_dump()
        values["updated_at"] = (profile.updated_at or datetime.now()).isoformat()
        params = tuple(
            self._to_column(name, values[name]) if name != "updated_at" else values[name]
            for name in PROFILE_COLUMNS
        )
        self.db_manager.execute_update(
            f"INSERT OR REPLACE INTO attorney_profiles ({', '.join(PROFILE_COLUMNS)}) "
            f"VALUES ({placeholders})",
            params
        )

    def list_retainers(self, query: RetainerQuery) -> List[Retainer]:
        """List retainers matching a query, newest first."""
        clauses = []
        params: List[Any] = []

        if query.assigned_to is not None:
            clauses.append("assigned_to = ?")
            params.append(query.assigned_to)
        if query.organization_id is not None:
            clauses.append("organization_id = ?")
            params.append(query.organization_id)
        if query.status is not None:
            clauses.append("status = ?")
            params.append(query.status.value)

        sql = "SELECT * FROM retainers"
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)
        sql += " ORDER BY created_at DESC LIMIT ?"
        params.append(query.limit)

        rows = self.db_manager.execute_query(sql, tuple(params))
        return [Retainer(**dict(row)) for row in rows]

    def save_retainer(self, retainer: Retainer) -> None:
        """Insert or replace a retainer (used for seeding)."""
        self.db_manager.execute_update(
            """
            INSERT OR REPLACE INTO retainers (
                retainer_id, client_name, case_type, region_code, status,
                fee_amount, assigned_to, organization_id, signed_at, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                retainer.retainer_id,
                retainer.client_name,
                retainer.case_type,
                retainer.region_code,
                retainer.status.value,
                retainer.fee_amount,
                retainer.assigned_to,
                retainer.organization_id,
                retainer.signed_at.isoformat() if retainer.signed_at else None,
                retainer.created_at.isoformat(),
            )
        )

    def _to_column(self, name: str, value: Any) -> Any:
        """Convert a profile field value into its column representation."""
        if name in JSON_FIELDS:
            return json.dumps(list(value))
        if name in BOOL_FIELDS:
            return 1 if value else 0
        return value

    def _row_to_profile(self, row) -> AttorneyProfile:
        """Convert a database row to an AttorneyProfile."""
        data = dict(row)
        for name in JSON_FIELDS:
            data[name] = json.loads(data[name]) if data[name] else []
        for name in BOOL_FIELDS:
            data[name] = bool(data[name])
        if data.get("updated_at"):
            data["updated_at"] = datetime.fromisoformat(data["updated_at"])
        return AttorneyProfile(**data)
