"""
Backend interfaces for profile persistence and retainer listing.

Defines the abstract interface every backend (hosted REST or local SQLite)
must implement, plus the errors they raise.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List

from ..models.profile import EDITABLE_FIELDS, AttorneyProfile
from ..models.retainer import Retainer, RetainerQuery


class BackendError(Exception):
    """Raised when a backend request fails."""
    pass


class AccessDeniedError(BackendError):
    """Raised when the acting identity may not touch a record."""
    pass


class ProfileNotFoundError(BackendError):
    """Raised when no profile exists for an owner."""
    pass


class ProfileBackend(ABC):
    """Read-one and partial-update access to attorney profiles."""

    @abstractmethod
    def fetch_profile(self, owner_id: str) -> AttorneyProfile:
        """
        Fetch the profile owned by ``owner_id``.

        Raises:
            ProfileNotFoundError: If the owner has no profile
            BackendError: On transport or server failure
        """
        pass

    @abstractmethod
    def update_profile(
        self,
        owner_id: str,
        fields: Dict[str, Any],
        acting_owner_id: str
    ) -> AttorneyProfile:
        """
        Update only the given fields of a profile.

        Args:
            owner_id: Owner of the profile to update
            fields: Field name -> new value; other fields stay untouched
            acting_owner_id: Identity performing the write

        Returns:
            The full persisted profile after the update

        Raises:
            AccessDeniedError: If acting_owner_id does not own the profile
            ProfileNotFoundError: If the owner has no profile
            BackendError: On transport or server failure
        """
        pass


class RetainerBackend(ABC):
    """Read-only, filterable retainer listing."""

    @abstractmethod
    def list_retainers(self, query: RetainerQuery) -> List[Retainer]:
        """
        List retainers matching a query, newest first.

        Args:
            query: Filters to apply

        Returns:
            Matching retainers
        """
        pass


def check_update_fields(fields: Dict[str, Any]) -> None:
    """
    Reject writes to anything but editable profile fields.

    Raises:
        BackendError: If an unknown or read-only field is present
    """
    unknown = sorted(set(fields) - set(EDITABLE_FIELDS))
    if unknown:
        raise BackendError(f"Fields not editable: {', '.join(unknown)}")
