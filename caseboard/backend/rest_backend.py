"""
Hosted backend client.

Talks to a PostgREST-style REST API (the hosted database's auto-generated
endpoints). Row-level security on the server restricts profile writes to
the owning identity, derived from the bearer token.
"""

from typing import Any, Dict, List, Optional
from urllib.parse import urljoin

import requests
from pydantic import ValidationError

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

PROFILES_PATH = "/rest/v1/attorney_profiles"
RETAINERS_PATH = "/rest/v1/retainers"


class RestBackend(ProfileBackend, RetainerBackend):
    """Profile and retainer backend over the hosted REST API."""

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        access_token: Optional[str] = None,
        timeout_seconds: int = 15,
    ):
        """
        Initialize REST backend.

        Args:
            base_url: Base URL of the hosted project
            api_key: Project API key
            access_token: Bearer token of the signed-in session
            timeout_seconds: Per-request timeout
        """
        if not base_url:
            raise ValueError("A backend URL is required for the REST backend")

        self.base_url = base_url.rstrip("/") + "/"
        self.api_key = api_key
        self.access_token = access_token
        self.timeout = timeout_seconds
        self.logger = get_logger("rest_backend")

    def _headers(self, prefer: Optional[str] = None) -> Dict[str, str]:
        """Build request headers."""
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["apikey"] = self.api_key
        token = self.access_token or self.api_key
        if token:
            headers["Authorization"] = f"Bearer {token}"
        if prefer:
            headers["Prefer"] = prefer
        return headers

    def _url(self, path: str) -> str:
        return urljoin(self.base_url, path.lstrip("/"))

    def _check_response(self, response: requests.Response, action: str) -> None:
        """Translate HTTP errors into backend errors."""
        if response.status_code in (401, 403):
            raise AccessDeniedError(f"{action} denied ({response.status_code})")
        try:
            response.raise_for_status()
        except requests.HTTPError as e:
            raise BackendError(f"{action} failed: {e}") from e

    def fetch_profile(self, owner_id: str) -> AttorneyProfile:
        """Fetch the profile owned by ``owner_id``."""
        try:
            response = requests.get(
                self._url(PROFILES_PATH),
                params={"owner_id": f"eq.{owner_id}", "select": "*"},
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            self.logger.error(f"Failed to fetch profile {owner_id}: {e}")
            raise BackendError(f"Failed to fetch profile: {e}") from e

        self._check_response(response, "Profile fetch")
        rows = response.json()
        if not rows:
            raise ProfileNotFoundError(f"No profile for owner {owner_id}")
        return self._parse_profile(rows[0])

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

        try:
            response = requests.patch(
                self._url(PROFILES_PATH),
                params={"owner_id": f"eq.{owner_id}"},
                json=fields,
                headers=self._headers(prefer="return=representation"),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            self.logger.error(f"Failed to update profile {owner_id}: {e}")
            raise BackendError(f"Failed to update profile: {e}") from e

        self._check_response(response, "Profile update")
        rows = response.json()
        if not rows:
            # Row-level security hides rows the token does not own
            raise ProfileNotFoundError(f"No writable profile for owner {owner_id}")

        self.logger.info(f"Updated profile {owner_id}: {', '.join(sorted(fields))}")
        return self._parse_profile(rows[0])

    def list_retainers(self, query: RetainerQuery) -> List[Retainer]:
        """List retainers matching a query, newest first."""
        params = {
            "select": "*",
            "order": "created_at.desc",
            "limit": str(query.limit),
        }
        if query.assigned_to is not None:
            params["assigned_to"] = f"eq.{query.assigned_to}"
        if query.organization_id is not None:
            params["organization_id"] = f"eq.{query.organization_id}"
        if query.status is not None:
            params["status"] = f"eq.{query.status.value}"

        try:
            response = requests.get(
                self._url(RETAINERS_PATH),
                params=params,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            self.logger.error(f"Failed to list retainers: {e}")
            raise BackendError(f"Failed to list retainers: {e}") from e

        self._check_response(response, "Retainer listing")
        try:
            return [Retainer(**row) for row in response.json()]
        except ValidationError as e:
            raise BackendError(f"Malformed retainer data: {e}") from e

    def _parse_profile(self, row: Dict[str, Any]) -> AttorneyProfile:
        """Parse a profile row, dropping columns the model does not know."""
        known = {k: v for k, v in row.items() if k in AttorneyProfile.model_fields}
        try:
            return AttorneyProfile(**known)
        except ValidationError as e:
            raise BackendError(f"Malformed profile data: {e}") from e
