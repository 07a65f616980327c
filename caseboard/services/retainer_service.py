"""
Retainer listing service.

Scopes the read-only retainer listing to what the signed-in user may see:
attorneys see their own assignments, managers and admins their organization.
"""

from typing import Any, Dict, List, Optional

from ..backend.base import RetainerBackend
from ..models import Retainer, RetainerQuery, RetainerStatus, Session
from ..utils import get_logger


class RetainerService:
    """Service for role-scoped retainer listing."""

    def __init__(self, backend: RetainerBackend, limit: int = 200):
        """
        Initialize retainer service.

        Args:
            backend: Retainer backend
            limit: Maximum number of retainers fetched per listing
        """
        self.backend = backend
        self.limit = limit
        self.logger = get_logger("retainer_service")

    def query_for_session(
        self,
        session: Session,
        status: Optional[RetainerStatus] = None
    ) -> RetainerQuery:
        """Build the backend query a session is allowed to run."""
        if session.sees_organization and session.organization_id:
            return RetainerQuery(
                organization_id=session.organization_id,
                status=status,
                limit=self.limit,
            )
        return RetainerQuery(assigned_to=session.owner_id, status=status, limit=self.limit)

    def list_for_session(
        self,
        session: Session,
        status: Optional[RetainerStatus] = None,
        search: Optional[str] = None
    ) -> List[Retainer]:
        """
        List the retainers visible to a session, newest first.

        Args:
            session: Signed-in identity
            status: Only retainers with this status (optional)
            search: Case-insensitive client name or case type filter (optional)

        Returns:
            Matching retainers
        """
        query = self.query_for_session(session, status)
        retainers = self.backend.list_retainers(query)

        if search and search.strip():
            needle = search.strip().lower()
            retainers = [
                r for r in retainers
                if needle in r.client_name.lower() or needle in r.case_type.lower()
            ]

        self.logger.debug(f"Listed {len(retainers)} retainers for {session.owner_id}")
        return retainers

    @staticmethod
    def summarize(retainers: List[Retainer]) -> Dict[str, Any]:
        """
        Summarize a retainer list.

        Returns:
            Dictionary with per-status counts, total count and total fees
        """
        counts = {status.value: 0 for status in RetainerStatus}
        for retainer in retainers:
            counts[retainer.status.value] += 1

        return {
            "counts": counts,
            "total": len(retainers),
            "total_fees": round(sum(r.fee_amount for r in retainers), 2),
        }
