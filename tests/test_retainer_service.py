"""
Tests for role-scoped retainer listing.
"""

from datetime import datetime, timedelta

import pytest

from caseboard.backend import LocalBackend
from caseboard.models import Retainer, RetainerStatus, Session, SessionRole
from caseboard.services import RetainerService


def seed(backend):
    base = datetime(2026, 3, 1, 9, 0)
    rows = [
        ("r1", "Maria Lopez", "Personal Injury", "attorney-001", "org-001", RetainerStatus.PENDING, 450.0),
        ("r2", "James Carter", "Workers Compensation", "attorney-001", "org-001", RetainerStatus.SIGNED, 1200.0),
        ("r3", "Priya Natarajan", "Medical Malpractice", "attorney-002", "org-001", RetainerStatus.PENDING, 3000.0),
        ("r4", "Tom Brady", "Personal Injury", "attorney-009", "org-002", RetainerStatus.ACTIVE, 800.0),
    ]
    for offset, (rid, client, case_type, owner, org, status, fee) in enumerate(rows):
        backend.save_retainer(Retainer(
            retainer_id=rid,
            client_name=client,
            case_type=case_type,
            status=status,
            fee_amount=fee,
            assigned_to=owner,
            organization_id=org,
            created_at=base + timedelta(hours=offset),
        ))


class TestRetainerService:
    """Tests for RetainerService."""

    @pytest.fixture(autouse=True)
    def setup(self, db_manager):
        backend = LocalBackend(db_manager)
        seed(backend)
        self.service = RetainerService(backend)
        self.attorney = Session(owner_id="attorney-001", organization_id="org-001")
        self.manager = Session(
            owner_id="manager-001",
            role=SessionRole.INTAKE_MANAGER,
            organization_id="org-001",
        )

    def test_attorney_sees_own_assignments(self):
        retainers = self.service.list_for_session(self.attorney)

        assert [r.retainer_id for r in retainers] == ["r2", "r1"]

    def test_manager_sees_organization(self):
        retainers = self.service.list_for_session(self.manager)

        assert [r.retainer_id for r in retainers] == ["r3", "r2", "r1"]

    def test_manager_without_organization_falls_back_to_own(self):
        session = Session(owner_id="attorney-002", role=SessionRole.ADMIN)

        query = self.service.query_for_session(session)

        assert query.assigned_to == "attorney-002"
        assert query.organization_id is None

    def test_status_filter(self):
        retainers = self.service.list_for_session(self.manager, status=RetainerStatus.PENDING)

        assert {r.retainer_id for r in retainers} == {"r1", "r3"}

    @pytest.mark.parametrize("search,expected", [
        ("lopez", ["r1"]),
        ("  MALPRACTICE ", ["r3"]),
        ("", ["r3", "r2", "r1"]),
        ("nobody", []),
    ])
    def test_search_matches_client_or_case_type(self, search, expected):
        retainers = self.service.list_for_session(self.manager, search=search)

        assert [r.retainer_id for r in retainers] == expected

    def test_summarize(self):
        summary = RetainerService.summarize(self.service.list_for_session(self.manager))

        assert summary["total"] == 3
        assert summary["counts"]["pending"] == 2
        assert summary["counts"]["signed"] == 1
        assert summary["counts"]["closed"] == 0
        assert summary["total_fees"] == 4650.0
