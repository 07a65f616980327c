"""
Tests for the local SQLite and hosted REST backends.
"""

from datetime import datetime, timedelta
from unittest.mock import MagicMock, patch

import pytest
import requests

from caseboard.backend import (
    AccessDeniedError,
    BackendError,
    LocalBackend,
    ProfileNotFoundError,
    RestBackend,
)
from caseboard.models import Retainer, RetainerQuery, RetainerStatus

BASE_URL = "https://project.example.test"


def make_retainer(retainer_id, assigned_to, organization_id="org-001",
                  status=RetainerStatus.PENDING, days_ago=0):
    return Retainer(
        retainer_id=retainer_id,
        client_name=f"Client {retainer_id}",
        case_type="Personal Injury",
        region_code="TX",
        status=status,
        fee_amount=1500.0,
        assigned_to=assigned_to,
        organization_id=organization_id,
        created_at=datetime(2026, 1, 31) - timedelta(days=days_ago),
    )


def json_response(payload, status_code=200):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status_code} error")
    else:
        response.raise_for_status.return_value = None
    return response


class TestLocalBackend:
    """Tests for LocalBackend."""

    @pytest.fixture(autouse=True)
    def setup(self, db_manager, profile):
        self.backend = LocalBackend(db_manager)
        self.backend.save_profile(profile)
        self.owner_id = profile.owner_id

    def test_fetch_round_trips_lists_and_flags(self, profile):
        stored = self.backend.fetch_profile(self.owner_id)

        assert stored.licensed_states == ["TX", "OK"]
        assert stored.accepting_new_cases is True
        assert stored.updated_at is not None

    def test_fetch_missing_profile_raises(self):
        with pytest.raises(ProfileNotFoundError):
            self.backend.fetch_profile("attorney-404")

    def test_partial_update_touches_only_given_fields(self):
        updated = self.backend.update_profile(
            self.owner_id, {"accepting_new_cases": False}, self.owner_id
        )

        assert updated.accepting_new_cases is False
        assert updated.full_name == "Dana Whitfield"
        assert updated.practice_areas == ["Personal Injury"]

    def test_update_by_other_owner_is_denied(self):
        with pytest.raises(AccessDeniedError):
            self.backend.update_profile(self.owner_id, {"bio": "x"}, "attorney-002")

    def test_update_of_read_only_field_is_rejected(self):
        with pytest.raises(BackendError):
            self.backend.update_profile(self.owner_id, {"owner_id": "x"}, self.owner_id)

    def test_invalid_value_is_rejected(self):
        with pytest.raises(BackendError):
            self.backend.update_profile(self.owner_id, {"years_experience": -1}, self.owner_id)

        assert self.backend.fetch_profile(self.owner_id).years_experience == 12

    def test_list_retainers_filters_and_orders(self):
        self.backend.save_retainer(make_retainer("r1", "attorney-001", days_ago=5))
        self.backend.save_retainer(make_retainer("r2", "attorney-002", days_ago=1))
        self.backend.save_retainer(make_retainer("r3", "attorney-001", days_ago=0,
                                                 status=RetainerStatus.SIGNED))
        self.backend.save_retainer(make_retainer("r4", "attorney-003", organization_id="org-002"))

        mine = self.backend.list_retainers(RetainerQuery(assigned_to="attorney-001"))
        org = self.backend.list_retainers(RetainerQuery(organization_id="org-001"))
        signed = self.backend.list_retainers(
            RetainerQuery(assigned_to="attorney-001", status=RetainerStatus.SIGNED)
        )

        assert [r.retainer_id for r in mine] == ["r3", "r1"]
        assert [r.retainer_id for r in org] == ["r3", "r2", "r1"]
        assert [r.retainer_id for r in signed] == ["r3"]


class TestRestBackend:
    """Tests for RestBackend with requests mocked out."""

    @pytest.fixture(autouse=True)
    def setup(self, profile):
        self.profile = profile
        self.backend = RestBackend(BASE_URL, api_key="anon-key", access_token="user-token")

    def test_requires_base_url(self):
        with pytest.raises(ValueError):
            RestBackend("")

    @patch("caseboard.backend.rest_backend.requests.get")
    def test_fetch_profile_filters_by_owner(self, mock_get):
        mock_get.return_value = json_response([self.profile.model_dump(mode="json")])

        fetched = self.backend.fetch_profile(self.profile.owner_id)

        assert fetched.full_name == "Dana Whitfield"
        args, kwargs = mock_get.call_args
        assert args[0] == f"{BASE_URL}/rest/v1/attorney_profiles"
        assert kwargs["params"]["owner_id"] == f"eq.{self.profile.owner_id}"
        assert kwargs["headers"]["Authorization"] == "Bearer user-token"
        assert kwargs["headers"]["apikey"] == "anon-key"

    @patch("caseboard.backend.rest_backend.requests.get")
    def test_fetch_ignores_unknown_columns(self, mock_get):
        row = self.profile.model_dump(mode="json")
        row["created_at"] = "2026-01-01T00:00:00"
        mock_get.return_value = json_response([row])

        assert self.backend.fetch_profile(self.profile.owner_id).owner_id == self.profile.owner_id

    @patch("caseboard.backend.rest_backend.requests.get")
    def test_fetch_missing_profile_raises(self, mock_get):
        mock_get.return_value = json_response([])

        with pytest.raises(ProfileNotFoundError):
            self.backend.fetch_profile("attorney-404")

    @patch("caseboard.backend.rest_backend.requests.patch")
    def test_update_sends_only_given_fields(self, mock_patch):
        row = self.profile.model_dump(mode="json")
        row["weekly_intake_limit"] = 12
        mock_patch.return_value = json_response([row])

        updated = self.backend.update_profile(
            self.profile.owner_id, {"weekly_intake_limit": 12}, self.profile.owner_id
        )

        assert updated.weekly_intake_limit == 12
        kwargs = mock_patch.call_args[1]
        assert kwargs["json"] == {"weekly_intake_limit": 12}
        assert kwargs["headers"]["Prefer"] == "return=representation"

    @patch("caseboard.backend.rest_backend.requests.patch")
    @pytest.mark.parametrize("status_code", [401, 403])
    def test_auth_errors_become_access_denied(self, mock_patch, status_code):
        mock_patch.return_value = json_response({"message": "denied"}, status_code)

        with pytest.raises(AccessDeniedError):
            self.backend.update_profile(self.profile.owner_id, {"bio": "x"}, self.profile.owner_id)

    @patch("caseboard.backend.rest_backend.requests.patch")
    def test_server_error_becomes_backend_error(self, mock_patch):
        mock_patch.return_value = json_response({"message": "boom"}, 500)

        with pytest.raises(BackendError):
            self.backend.update_profile(self.profile.owner_id, {"bio": "x"}, self.profile.owner_id)

    @patch("caseboard.backend.rest_backend.requests.patch")
    def test_network_error_becomes_backend_error(self, mock_patch):
        mock_patch.side_effect = requests.ConnectionError("offline")

        with pytest.raises(BackendError):
            self.backend.update_profile(self.profile.owner_id, {"bio": "x"}, self.profile.owner_id)

    @patch("caseboard.backend.rest_backend.requests.patch")
    def test_update_hidden_by_row_security_raises_not_found(self, mock_patch):
        mock_patch.return_value = json_response([])

        with pytest.raises(ProfileNotFoundError):
            self.backend.update_profile(self.profile.owner_id, {"bio": "x"}, self.profile.owner_id)

    @patch("caseboard.backend.rest_backend.requests.patch")
    def test_foreign_owner_is_rejected_before_request(self, mock_patch):
        with pytest.raises(AccessDeniedError):
            self.backend.update_profile(self.profile.owner_id, {"bio": "x"}, "attorney-002")

        mock_patch.assert_not_called()

    @patch("caseboard.backend.rest_backend.requests.get")
    def test_list_retainers_builds_filters(self, mock_get):
        retainer = make_retainer("r1", "attorney-001")
        mock_get.return_value = json_response([retainer.model_dump(mode="json")])

        retainers = self.backend.list_retainers(
            RetainerQuery(organization_id="org-001", status=RetainerStatus.PENDING, limit=50)
        )

        assert [r.retainer_id for r in retainers] == ["r1"]
        params = mock_get.call_args[1]["params"]
        assert params["organization_id"] == "eq.org-001"
        assert params["status"] == "eq.pending"
        assert params["order"] == "created_at.desc"
        assert params["limit"] == "50"
        assert "assigned_to" not in params
