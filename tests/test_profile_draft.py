"""
Tests for the profile draft state machine.
"""

from unittest.mock import MagicMock

import pytest

from caseboard.backend import AccessDeniedError, BackendError, LocalBackend
from caseboard.models import ProfileTab, Session, fields_for_tab
from caseboard.services import DraftEvent, DraftState, DraftStateError, ProfileDraft

GENERAL_FIELDS = fields_for_tab(ProfileTab.GENERAL)
CAPACITY_FIELDS = fields_for_tab(ProfileTab.CAPACITY)


class TestProfileDraft:
    """Tests for ProfileDraft against the local backend."""

    @pytest.fixture(autouse=True)
    def setup(self, db_manager, profile):
        self.backend = LocalBackend(db_manager)
        self.backend.save_profile(profile)
        self.session = Session(owner_id=profile.owner_id)
        self.draft = ProfileDraft(self.backend, self.session)
        self.draft.load_profile()

    def test_loaded_draft_is_idle_and_clean(self):
        assert self.draft.state == DraftState.IDLE
        assert not self.draft.is_dirty
        assert self.draft.get("full_name") == "Dana Whitfield"

    def test_start_then_cancel_without_changes_stays_clean(self):
        baseline = dict(self.draft.baseline)

        self.draft.start_editing()
        assert not self.draft.is_dirty
        self.draft.cancel_editing()

        assert not self.draft.is_dirty
        assert self.draft.draft == baseline
        assert self.draft.state == DraftState.IDLE

    def test_start_editing_twice_is_a_no_op(self):
        self.draft.start_editing()
        self.draft.set("phone", "555-0100")

        self.draft.start_editing()

        assert self.draft.is_editing
        assert self.draft.get("phone") == "555-0100"

    def test_cancel_discards_edits(self):
        self.draft.start_editing()
        self.draft.set("firm_name", "Someone Else LLP")
        assert self.draft.is_dirty

        self.draft.cancel_editing()

        assert self.draft.get("firm_name") == "Whitfield & Ames LLP"
        assert not self.draft.is_dirty

    def test_set_outside_editing_raises(self):
        with pytest.raises(DraftStateError):
            self.draft.set("full_name", "New Name")

    def test_set_unknown_field_raises(self):
        self.draft.start_editing()

        with pytest.raises(KeyError):
            self.draft.set("owner_id", "attorney-999")

    def test_get_returns_a_copy(self):
        self.draft.start_editing()

        areas = self.draft.get("practice_areas")
        areas.append("Mass Torts")

        assert not self.draft.is_dirty

    def test_commit_outside_editing_raises(self):
        with pytest.raises(DraftStateError):
            self.draft.commit_editing(self.session.owner_id, GENERAL_FIELDS)

    def test_commit_persists_only_named_fields(self):
        self.draft.start_editing()
        self.draft.set("full_name", "Dana W. Whitfield")
        self.draft.set("max_active_cases", 99)

        self.draft.commit_editing(self.session.owner_id, GENERAL_FIELDS)

        stored = self.backend.fetch_profile(self.session.owner_id)
        assert stored.full_name == "Dana W. Whitfield"
        assert stored.max_active_cases == 40
        assert self.draft.state == DraftState.IDLE
        assert self.draft.baseline["full_name"] == "Dana W. Whitfield"
        assert not self.draft.is_dirty

    def test_commit_from_one_tab_leaves_other_tab_untouched(self):
        self.draft.start_editing()
        self.draft.set("weekly_intake_limit", 12)
        self.draft.commit_editing(self.session.owner_id, CAPACITY_FIELDS)

        self.draft.start_editing()
        self.draft.set("bio", "Trial attorney.")
        self.draft.commit_editing(self.session.owner_id, GENERAL_FIELDS)

        stored = self.backend.fetch_profile(self.session.owner_id)
        assert stored.weekly_intake_limit == 12
        assert stored.bio == "Trial attorney."

    def test_commit_adopts_saved_record_and_drops_other_tab_edits(self):
        self.draft.start_editing()
        self.draft.set("weekly_intake_limit", 20)
        self.draft.set("bio", "Trial attorney.")

        self.draft.commit_editing(self.session.owner_id, GENERAL_FIELDS)

        assert self.draft.get("bio") == "Trial attorney."
        assert self.draft.get("weekly_intake_limit") == 8
        assert not self.draft.is_dirty
        stored = self.backend.fetch_profile(self.session.owner_id)
        assert stored.weekly_intake_limit == 8

    def test_commit_for_other_owner_is_denied_and_keeps_editing(self):
        self.draft.start_editing()
        self.draft.set("full_name", "Intruder")

        with pytest.raises(AccessDeniedError):
            self.draft.commit_editing("attorney-002", GENERAL_FIELDS)

        assert self.draft.is_editing
        assert self.draft.get("full_name") == "Intruder"

    def test_failed_commit_keeps_draft(self):
        self.draft.start_editing()
        self.draft.set("email", "not-an-email")

        with pytest.raises(BackendError):
            self.draft.commit_editing(self.session.owner_id, GENERAL_FIELDS)

        assert self.draft.is_editing
        assert self.draft.get("email") == "not-an-email"
        stored = self.backend.fetch_profile(self.session.owner_id)
        assert stored.email == "dana@whitfieldames.com"

    def test_validate_reports_only_requested_fields(self):
        self.draft.start_editing()
        self.draft.set("email", "not-an-email")
        self.draft.set("years_experience", 500)

        general_errors = self.draft.validate(GENERAL_FIELDS)
        capacity_errors = self.draft.validate(CAPACITY_FIELDS)

        assert len(general_errors) == 1
        assert general_errors[0].startswith("Email")
        assert capacity_errors == []

    def test_request_leave_when_clean_does_not_ask(self):
        confirm = MagicMock(return_value=False)
        self.draft.start_editing()

        assert self.draft.request_leave(confirm)

        confirm.assert_not_called()
        assert self.draft.state == DraftState.IDLE

    def test_request_leave_when_dirty_can_stay(self):
        self.draft.start_editing()
        self.draft.set("phone", "555-0100")

        assert not self.draft.request_leave(lambda: False)

        assert self.draft.is_editing
        assert self.draft.get("phone") == "555-0100"

    def test_request_leave_when_dirty_can_discard(self):
        self.draft.start_editing()
        self.draft.set("phone", "555-0100")

        assert self.draft.request_leave(lambda: True)

        assert self.draft.state == DraftState.IDLE
        assert not self.draft.is_dirty

    def test_load_reconciles_stale_clean_edit_flag(self):
        self.draft.start_editing()

        assert self.draft.load_profile()

        assert self.draft.state == DraftState.IDLE

    def test_load_refuses_to_clobber_dirty_draft(self):
        self.draft.start_editing()
        self.draft.set("phone", "555-0100")

        assert not self.draft.load_profile()

        assert self.draft.get("phone") == "555-0100"
        assert self.draft.is_editing

    def test_load_is_idempotent(self):
        first = dict(self.draft.baseline)

        self.draft.load_profile()

        assert self.draft.baseline == first
        assert not self.draft.is_dirty

    def test_listeners_receive_changes(self):
        events = []
        self.draft.add_listener(lambda event, field: events.append((event, field)))

        self.draft.start_editing()
        self.draft.set("phone", "555-0100")
        self.draft.cancel_editing()

        assert (DraftEvent.FIELD_CHANGED, "phone") in events
        assert [e for e, _ in events].count(DraftEvent.STATE_CHANGED) == 2


class TestProfileDraftWithFailingBackend:
    """Tests for commit failures surfaced by the backend."""

    def test_backend_error_propagates_and_draft_survives(self, profile):
        backend = MagicMock()
        backend.fetch_profile.return_value = profile
        backend.update_profile.side_effect = BackendError("503 Service Unavailable")
        draft = ProfileDraft(backend, Session(owner_id=profile.owner_id))
        draft.load_profile()
        draft.start_editing()
        draft.set("firm_name", "New Firm")

        with pytest.raises(BackendError):
            draft.commit_editing(profile.owner_id, GENERAL_FIELDS)

        assert draft.is_editing
        assert draft.get("firm_name") == "New Firm"
        backend.update_profile.assert_called_once()
        payload = backend.update_profile.call_args[0][1]
        assert set(payload) == set(GENERAL_FIELDS)

    def test_start_editing_requires_loaded_profile(self, profile):
        draft = ProfileDraft(MagicMock(), Session(owner_id=profile.owner_id))

        with pytest.raises(DraftStateError):
            draft.start_editing()
