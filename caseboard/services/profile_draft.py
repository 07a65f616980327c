"""
Profile draft service.

Holds the one shared, in-memory editable copy of the signed-in attorney's
profile. Settings tabs read and write fields through it, and each tab
commits only the fields it owns.

Lifecycle: idle -> editing -> editing+dirty -> (commit | cancel) -> idle
"""

import copy
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional

from ..backend.base import AccessDeniedError, ProfileBackend
from ..models import (
    EDITABLE_FIELDS,
    ActionType,
    Actor,
    AttorneyProfile,
    Outcome,
    Session,
)
from ..utils import get_logger


class DraftState(str, Enum):
    """Edit state of the draft."""
    IDLE = "idle"
    EDITING = "editing"


class DraftEvent(str, Enum):
    """Change notifications emitted by the draft."""
    LOADED = "loaded"
    STATE_CHANGED = "state_changed"
    FIELD_CHANGED = "field_changed"
    COMMITTED = "committed"


class DraftStateError(Exception):
    """Raised when an operation is not valid in the current draft state."""
    pass


DraftListener = Callable[[DraftEvent, Optional[str]], None]


class ProfileDraft:
    """Baseline and editable draft of one attorney profile."""

    def __init__(
        self,
        backend: ProfileBackend,
        session: Session,
        audit_logger=None
    ) -> None:
        """
        Initialize draft.

        Args:
            backend: Profile persistence backend
            session: Signed-in identity; only its own profile is editable
            audit_logger: Audit logger (optional)
        """
        self.backend = backend
        self.session = session
        self.audit_logger = audit_logger
        self.logger = get_logger("profile_draft")

        self.state = DraftState.IDLE
        self.profile: Optional[AttorneyProfile] = None
        self.baseline: Dict[str, Any] = {}
        self.draft: Dict[str, Any] = {}
        self._listeners: List[DraftListener] = []

    # Change notification

    def add_listener(self, listener: DraftListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: DraftListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, event: DraftEvent, field: Optional[str] = None) -> None:
        for listener in list(self._listeners):
            listener(event, field)

    # State

    @property
    def owner_id(self) -> str:
        return self.session.owner_id

    @property
    def is_loaded(self) -> bool:
        return self.profile is not None

    @property
    def is_editing(self) -> bool:
        return self.state == DraftState.EDITING

    @property
    def is_dirty(self) -> bool:
        """True iff any draft field differs from the baseline."""
        return self.draft != self.baseline

    def dirty_fields(self) -> List[str]:
        return [name for name in EDITABLE_FIELDS if self.draft.get(name) != self.baseline.get(name)]

    def _set_state(self, state: DraftState) -> None:
        if state != self.state:
            self.state = state
            self._notify(DraftEvent.STATE_CHANGED)

    # Loading

    def load_profile(self, owner_id: Optional[str] = None) -> bool:
        """
        Load the profile baseline from the backend.

        A stale editing flag with no pending changes is cancelled first. A
        dirty draft is never overwritten.

        Args:
            owner_id: Profile owner (defaults to the session owner)

        Returns:
            True if the profile was loaded, False if refused due to pending edits

        Raises:
            BackendError: If the backend read fails
        """
        owner_id = owner_id or self.owner_id

        if self.is_editing:
            if self.is_dirty:
                self.logger.info("Profile load skipped: draft has unsaved changes")
                return False
            self.cancel_editing()

        profile = self.backend.fetch_profile(owner_id)
        self._adopt(profile)
        self._notify(DraftEvent.LOADED)

        if self.audit_logger:
            self.audit_logger.log_action(
                action_type=ActionType.PROFILE_LOADED,
                actor=Actor.SYSTEM,
                owner_id=owner_id,
            )
        return True

    def _adopt(self, profile: AttorneyProfile) -> None:
        self.profile = profile
        self.baseline = profile.editable_values()
        self.draft = copy.deepcopy(self.baseline)

    # Field access

    def get(self, field: str) -> Any:
        if field not in EDITABLE_FIELDS:
            raise KeyError(field)
        return copy.deepcopy(self.draft.get(field))

    def set(self, field: str, value: Any) -> None:
        """
        Set a draft field.

        Raises:
            KeyError: If the field is not editable
            DraftStateError: If the draft is not being edited
        """
        if field not in EDITABLE_FIELDS:
            raise KeyError(field)
        if not self.is_editing:
            raise DraftStateError(f"Cannot set '{field}' while {self.state.value}")
        value = copy.deepcopy(value)
        if self.draft.get(field) == value:
            return
        self.draft[field] = value
        self._notify(DraftEvent.FIELD_CHANGED, field)

    def validate(self, fields: Iterable[str]) -> List[str]:
        """
        Validate the draft, reporting errors for the given fields only.

        Returns:
            Error messages (empty when valid)
        """
        return AttorneyProfile.validation_errors(self.owner_id, self.draft, fields)

    # Transitions

    def start_editing(self) -> None:
        if not self.is_loaded:
            raise DraftStateError("No profile loaded")
        self._set_state(DraftState.EDITING)

    def cancel_editing(self) -> None:
        """Discard pending edits and return to idle."""
        if not self.is_editing:
            return
        discarded = self.dirty_fields()
        self.draft = copy.deepcopy(self.baseline)
        self._set_state(DraftState.IDLE)

        if discarded:
            self.logger.info(f"Discarded profile edits: {', '.join(discarded)}")
            if self.audit_logger:
                self.audit_logger.log_action(
                    action_type=ActionType.PROFILE_EDIT_DISCARDED,
                    actor=Actor.USER,
                    details={"fields": discarded},
                    owner_id=self.owner_id,
                )

    def commit_editing(self, owner_id: str, fields: Iterable[str]) -> AttorneyProfile:
        """
        Persist the named draft fields.

        On success the saved record becomes both baseline and draft, so
        uncommitted edits to fields outside ``fields`` are dropped. On failure
        the draft stays in editing with its values intact and the error
        propagates.

        Args:
            owner_id: Owner of the profile to write
            fields: Fields to persist; all others are left untouched remotely

        Returns:
            The persisted profile

        Raises:
            DraftStateError: If not editing
            AccessDeniedError: If owner_id is not the session owner
            BackendError: If the backend write fails
        """
        if not self.is_editing:
            raise DraftStateError(f"Cannot commit while {self.state.value}")

        fields = list(fields)
        if owner_id != self.owner_id:
            self._audit_commit(owner_id, fields, Outcome.FAILURE, "access denied")
            raise AccessDeniedError(f"{self.owner_id} may not edit the profile of {owner_id}")

        payload = {name: copy.deepcopy(self.draft[name]) for name in fields}
        try:
            profile = self.backend.update_profile(owner_id, payload, self.owner_id)
        except Exception as e:
            self.logger.error(f"Profile commit failed for {owner_id}: {e}")
            self._audit_commit(owner_id, fields, Outcome.FAILURE, str(e))
            raise

        self._adopt(profile)
        self._set_state(DraftState.IDLE)
        self._notify(DraftEvent.COMMITTED)
        self.logger.info(f"Committed profile fields for {owner_id}: {', '.join(fields)}")
        self._audit_commit(owner_id, fields, Outcome.SUCCESS)
        return profile

    def _audit_commit(
        self,
        owner_id: str,
        fields: List[str],
        outcome: Outcome,
        error_message: Optional[str] = None
    ) -> None:
        if self.audit_logger:
            self.audit_logger.log_action(
                action_type=ActionType.PROFILE_UPDATED,
                actor=Actor.USER,
                details={"fields": fields},
                outcome=outcome,
                owner_id=owner_id,
                error_message=error_message,
            )

    def request_leave(self, confirm: Callable[[], bool]) -> bool:
        """
        Navigation guard.

        While editing with unsaved changes, ask ``confirm``; leaving discards
        the edits. Otherwise leaving is always allowed.

        Returns:
            True if navigation may proceed
        """
        if self.is_editing and self.is_dirty:
            if not confirm():
                return False
        self.cancel_editing()
        return True
