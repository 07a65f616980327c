"""
Business logic services for Caseboard.
"""

from .intake_board import BoardEvent, IntakeBoard
from .profile_draft import DraftEvent, DraftState, DraftStateError, ProfileDraft
from .retainer_service import RetainerService

__all__ = [
    "BoardEvent",
    "IntakeBoard",
    "DraftEvent",
    "DraftState",
    "DraftStateError",
    "ProfileDraft",
    "RetainerService",
]
