"""
Profile and retainer backends.

Provides the hosted REST backend and a local SQLite backend behind one
interface.
"""

from .base import (
    AccessDeniedError,
    BackendError,
    ProfileBackend,
    ProfileNotFoundError,
    RetainerBackend,
)
from .local_backend import LocalBackend
from .rest_backend import RestBackend

__all__ = [
    "ProfileBackend",
    "RetainerBackend",
    "BackendError",
    "AccessDeniedError",
    "ProfileNotFoundError",
    "LocalBackend",
    "RestBackend",
]
