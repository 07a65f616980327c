"""
Utility functions for Caseboard.
"""

from .logger import (
    AuditLogger,
    CaseboardLogger,
    get_audit_logger,
    get_logger,
    reset_loggers,
)

__all__ = [
    "CaseboardLogger",
    "AuditLogger",
    "get_logger",
    "get_audit_logger",
    "reset_loggers",
]
