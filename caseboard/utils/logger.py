"""
Logging infrastructure for Caseboard.

Provides structured logging with file rotation and audit trail integration.
"""

import json
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from ..config.config_manager import get_config_manager
from ..models.audit_log import ActionType, Actor, AuditLog, Outcome


class CaseboardLogger:
    """
    Root logger for the application.

    Provides both file and console logging with proper formatting. Named
    loggers returned by ``get_logger`` are children of this one.
    """

    def __init__(
        self,
        name: str = "caseboard",
        log_dir: Optional[str] = None,
        log_file: str = "caseboard.log"
    ) -> None:
        """
        Initialize logger.

        Args:
            name: Root logger name
            log_dir: Directory for log files (defaults to config logging.dir)
            log_file: Log file name
        """
        config = get_config_manager()
        self.name = name
        self.log_dir = Path(log_dir or config.get("logging.dir", "logs"))
        self.log_file = self.log_dir / log_file

        self.log_dir.mkdir(parents=True, exist_ok=True)

        self.log_level = config.get("logging.level", "INFO")
        self.max_file_size_mb = config.get("logging.max_file_size_mb", 10)
        self.backup_count = config.get("logging.backup_count", 5)

        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, self.log_level))
        self.logger.propagate = False

        # Remove existing handlers
        self.logger.handlers.clear()

        self.file_formatter = logging.Formatter(
            fmt='%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        self.console_formatter = logging.Formatter(
            fmt='%(asctime)s - %(levelname)s - %(message)s',
            datefmt='%H:%M:%S'
        )

        self._setup_file_handler()
        self._setup_console_handler()

    def _setup_file_handler(self) -> None:
        """Set up rotating file handler."""
        max_bytes = self.max_file_size_mb * 1024 * 1024

        file_handler = RotatingFileHandler(
            self.log_file,
            maxBytes=max_bytes,
            backupCount=self.backup_count,
            encoding='utf-8'
        )
        file_handler.setLevel(logging.DEBUG)  # File gets all logs
        file_handler.setFormatter(self.file_formatter)

        self.logger.addHandler(file_handler)

    def _setup_console_handler(self) -> None:
        """Set up console handler."""
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(getattr(logging, self.log_level))
        console_handler.setFormatter(self.console_formatter)

        self.logger.addHandler(console_handler)

    def get_child(self, name: str) -> logging.Logger:
        """Get a named child of the root logger."""
        if name == self.name:
            return self.logger
        return self.logger.getChild(name)

    def close(self) -> None:
        """Close and detach all handlers."""
        for handler in list(self.logger.handlers):
            handler.close()
            self.logger.removeHandler(handler)


class AuditLogger:
    """
    Audit logger that writes to the database audit log.

    Every entry also goes to the file log.
    """

    def __init__(self, db_manager=None) -> None:
        """
        Initialize audit logger.

        Args:
            db_manager: Database manager instance (optional)
        """
        self.db_manager = db_manager
        self.file_logger = get_logger("audit")

    def log_action(
        self,
        action_type: ActionType,
        actor: Actor,
        details: Optional[dict] = None,
        outcome: Outcome = Outcome.SUCCESS,
        owner_id: Optional[str] = None,
        order_id: Optional[str] = None,
        error_message: Optional[str] = None
    ) -> AuditLog:
        """
        Log an action to the audit trail.

        Args:
            action_type: Type of action
            actor: Who performed the action
            details: Additional details
            outcome: Action outcome
            owner_id: Related profile owner
            order_id: Related intake order
            error_message: Error message if failed

        Returns:
            The recorded AuditLog entry
        """
        entry = AuditLog(
            action_type=action_type,
            actor=actor,
            details=details or {},
            outcome=outcome,
            owner_id=owner_id,
            order_id=order_id,
            error_message=error_message,
        )

        self.file_logger.info(f"AUDIT: {entry.to_readable_string()}")

        if self.db_manager:
            try:
                query = """
                    INSERT INTO audit_log
                    (log_id, timestamp, action_type, actor, details, outcome,
                     owner_id, order_id, error_message)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """
                self.db_manager.execute_update(
                    query,
                    (
                        entry.log_id,
                        entry.timestamp.isoformat(),
                        entry.action_type.value,
                        entry.actor.value,
                        json.dumps(entry.details),
                        entry.outcome.value,
                        entry.owner_id,
                        entry.order_id,
                        entry.error_message,
                    )
                )
            except Exception as e:
                self.file_logger.error(f"Failed to write audit log to database: {e}")

        return entry

    def get_recent_logs(self, limit: int = 100) -> list:
        """
        Get recent audit logs from database.

        Args:
            limit: Maximum number of logs to retrieve

        Returns:
            List of audit log entries as dicts
        """
        if not self.db_manager:
            return []

        query = """
            SELECT * FROM audit_log
            ORDER BY timestamp DESC
            LIMIT ?
        """
        rows = self.db_manager.execute_query(query, (limit,))
        return [dict(row) for row in rows]


# Global logger instances
_logger: Optional[CaseboardLogger] = None
_audit_logger: Optional[AuditLogger] = None


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get application logger.

    Args:
        name: Optional child logger name (defaults to the root caseboard logger)

    Returns:
        Logger instance
    """
    global _logger
    if _logger is None:
        _logger = CaseboardLogger()
    return _logger.get_child(name or _logger.name)


def get_audit_logger(db_manager=None) -> AuditLogger:
    """
    Get audit logger instance.

    Args:
        db_manager: Database manager instance

    Returns:
        AuditLogger instance
    """
    global _audit_logger
    if _audit_logger is None:
        _audit_logger = AuditLogger(db_manager)
    elif db_manager is not None:
        _audit_logger.db_manager = db_manager
    return _audit_logger


def reset_loggers() -> None:
    """Reset global logger instances (mainly for testing)."""
    global _logger, _audit_logger
    if _logger is not None:
        _logger.close()
    _logger = None
    _audit_logger = None
