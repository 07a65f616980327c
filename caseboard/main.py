#!/usr/bin/env python3
"""
Main entry point for Caseboard.

Regional intake dashboard for legal case operations.
"""

import sys
from pathlib import Path

from PyQt6.QtWidgets import QApplication

from caseboard import __version__
from caseboard.config import get_config_manager
from caseboard.context import AppContext, create_app_context
from caseboard.database.db_manager import create_database_manager
from caseboard.models import ActionType, Actor
from caseboard.ui import MainWindow
from caseboard.utils import get_logger


class CaseboardApplication:
    """Main application controller."""

    def __init__(self) -> None:
        """Initialize the application."""
        self.logger = get_logger("caseboard")
        self.config = get_config_manager()
        self.context: AppContext = None
        self.main_window = None

    def initialize(self) -> bool:
        """
        Initialize application components.

        Returns:
            True if initialization successful
        """
        try:
            self.logger.info("=" * 60)
            self.logger.info("Caseboard - Regional Intake Dashboard")
            self.logger.info(f"Version {__version__}")
            self.logger.info("=" * 60)

            db_path = self.config.get("database.path", "data/caseboard.db")
            db_exists = Path(db_path).exists()

            if not db_exists:
                self.logger.warning("Database not found. Please run 'python scripts/init_db.py' first.")
                return False

            self.context = create_app_context(self.config, create_database_manager(db_path))

            self.context.audit_logger.log_action(
                action_type=ActionType.SYSTEM_STARTUP,
                actor=Actor.SYSTEM,
                details={
                    "version": __version__,
                    "backend": self.config.get("backend.mode", "local"),
                    "regions": len(self.context.intake_board.regions),
                }
            )

            self.logger.info("Application initialized successfully")
            return True

        except Exception as e:
            self.logger.exception(f"Initialization failed: {e}")
            return False

    def run(self) -> int:
        """
        Run the application.

        Returns:
            Exit code
        """
        try:
            app = QApplication(sys.argv)
            app.setApplicationName("Caseboard")
            app.setOrganizationName("Caseboard")

            self.main_window = MainWindow(self.context)
            self.main_window.show()

            self.logger.info("Application running...")

            exit_code = app.exec()

            self.context.audit_logger.log_action(
                action_type=ActionType.SYSTEM_SHUTDOWN,
                actor=Actor.SYSTEM,
                details={"exit_code": exit_code}
            )

            self.logger.info(f"Application exited with code {exit_code}")
            return exit_code

        except Exception as e:
            self.logger.exception(f"Application error: {e}")
            return 1

    def shutdown(self) -> None:
        """Clean shutdown of the application."""
        self.logger.info("Shutting down application...")

        if self.context:
            self.context.close()

        self.logger.info("Application shutdown complete")


def main() -> int:
    """
    Main entry point.

    Returns:
        Exit code
    """
    app = CaseboardApplication()

    if not app.initialize():
        print("\n" + "=" * 60)
        print("ERROR: Application initialization failed")
        print("=" * 60)
        print("\nPlease run the database initialization script:")
        print("  python scripts/init_db.py")
        print("\nThen try running the application again:")
        print("  caseboard")
        print("=" * 60)
        return 1

    try:
        exit_code = app.run()
    except KeyboardInterrupt:
        print("\n\nReceived interrupt signal")
        exit_code = 0
    finally:
        app.shutdown()

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
