"""
Local persistence for Caseboard.
"""

from .db_manager import DatabaseManager, create_database_manager

__all__ = ["DatabaseManager", "create_database_manager"]
