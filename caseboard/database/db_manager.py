"""
Local SQLite database manager.

Holds regions, intake orders, the local profile/retainer store, the
key-value document cache and the audit log.
"""

import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Tuple

from ..models.region import IntakeOrder, Region


class DatabaseManager:
    """Manages the application's SQLite database."""

    def __init__(self, db_path: str) -> None:
        """
        Initialize database manager.

        Args:
            db_path: Path to the database file
        """
        self.db_path = Path(db_path)

        # Ensure database directory exists
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self.schema_path = Path(__file__).parent / "schema.sql"

    @contextmanager
    def get_connection(self):
        """
        Context manager for database connections.

        Commits on success and rolls back on error.

        Yields:
            Database connection object
        """
        conn = sqlite3.connect(str(self.db_path))
        conn.execute("PRAGMA foreign_keys = ON")
        conn.row_factory = sqlite3.Row

        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def initialize_database(self) -> None:
        """
        Initialize database with schema from schema.sql.

        Creates all tables if they don't exist.
        """
        if not self.schema_path.exists():
            raise FileNotFoundError(f"Schema file not found: {self.schema_path}")

        with open(self.schema_path, 'r') as f:
            schema_sql = f.read()

        with self.get_connection() as conn:
            conn.executescript(schema_sql)

    def execute_query(
        self,
        query: str,
        params: Optional[Tuple] = None
    ) -> List[sqlite3.Row]:
        """
        Execute a SELECT query and return results.

        Args:
            query: SQL SELECT query
            params: Query parameters (optional)

        Returns:
            List of rows as dict-like objects
        """
        with self.get_connection() as conn:
            cursor = conn.execute(query, params or ())
            return cursor.fetchall()

    def execute_update(
        self,
        query: str,
        params: Optional[Tuple] = None
    ) -> int:
        """
        Execute an INSERT, UPDATE, or DELETE query.

        Args:
            query: SQL query
            params: Query parameters (optional)

        Returns:
            Number of affected rows
        """
        with self.get_connection() as conn:
            cursor = conn.execute(query, params or ())
            return cursor.rowcount

    def table_exists(self, table_name: str) -> bool:
        """Check if a table exists in the database."""
        query = """
            SELECT name FROM sqlite_master
            WHERE type='table' AND name=?
        """
        rows = self.execute_query(query, (table_name,))
        return len(rows) > 0

    # Key-value cache

    def get_cached_value(self, key: str) -> Optional[str]:
        """Get a cached text value, or None if absent."""
        rows = self.execute_query("SELECT value FROM kv_cache WHERE key = ?", (key,))
        return rows[0]['value'] if rows else None

    def set_cached_value(self, key: str, value: str) -> None:
        """Insert or replace a cached text value."""
        self.execute_update(
            """
            INSERT INTO kv_cache (key, value, updated_at)
            VALUES (?, ?, ?)
            ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
            """,
            (key, value, datetime.now().isoformat())
        )

    # Region and intake order management

    def get_regions(self) -> List[Region]:
        """Get all regions ordered by code."""
        rows = self.execute_query("SELECT * FROM regions ORDER BY code")
        return [Region(**dict(row)) for row in rows]

    def upsert_region(self, region: Region) -> None:
        """Insert a region or overwrite its volumes and status."""
        self.execute_update(
            """
            INSERT INTO regions (
                code, display_name, current_volume, target_volume,
                forecast_next_30_days, status, fulfilled_count, pending_count
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(code) DO UPDATE SET
                display_name = excluded.display_name,
                current_volume = excluded.current_volume,
                target_volume = excluded.target_volume,
                forecast_next_30_days = excluded.forecast_next_30_days,
                status = excluded.status,
                fulfilled_count = excluded.fulfilled_count,
                pending_count = excluded.pending_count
            """,
            (
                region.code,
                region.display_name,
                region.current_volume,
                region.target_volume,
                region.forecast_next_30_days,
                region.status.value,
                region.fulfilled_count,
                region.pending_count,
            )
        )

    def save_order_with_region(self, order: IntakeOrder, region: Optional[Region]) -> None:
        """
        Persist an intake order and the region it updated in one transaction.

        Args:
            order: The new order
            region: The mutated region, or None when the code is unknown
        """
        with self.get_connection() as conn:
            conn.execute(
                """
                INSERT INTO intake_orders (
                    order_id, region_code, volume, sales_forecast, window_days, created_at
                ) VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    order.order_id,
                    order.region_code,
                    order.volume,
                    order.sales_forecast,
                    order.window_days,
                    order.created_at.isoformat(),
                )
            )
            if region is not None:
                conn.execute(
                    """
                    UPDATE regions
                    SET current_volume = ?, forecast_next_30_days = ?,
                        status = ?, pending_count = ?
                    WHERE code = ?
                    """,
                    (
                        region.current_volume,
                        region.forecast_next_30_days,
                        region.status.value,
                        region.pending_count,
                        region.code,
                    )
                )

    def get_intake_orders(self, limit: int = 100) -> List[IntakeOrder]:
        """Get intake orders, newest first."""
        rows = self.execute_query(
            "SELECT * FROM intake_orders ORDER BY created_at DESC LIMIT ?",
            (limit,)
        )
        return [self._row_to_order(row) for row in rows]

    def _row_to_order(self, row: sqlite3.Row) -> IntakeOrder:
        """Convert a database row to an IntakeOrder."""
        return IntakeOrder(
            order_id=row['order_id'],
            region_code=row['region_code'],
            volume=row['volume'],
            sales_forecast=row['sales_forecast'],
            window_days=row['window_days'],
            created_at=datetime.fromisoformat(row['created_at']),
        )

    def get_row_count(self, table_name: str) -> int:
        """Get the number of rows in a table."""
        query = f"SELECT COUNT(*) as count FROM {table_name}"
        rows = self.execute_query(query)
        return rows[0]['count'] if rows else 0

    def close(self) -> None:
        """
        Close the database manager.

        Connections are opened per transaction, so there is nothing to release.
        """
        pass


def create_database_manager(db_path: str = "data/caseboard.db") -> DatabaseManager:
    """
    Factory function to create a DatabaseManager instance.

    Args:
        db_path: Path to database file

    Returns:
        Configured DatabaseManager instance
    """
    return DatabaseManager(db_path)

