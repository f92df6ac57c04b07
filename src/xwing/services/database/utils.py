"""Generic database utility functions for Supabase interactions."""

import logging
from typing import Any

from postgrest.exceptions import APIError
from supabase import Client

from src.xwing.services.database.exceptions import (
    UNIQUE_VIOLATION,
    DatabaseError,
    UniqueViolationError,
)

logger = logging.getLogger(__name__)


class SupabaseQueryBuilder:
    """Helper class for building and executing Supabase queries.

    Every storage failure leaves this class as a ``DatabaseError`` (or its
    ``UniqueViolationError`` subclass), so callers never see PostgREST or
    transport exceptions.
    """

    def __init__(self, client: Client) -> None:
        """
        Initialize query builder.

        Args:
            client: Supabase client instance
        """
        self.client = client

    def _execute(self, query: Any, table: str, action: str) -> Any:
        try:
            return query.execute()
        except APIError as e:
            if e.code == UNIQUE_VIOLATION:
                logger.info(f"Unique constraint rejected {action} on {table}: {e.message}")
                raise UniqueViolationError(f"{action} on {table} violates a unique constraint") from e
            logger.error(f"Failed to {action} on {table}: {e}", exc_info=True)
            raise DatabaseError(f"{action} on {table} failed") from e
        except Exception as e:
            logger.error(f"Failed to {action} on {table}: {e}", exc_info=True)
            raise DatabaseError(f"{action} on {table} failed") from e

    def get_by_id(self, table: str, record_id: str, columns: str = "*") -> dict[str, Any] | None:
        """
        Fetch a single record by ID.

        Args:
            table: Table name
            record_id: Record ID
            columns: Columns to select (default: "*")

        Returns:
            Record dictionary or None if not found

        Example:
            >>> builder = SupabaseQueryBuilder(client)
            >>> squad = builder.get_by_id("squads", "squad_1f0c...")
        """
        query = self.client.table(table).select(columns).eq("id", record_id)
        response = self._execute(query, table, "select")
        return response.data[0] if response.data else None

    def list_records(
        self,
        table: str,
        columns: str = "*",
        filters: dict[str, Any] | None = None,
        order_by: list[str] | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """
        List records with optional filtering and ascending multi-column ordering.

        Args:
            table: Table name
            columns: Columns to select (default: "*")
            filters: Dictionary of field:value pairs for equality filtering
            order_by: Columns to order by, most significant first
            limit: Maximum records to return

        Returns:
            List of record dictionaries

        Example:
            >>> builder = SupabaseQueryBuilder(client)
            >>> squads = builder.list_records(
            ...     "squads",
            ...     filters={"user_id": "user-google_oauth2-123"},
            ...     order_by=["user_id", "faction", "name"],
            ... )
        """
        query = self.client.table(table).select(columns)

        if filters:
            for field, value in filters.items():
                query = query.eq(field, value)

        for column in order_by or []:
            query = query.order(column)

        if limit is not None:
            query = query.limit(limit)

        response = self._execute(query, table, "select")
        return response.data

    def insert_record(self, table: str, data: dict[str, Any]) -> dict[str, Any] | None:
        """
        Insert a single record.

        Args:
            table: Table name
            data: Record data dictionary

        Returns:
            Inserted record dictionary or None if the store returned nothing

        Raises:
            UniqueViolationError: If a unique constraint rejects the row
            DatabaseError: If the insert fails for any other reason
        """
        query = self.client.table(table).insert(data)
        response = self._execute(query, table, "insert")
        return response.data[0] if response.data else None

    def update_record(
        self, table: str, record_id: str, data: dict[str, Any]
    ) -> dict[str, Any] | None:
        """
        Update a record by ID.

        Args:
            table: Table name
            record_id: Record ID
            data: Fields to update

        Returns:
            Updated record dictionary or None if not found

        Raises:
            UniqueViolationError: If a unique constraint rejects the new values
            DatabaseError: If the update fails for any other reason
        """
        query = self.client.table(table).update(data).eq("id", record_id)
        response = self._execute(query, table, "update")
        return response.data[0] if response.data else None

    def delete_record(self, table: str, record_id: str) -> bool:
        """
        Delete a record by ID.

        Args:
            table: Table name
            record_id: Record ID

        Returns:
            True if deleted, False if not found
        """
        query = self.client.table(table).delete().eq("id", record_id)
        response = self._execute(query, table, "delete")
        return len(response.data) > 0

    def exists(self, table: str, filters: dict[str, Any]) -> bool:
        """
        Check if record(s) exist matching filters.

        Args:
            table: Table name
            filters: Dictionary of field:value pairs for filtering

        Returns:
            True if at least one matching record exists

        Example:
            >>> builder = SupabaseQueryBuilder(client)
            >>> taken = builder.exists("squads", {"user_id": user_id, "name": "Rogue Squadron"})
        """
        query = self.client.table(table).select("id")

        for field, value in filters.items():
            query = query.eq(field, value)

        response = self._execute(query.limit(1), table, "select")
        return len(response.data) > 0
