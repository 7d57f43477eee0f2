# app/db/helpers.py
"""
Database helper functions for common read patterns.
Reduces boilerplate in the repository layer.
"""

from typing import Any

import psycopg

from app.db.pool import DatabasePoolManager
from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class DatabaseError(Exception):
    """Custom exception for database operations."""

    def __init__(self, message: str, operation: str = "unknown", recoverable: bool = True):
        super().__init__(message)
        self.operation = operation
        self.recoverable = recoverable


async def fetch_one(
    pool: DatabasePoolManager, query: str, params: tuple = ()
) -> dict[str, Any] | None:
    """
    Execute query and return single row as dict.

    Args:
        pool: Initialized pool to borrow a connection from
        query: SQL query with %s placeholders
        params: Query parameters

    Returns:
        Dict with row data or None if no results
    """
    try:
        async with pool.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(query, params)
                row = await cur.fetchone()
                return row if row else None

    except psycopg.OperationalError as e:
        logger.error("Database fetch_one error", query=query[:100], error=str(e))
        raise DatabaseError(f"Query failed: {e}", operation="fetch_one") from e
    except psycopg.Error as e:
        logger.error("Database fetch_one error", query=query[:100], error=str(e))
        raise DatabaseError(f"Query failed: {e}", operation="fetch_one", recoverable=False) from e


async def fetch_all(
    pool: DatabasePoolManager, query: str, params: tuple = ()
) -> list[dict[str, Any]]:
    """
    Execute query and return all rows as list of dicts.

    Args:
        pool: Initialized pool to borrow a connection from
        query: SQL query with %s placeholders
        params: Query parameters

    Returns:
        List of dicts with row data
    """
    try:
        async with pool.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(query, params)
                return await cur.fetchall()

    except psycopg.OperationalError as e:
        logger.error("Database fetch_all error", query=query[:100], error=str(e))
        raise DatabaseError(f"Query failed: {e}", operation="fetch_all") from e
    except psycopg.Error as e:
        logger.error("Database fetch_all error", query=query[:100], error=str(e))
        raise DatabaseError(f"Query failed: {e}", operation="fetch_all", recoverable=False) from e
