"""
Read access to certification records.

RecordFetcher is the seam between the aggregation services and storage.
Services depend on the protocol only; PostgresRecordFetcher implements it
with raw SQL over the shared psycopg pool.
"""

from datetime import datetime
from typing import Any, Protocol

from app.db.helpers import DatabaseError, fetch_all, fetch_one
from app.db.pool import DatabasePoolManager
from app.infrastructure.observability.logging import get_logger

from ..domain.errors import FetchError
from ..domain.models import CertificationKind, RawRecord

logger = get_logger(__name__)

UNKNOWN_NICKNAME = "Unknown User"


class RecordFetcher(Protocol):
    async def fetch_by_user_and_window(
        self, user_id: str, starts_at: datetime, ends_at: datetime
    ) -> list[RawRecord]:
        """Records of one user with starts_at <= created_at <= ends_at, oldest first."""
        ...

    async def list_user_ids_active_in_window(
        self, starts_at: datetime, ends_at: datetime
    ) -> list[str]:
        """Distinct ids of users with at least one record in the window."""
        ...

    async def fetch_nickname(self, user_id: str) -> str:
        """Profile nickname, or UNKNOWN_NICKNAME. Never raises."""
        ...


class PostgresRecordFetcher:
    """Raw SQL implementation of RecordFetcher."""

    def __init__(self, pool: DatabasePoolManager):
        self._pool = pool

    async def fetch_by_user_and_window(
        self, user_id: str, starts_at: datetime, ends_at: datetime
    ) -> list[RawRecord]:
        query = """
            SELECT
                id::text AS id,
                uuid AS user_id,
                COALESCE(nickname, '') AS nickname,
                created_at,
                type,
                COALESCE(content, '') AS content,
                COALESCE(photo_url, '') AS photo_url
            FROM certifications
            WHERE uuid = %s
              AND created_at >= %s
              AND created_at <= %s
            ORDER BY created_at ASC
        """

        try:
            rows = await fetch_all(self._pool, query, (user_id, starts_at, ends_at))
        except DatabaseError as e:
            logger.error(
                "Failed to fetch user certifications",
                user_id=user_id,
                starts_at=starts_at.isoformat(),
                ends_at=ends_at.isoformat(),
                error=str(e),
            )
            raise FetchError(
                "Failed to fetch certifications from database",
                operation="fetch_by_user_and_window",
                recoverable=e.recoverable,
            ) from e

        return [self._to_record(row) for row in rows]

    async def list_user_ids_active_in_window(
        self, starts_at: datetime, ends_at: datetime
    ) -> list[str]:
        query = """
            SELECT uuid AS user_id, MIN(created_at) AS first_seen_at
            FROM certifications
            WHERE created_at >= %s
              AND created_at <= %s
              AND uuid IS NOT NULL
              AND uuid <> ''
            GROUP BY uuid
            ORDER BY first_seen_at ASC
        """

        try:
            rows = await fetch_all(self._pool, query, (starts_at, ends_at))
        except DatabaseError as e:
            logger.error(
                "Failed to list users with certifications",
                starts_at=starts_at.isoformat(),
                ends_at=ends_at.isoformat(),
                error=str(e),
            )
            raise FetchError(
                "Failed to fetch users with certifications",
                operation="list_user_ids_active_in_window",
                recoverable=e.recoverable,
            ) from e

        return [str(row["user_id"]) for row in rows]

    async def find_nickname(self, user_id: str) -> str | None:
        """Profile nickname, or None when the user or the nickname is missing."""
        row = await fetch_one(
            self._pool, "SELECT nickname FROM users WHERE id = %s", (user_id,)
        )
        if not row:
            return None
        nickname = (row.get("nickname") or "").strip()
        return nickname or None

    async def fetch_nickname(self, user_id: str) -> str:
        try:
            nickname = await self.find_nickname(user_id)
        except (DatabaseError, RuntimeError) as e:
            # Cosmetic lookup; an unavailable pool must not fail the aggregation.
            logger.warning("Failed to fetch user nickname", user_id=user_id, error=str(e))
            return UNKNOWN_NICKNAME
        return nickname or UNKNOWN_NICKNAME

    @staticmethod
    def _to_record(row: dict[str, Any]) -> RawRecord:
        try:
            kind = CertificationKind(row["type"])
        except ValueError as e:
            raise FetchError(
                f"Unsupported certification type {row['type']!r} on record {row['id']}",
                operation="map_row",
                recoverable=False,
            ) from e

        return RawRecord(
            id=row["id"],
            user_id=str(row["user_id"]),
            nickname=row["nickname"],
            created_at=row["created_at"],
            kind=kind,
            content=row["content"],
            photo_ref=row["photo_url"],
        )
