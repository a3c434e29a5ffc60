"""
PostgresStorage adapter for the LivePen buffer store.

Implements the KeyValueStorage protocol using Postgres as the backend.
Values live in the kv_store table, created on first use by ensure_schema().
"""

from __future__ import annotations

import asyncpg

from livepen.kernel.storage import KeyValueStorage, StorageError


class PostgresStorage(KeyValueStorage):
    """
    Postgres-based key-value storage.

    Uses one table:
    - kv_store: key TEXT PRIMARY KEY, value TEXT, updated_at TIMESTAMPTZ
    """

    def __init__(self, pool: asyncpg.Pool):
        self.pool = pool

    async def ensure_schema(self) -> None:
        """Create the kv_store table if it does not exist yet."""
        try:
            async with self.pool.acquire() as conn:
                await conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS kv_store (
                        key TEXT PRIMARY KEY,
                        value TEXT NOT NULL,
                        updated_at TIMESTAMPTZ DEFAULT now()
                    )
                    """
                )
        except (asyncpg.PostgresError, OSError) as e:
            raise StorageError(f"Failed to create kv_store: {e}") from e

    async def get(self, key: str) -> str | None:
        """Fetch the value for a key. Returns None if not found."""
        try:
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow(
                    "SELECT value FROM kv_store WHERE key = $1",
                    key,
                )
        except (asyncpg.PostgresError, OSError) as e:
            raise StorageError(f"Failed to read {key!r}: {e}") from e
        return row["value"] if row else None

    async def put(self, key: str, value: str) -> None:
        """Upsert the value for a key."""
        try:
            async with self.pool.acquire() as conn:
                await conn.execute(
                    """
                    INSERT INTO kv_store (key, value, updated_at)
                    VALUES ($1, $2, now())
                    ON CONFLICT (key)
                    DO UPDATE SET value = EXCLUDED.value, updated_at = now()
                    """,
                    key,
                    value,
                )
        except (asyncpg.PostgresError, OSError) as e:
            raise StorageError(f"Failed to write {key!r}: {e}") from e

    async def delete(self, key: str) -> None:
        """Remove a key."""
        try:
            async with self.pool.acquire() as conn:
                await conn.execute("DELETE FROM kv_store WHERE key = $1", key)
        except (asyncpg.PostgresError, OSError) as e:
            raise StorageError(f"Failed to delete {key!r}: {e}") from e
