"""
SQLite subscriber store.

Uses aiosqlite for async SQLite access.
WAL mode enabled for concurrent read support.

Table: subscribers
    id            INTEGER PK   (Telegram chat id)
    billing_id    TEXT NULL
    auth_token    TEXT NULL
    schedule_time TEXT  NOT NULL DEFAULT '08:00'
    active        INT   NOT NULL DEFAULT 0  (0/1)
    created_at    INT   NOT NULL
"""

from __future__ import annotations

import logging
import time
from pathlib import Path

import aiosqlite

from blackout.core.errors import StorageError
from blackout.store.base import SubscriberStore
from blackout.store.subscriber import DEFAULT_SCHEDULE_TIME, Subscriber

logger = logging.getLogger(__name__)


class SQLiteSubscriberStore(SubscriberStore):
    """
    SQLite-based subscriber storage.

    Usage:
        store = SQLiteSubscriberStore("~/.blackout/bot.db")
        await store.initialize()

        await store.upsert(42, billing_id="12345")
        sub = await store.get(42)
    """

    def __init__(self, db_path: str | Path) -> None:
        self._db_path = Path(db_path).expanduser()
        self._db: aiosqlite.Connection | None = None

    async def initialize(self) -> None:
        """Initialize the database and create tables."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            self._db = await aiosqlite.connect(str(self._db_path))
            self._db.row_factory = aiosqlite.Row

            await self._db.execute("PRAGMA journal_mode=WAL")
            await self._db.execute("PRAGMA synchronous=NORMAL")

            await self._db.execute(
                f"""
                CREATE TABLE IF NOT EXISTS subscribers (
                    id            INTEGER PRIMARY KEY,
                    billing_id    TEXT,
                    auth_token    TEXT,
                    schedule_time TEXT NOT NULL DEFAULT '{DEFAULT_SCHEDULE_TIME}',
                    active        INTEGER NOT NULL DEFAULT 0,
                    created_at    INTEGER NOT NULL
                )
                """
            )
            await self._db.execute(
                "CREATE INDEX IF NOT EXISTS idx_subscribers_active ON subscribers(active)"
            )

            await self._db.commit()
            logger.debug(f"Subscriber store initialized at {self._db_path}")

        except Exception as e:
            raise StorageError(f"Failed to initialize SQLite at {self._db_path}: {e}")

    async def _ensure_db(self) -> aiosqlite.Connection:
        """Ensure database is initialized."""
        if self._db is None:
            await self.initialize()
        return self._db  # type: ignore[return-value]

    async def get(self, subscriber_id: int) -> Subscriber | None:
        db = await self._ensure_db()
        try:
            async with db.execute(
                "SELECT * FROM subscribers WHERE id = ?", (subscriber_id,)
            ) as cursor:
                row = await cursor.fetchone()
                return self._row_to_subscriber(row) if row else None
        except Exception as e:
            raise StorageError(f"Failed to get subscriber {subscriber_id}: {e}")

    async def upsert(
        self,
        subscriber_id: int,
        *,
        billing_id: str | None = None,
        auth_token: str | None = None,
        schedule_time: str | None = None,
        active: bool | None = None,
    ) -> Subscriber:
        db = await self._ensure_db()
        params = {
            "id": subscriber_id,
            "billing_id": billing_id,
            "auth_token": auth_token,
            "schedule_time": schedule_time,
            "active": None if active is None else int(active),
            "created_at": int(time.time()),
        }
        try:
            # COALESCE keeps the stored value for every field passed as NULL
            await db.execute(
                f"""
                INSERT INTO subscribers (id, billing_id, auth_token, schedule_time, active, created_at)
                VALUES (
                    :id, :billing_id, :auth_token,
                    COALESCE(:schedule_time, '{DEFAULT_SCHEDULE_TIME}'),
                    COALESCE(:active, 0),
                    :created_at
                )
                ON CONFLICT(id) DO UPDATE SET
                    billing_id    = COALESCE(:billing_id, billing_id),
                    auth_token    = COALESCE(:auth_token, auth_token),
                    schedule_time = COALESCE(:schedule_time, schedule_time),
                    active        = COALESCE(:active, active)
                """,
                params,
            )
            await db.commit()
        except Exception as e:
            raise StorageError(f"Failed to save subscriber {subscriber_id}: {e}")

        stored = await self.get(subscriber_id)
        if stored is None:
            raise StorageError(f"Subscriber {subscriber_id} missing right after upsert")
        return stored

    async def list_active(self) -> list[int]:
        db = await self._ensure_db()
        try:
            async with db.execute(
                "SELECT id FROM subscribers WHERE active = 1 ORDER BY created_at, id"
            ) as cursor:
                rows = await cursor.fetchall()
            return [int(row["id"]) for row in rows]
        except Exception as e:
            raise StorageError(f"Failed to list active subscribers: {e}")

    async def list_all(self) -> list[Subscriber]:
        db = await self._ensure_db()
        try:
            async with db.execute(
                "SELECT * FROM subscribers ORDER BY created_at, id"
            ) as cursor:
                rows = await cursor.fetchall()
            return [self._row_to_subscriber(row) for row in rows]
        except Exception as e:
            raise StorageError(f"Failed to list subscribers: {e}")

    async def close(self) -> None:
        if self._db:
            await self._db.close()
            self._db = None

    # ── Helpers ───────────────────────────────────────────────────────────────

    @staticmethod
    def _row_to_subscriber(row: aiosqlite.Row) -> Subscriber:
        return Subscriber.from_dict(dict(row))
