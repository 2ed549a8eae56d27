# holds the auth token and user summary between runs of the app
from __future__ import annotations

import asyncio
import os
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Optional, Protocol, Union

import aiosqlite
from pydantic import ValidationError

from api.models import Session, UserSummary
from utils.logger import get_logger

_logger = get_logger(__name__)

SESSION_DB_PATH = os.getenv("SHOP_SESSION_DB", "data/session.sqlite")

# same key names the browser client keeps in localStorage
TOKEN_KEY = "auth_token"
USER_KEY = "user"


class KeyValueStore(Protocol):
    async def get(self, key: str) -> Optional[str]: ...

    async def set_many(self, items: Dict[str, str]) -> None: ...

    async def remove(self, *keys: str) -> None: ...


class MemoryStore:
    """Process-lifetime store, nothing survives a restart."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def set_many(self, items: Dict[str, str]) -> None:
        self._data.update(items)

    async def remove(self, *keys: str) -> None:
        for key in keys:
            self._data.pop(key, None)


class SqliteStore:
    """
    Durable store backed by a single ``kv`` table.
    The table is created on first use.
    """

    def __init__(self, path: Optional[str] = None):
        self.path = path or SESSION_DB_PATH
        self._initialized = False
        self._init_lock = asyncio.Lock()

    @asynccontextmanager
    async def connect(self) -> AsyncIterator[aiosqlite.Connection]:
        folder = os.path.dirname(self.path)
        if folder:
            os.makedirs(folder, exist_ok=True)
        conn = await aiosqlite.connect(self.path)

        if not self._initialized:
            async with self._init_lock:
                if not self._initialized:
                    _logger.debug(f"Creating session table in {self.path}")
                    await conn.execute(
                        """
                        CREATE TABLE IF NOT EXISTS kv (
                            key   TEXT PRIMARY KEY,
                            value TEXT NOT NULL
                        );
                        """
                    )
                    await conn.commit()
                    self._initialized = True
        try:
            yield conn
        finally:
            await conn.close()

    async def get(self, key: str) -> Optional[str]:
        async with self.connect() as conn:
            cur = await conn.execute("SELECT value FROM kv WHERE key = ?;", (key,))
            row = await cur.fetchone()
            await cur.close()
        return row[0] if row else None

    async def set_many(self, items: Dict[str, str]) -> None:
        async with self.connect() as conn:
            await conn.executemany(
                """
                INSERT INTO kv(key, value) VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value;
                """,
                list(items.items()),
            )
            await conn.commit()

    async def remove(self, *keys: str) -> None:
        if not keys:
            return
        placeholders = ", ".join("?" for _ in keys)
        async with self.connect() as conn:
            await conn.execute(f"DELETE FROM kv WHERE key IN ({placeholders});", keys)
            await conn.commit()


class SessionStore:
    """
    The current token and user summary.

    Built once at startup and handed to the ApiClient, which reads the token
    before every request. Only set_session and clear_session write to it.
    """

    def __init__(self, store: Optional[KeyValueStore] = None):
        self._store: KeyValueStore = store if store is not None else MemoryStore()

    async def get_token(self) -> Optional[str]:
        return await self._store.get(TOKEN_KEY)

    async def get_current_user(self) -> Optional[UserSummary]:
        """Stored user, or None if there is none or it cannot be decoded."""
        raw = await self._store.get(USER_KEY)
        if raw is None:
            return None
        try:
            return UserSummary.model_validate_json(raw)
        except ValidationError as e:
            _logger.warning(f"Ignoring unreadable stored user: {e.error_count()} error(s)")
            return None

    async def set_session(self, token: str, user: Union[UserSummary, dict]) -> None:
        if not isinstance(user, UserSummary):
            user = UserSummary.model_validate(user)
        await self._store.set_many({TOKEN_KEY: token, USER_KEY: user.model_dump_json()})
        _logger.info(f"Session started for {user.email}")

    async def clear_session(self) -> None:
        await self._store.remove(TOKEN_KEY, USER_KEY)
        _logger.info("Session cleared")

    async def is_authenticated(self) -> bool:
        return bool(await self.get_token())

    async def snapshot(self) -> Session:
        return Session(token=await self.get_token(), user=await self.get_current_user())
