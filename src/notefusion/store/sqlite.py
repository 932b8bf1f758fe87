"""SQLite chat store.

Provides persistent chat storage using a SQLite database file.
Uses aiosqlite for async access.
"""

from datetime import datetime
from pathlib import Path
from uuid import uuid4

import aiosqlite

from ..exceptions import ChatNotFoundError, StoreError
from .base import ChatStore
from .models import ChatRecord, ChatSummary, Role, StoredMessage, utcnow


class SQLiteChatStore(ChatStore):
    """SQLite-backed chat store.

    Messages are kept in their own table ordered by position; an update
    rewrites the whole message list of the chat in one transaction.
    """

    def __init__(self, path: str | Path = "./notefusion_chats.db"):
        self._db_path = Path(path)
        self._connection: aiosqlite.Connection | None = None

    async def connect(self) -> None:
        """Open the database connection and create the schema."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._connection = await aiosqlite.connect(self._db_path)
        await self._connection.execute("PRAGMA foreign_keys = ON")
        await self._create_schema()

    async def _create_schema(self) -> None:
        await self._connection.execute("""
            CREATE TABLE IF NOT EXISTS chats (
                id TEXT PRIMARY KEY,
                title TEXT NOT NULL,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        """)

        await self._connection.execute("""
            CREATE TABLE IF NOT EXISTS chat_messages (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                chat_id TEXT NOT NULL,
                position INTEGER NOT NULL,
                role TEXT NOT NULL,
                content TEXT NOT NULL,
                timestamp TEXT NOT NULL,
                FOREIGN KEY (chat_id) REFERENCES chats(id) ON DELETE CASCADE
            )
        """)

        await self._connection.execute("""
            CREATE INDEX IF NOT EXISTS idx_chat_messages_chat
            ON chat_messages(chat_id, position)
        """)

        await self._connection.commit()

    async def disconnect(self) -> None:
        if self._connection:
            await self._connection.close()
            self._connection = None

    def _require_connection(self) -> aiosqlite.Connection:
        if self._connection is None:
            raise StoreError("SQLite chat store is not connected")
        return self._connection

    async def _insert_messages(self, chat_id: str, messages: list[StoredMessage]) -> None:
        conn = self._require_connection()
        await conn.executemany(
            """
            INSERT INTO chat_messages (chat_id, position, role, content, timestamp)
            VALUES (?, ?, ?, ?, ?)
            """,
            [
                (chat_id, position, m.role.value, m.content, m.timestamp.isoformat())
                for position, m in enumerate(messages)
            ],
        )

    async def create(self, title: str, messages: list[StoredMessage]) -> ChatRecord:
        conn = self._require_connection()
        now = utcnow()
        chat_id = uuid4().hex

        await conn.execute(
            "INSERT INTO chats (id, title, created_at, updated_at) VALUES (?, ?, ?, ?)",
            (chat_id, title, now.isoformat(), now.isoformat()),
        )
        await self._insert_messages(chat_id, messages)
        await conn.commit()

        return ChatRecord(
            id=chat_id,
            title=title,
            messages=list(messages),
            created_at=now,
            updated_at=now,
        )

    async def update(self, chat_id: str, title: str, messages: list[StoredMessage]) -> ChatRecord:
        conn = self._require_connection()
        now = utcnow()

        cursor = await conn.execute(
            "UPDATE chats SET title = ?, updated_at = ? WHERE id = ?",
            (title, now.isoformat(), chat_id),
        )
        if cursor.rowcount == 0:
            await conn.rollback()
            raise ChatNotFoundError(chat_id)

        await conn.execute("DELETE FROM chat_messages WHERE chat_id = ?", (chat_id,))
        await self._insert_messages(chat_id, messages)
        await conn.commit()

        return await self.get(chat_id)

    async def get(self, chat_id: str) -> ChatRecord:
        conn = self._require_connection()

        async with conn.execute(
            "SELECT id, title, created_at, updated_at FROM chats WHERE id = ?",
            (chat_id,)
        ) as cursor:
            row = await cursor.fetchone()

        if row is None:
            raise ChatNotFoundError(chat_id)

        _, title, created_at, updated_at = row

        async with conn.execute(
            """
            SELECT role, content, timestamp
            FROM chat_messages
            WHERE chat_id = ?
            ORDER BY position ASC
            """,
            (chat_id,)
        ) as cursor:
            rows = await cursor.fetchall()

        messages = [
            StoredMessage(role=Role(role), content=content, timestamp=datetime.fromisoformat(ts))
            for role, content, ts in rows
        ]

        return ChatRecord(
            id=chat_id,
            title=title,
            messages=messages,
            created_at=datetime.fromisoformat(created_at),
            updated_at=datetime.fromisoformat(updated_at),
        )

    async def list_summaries(self) -> list[ChatSummary]:
        conn = self._require_connection()

        async with conn.execute(
            "SELECT id, title, updated_at FROM chats ORDER BY updated_at DESC"
        ) as cursor:
            rows = await cursor.fetchall()

        return [
            ChatSummary(id=chat_id, title=title, updated_at=datetime.fromisoformat(updated_at))
            for chat_id, title, updated_at in rows
        ]

    async def delete(self, chat_id: str) -> None:
        conn = self._require_connection()
        cursor = await conn.execute("DELETE FROM chats WHERE id = ?", (chat_id,))
        await conn.commit()
        if cursor.rowcount == 0:
            raise ChatNotFoundError(chat_id)

    @property
    def backend_type(self) -> str:
        return "sqlite"

    @property
    def db_path(self) -> Path:
        return self._db_path
