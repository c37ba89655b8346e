import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, List, Optional

import aiosqlite

from config import DELETED_REPLY_TEXT, RECENT_REPLIES_LIMIT, THREAD_LIST_LIMIT
from replies import Reply
from threads import Thread
from utils import new_id

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS threads (
    seq INTEGER PRIMARY KEY AUTOINCREMENT,
    thread_id TEXT NOT NULL UNIQUE,
    board TEXT NOT NULL,
    text TEXT NOT NULL,
    delete_password TEXT NOT NULL,
    created_on REAL NOT NULL,
    bumped_on REAL NOT NULL,
    reported BOOLEAN NOT NULL DEFAULT FALSE
);

CREATE INDEX IF NOT EXISTS idx_threads_board_bumped ON threads(board, bumped_on DESC);

CREATE TABLE IF NOT EXISTS replies (
    seq INTEGER PRIMARY KEY AUTOINCREMENT,
    reply_id TEXT NOT NULL,
    thread_id TEXT NOT NULL REFERENCES threads(thread_id) ON DELETE CASCADE,
    text TEXT NOT NULL,
    delete_password TEXT NOT NULL,
    created_on REAL NOT NULL,
    reported BOOLEAN NOT NULL DEFAULT FALSE,
    UNIQUE (thread_id, reply_id)
);

CREATE INDEX IF NOT EXISTS idx_replies_thread ON replies(thread_id, seq);
"""


def _row_to_reply(row: aiosqlite.Row) -> Reply:
    return Reply(
        reply_id=row["reply_id"],
        thread_id=row["thread_id"],
        text=row["text"],
        delete_password=row["delete_password"],
        created_on=row["created_on"],
        reported=bool(row["reported"]),
    )


def _row_to_thread(row: aiosqlite.Row, replies: Optional[List[Reply]] = None) -> Thread:
    return Thread(
        thread_id=row["thread_id"],
        board=row["board"],
        text=row["text"],
        delete_password=row["delete_password"],
        created_on=row["created_on"],
        bumped_on=row["bumped_on"],
        reported=bool(row["reported"]),
        replies=replies or [],
    )


class DatabaseManager:
    """Async store for threads and their replies.

    One connection is opened by ``connect()`` and shared by every request
    until ``close()``. Writes go through ``transaction()`` so that statements
    belonging to one operation are committed together.
    """

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._conn: Optional[aiosqlite.Connection] = None
        self._write_lock = asyncio.Lock()

    @property
    def connection(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise RuntimeError("Database is not connected")
        return self._conn

    @property
    def is_connected(self) -> bool:
        return self._conn is not None

    async def connect(self):
        """Open the connection and create the schema if needed"""
        if self._conn is not None:
            return
        conn = await aiosqlite.connect(self.db_path)
        conn.row_factory = aiosqlite.Row
        await conn.execute("PRAGMA foreign_keys = ON")
        await conn.executescript(SCHEMA)
        await conn.commit()
        self._conn = conn
        logger.info("Connected to database %s", self.db_path)

    async def close(self):
        if self._conn is None:
            return
        await self._conn.close()
        self._conn = None
        logger.info("Closed database %s", self.db_path)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        conn = self.connection
        async with self._write_lock:
            try:
                yield conn
                await conn.commit()
            except BaseException:
                await conn.rollback()
                raise

    async def execute_query(self, query: str, params: tuple = (), fetch_one: bool = False):
        async with self.connection.execute(query, params) as cursor:
            if fetch_one:
                return await cursor.fetchone()
            return await cursor.fetchall()

    async def execute_write(self, query: str, params: tuple = ()) -> int:
        """Run a single write statement and return the number of affected rows"""
        async with self.transaction() as conn:
            async with conn.execute(query, params) as cursor:
                return cursor.rowcount

    # Threads

    async def create_thread(self, board: str, text: str, delete_password: str) -> Thread:
        thread = Thread(new_id(), board, text, delete_password)
        await self.execute_write("""
            INSERT INTO threads (thread_id, board, text, delete_password, created_on, bumped_on, reported)
            VALUES (?, ?, ?, ?, ?, ?, FALSE)
        """, (thread.thread_id, board, text, delete_password, thread.created_on, thread.bumped_on))
        return thread

    async def get_threads_by_board(self, board: str, limit: int = THREAD_LIST_LIMIT,
                                   replies_limit: int = RECENT_REPLIES_LIMIT) -> List[Thread]:
        """Most recently bumped threads of a board, each with its newest replies"""
        rows = await self.execute_query("""
            SELECT * FROM threads
            WHERE board = ?
            ORDER BY bumped_on DESC, seq DESC
            LIMIT ?
        """, (board, limit))
        if not rows:
            return []

        thread_ids = [row["thread_id"] for row in rows]
        replies_by_thread: dict[str, List[Reply]] = {thread_id: [] for thread_id in thread_ids}
        if replies_limit > 0:
            placeholders = ", ".join("?" for _ in thread_ids)
            reply_rows = await self.execute_query(f"""
                SELECT * FROM (
                    SELECT r.*, ROW_NUMBER() OVER (PARTITION BY r.thread_id ORDER BY r.seq DESC) AS recency
                    FROM replies r
                    WHERE r.thread_id IN ({placeholders})
                )
                WHERE recency <= ?
                ORDER BY seq ASC
            """, (*thread_ids, replies_limit))
            for reply_row in reply_rows:
                replies_by_thread[reply_row["thread_id"]].append(_row_to_reply(reply_row))

        return [_row_to_thread(row, replies_by_thread[row["thread_id"]]) for row in rows]

    async def get_thread(self, board: str, thread_id: str, with_replies: bool = True) -> Optional[Thread]:
        row = await self.execute_query(
            "SELECT * FROM threads WHERE thread_id = ? AND board = ?",
            (thread_id, board),
            fetch_one=True
        )
        if not row:
            return None

        replies = []
        if with_replies:
            reply_rows = await self.execute_query(
                "SELECT * FROM replies WHERE thread_id = ? ORDER BY seq ASC",
                (thread_id,)
            )
            replies = [_row_to_reply(reply_row) for reply_row in reply_rows]
        return _row_to_thread(row, replies)

    async def report_thread(self, board: str, thread_id: str) -> bool:
        """Flag a thread as reported. Returns False if it does not exist."""
        updated = await self.execute_write(
            "UPDATE threads SET reported = TRUE WHERE thread_id = ? AND board = ?",
            (thread_id, board)
        )
        return updated > 0

    async def delete_thread(self, thread_id: str) -> bool:
        async with self.transaction() as conn:
            await conn.execute("DELETE FROM replies WHERE thread_id = ?", (thread_id,))
            async with conn.execute("DELETE FROM threads WHERE thread_id = ?", (thread_id,)) as cursor:
                return cursor.rowcount > 0

    async def count_threads(self) -> int:
        row = await self.execute_query("SELECT COUNT(*) AS total FROM threads", fetch_one=True)
        return row["total"]

    # Replies

    async def add_reply(self, thread_id: str, text: str, delete_password: str) -> Reply:
        """Append a reply to a thread and bump the thread to the reply's time"""
        reply = Reply(new_id(), thread_id, text, delete_password)
        async with self.transaction() as conn:
            await conn.execute("""
                INSERT INTO replies (reply_id, thread_id, text, delete_password, created_on, reported)
                VALUES (?, ?, ?, ?, ?, FALSE)
            """, (reply.reply_id, thread_id, text, delete_password, reply.created_on))
            await conn.execute(
                "UPDATE threads SET bumped_on = ? WHERE thread_id = ?",
                (reply.created_on, thread_id)
            )
        return reply

    async def report_reply(self, thread_id: str, reply_id: str) -> bool:
        updated = await self.execute_write(
            "UPDATE replies SET reported = TRUE WHERE thread_id = ? AND reply_id = ?",
            (thread_id, reply_id)
        )
        return updated > 0

    async def redact_reply(self, thread_id: str, reply_id: str) -> bool:
        """Replace a reply's text with the deleted marker, keeping its slot"""
        updated = await self.execute_write(
            "UPDATE replies SET text = ? WHERE thread_id = ? AND reply_id = ?",
            (DELETED_REPLY_TEXT, thread_id, reply_id)
        )
        return updated > 0
