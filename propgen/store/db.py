from __future__ import annotations

import logging
import os
import sqlite3
import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Sequence

from propgen.core.config import settings
from propgen.core.errors import PersistenceFailure
from propgen.store.models import JobRecord, KnowledgeItem

logger = logging.getLogger(__name__)

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS users (
        id TEXT PRIMARY KEY,
        email TEXT NOT NULL UNIQUE,
        password_hash TEXT NOT NULL,
        created_at TEXT NOT NULL
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS sessions (
        token TEXT PRIMARY KEY,
        user_id TEXT NOT NULL REFERENCES users (id) ON DELETE CASCADE,
        created_at TEXT NOT NULL,
        expires_at TEXT NOT NULL
    );
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_sessions_expiry
    ON sessions (expires_at);
    """,
    """
    CREATE TABLE IF NOT EXISTS proposals (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        created_at TEXT NOT NULL,
        job_description TEXT NOT NULL,
        proposal_text TEXT NOT NULL,
        match_score TEXT
    );
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_proposals_user_created
    ON proposals (user_id, created_at);
    """,
    """
    CREATE TABLE IF NOT EXISTS knowledge_base (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        created_at TEXT NOT NULL,
        name TEXT NOT NULL,
        content TEXT NOT NULL,
        type TEXT NOT NULL DEFAULT 'text/plain'
    );
    """,
)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return uuid.uuid4().hex


def _casefold(value: str | None) -> str | None:
    if value is None:
        return None
    return value.casefold()


class Store:
    """SQLite-backed job history and knowledge base, scoped per user."""

    def __init__(self, db_path: str, *, clock: Callable[[], datetime] = utc_now):
        self.db_path = db_path
        self._clock = clock
        self._lock = threading.Lock()
        self._conn = self._connect()

    def _connect(self) -> sqlite3.Connection:
        if self.db_path != ":memory:":
            directory = os.path.dirname(self.db_path)
            if directory:
                os.makedirs(directory, exist_ok=True)

        conn = sqlite3.connect(
            self.db_path,
            check_same_thread=False,
            timeout=5,
            isolation_level=None,
        )
        conn.execute("PRAGMA journal_mode=WAL;")
        conn.execute("PRAGMA synchronous=NORMAL;")
        conn.execute("PRAGMA busy_timeout=5000;")
        conn.execute("PRAGMA foreign_keys=ON;")
        # sqlite's LIKE/lower() only fold ASCII.
        conn.create_function("casefold", 1, _casefold, deterministic=True)
        for statement in _SCHEMA:
            conn.execute(statement)
        return conn

    def now(self) -> datetime:
        return self._clock()

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    def execute(self, sql: str, params: Sequence[Any] = ()) -> sqlite3.Cursor:
        try:
            with self._lock:
                return self._conn.execute(sql, params)
        except sqlite3.Error as exc:
            raise PersistenceFailure(f"Store operation failed: {exc}") from exc

    def fetchall(self, sql: str, params: Sequence[Any] = ()) -> list[tuple]:
        try:
            with self._lock:
                return self._conn.execute(sql, params).fetchall()
        except sqlite3.Error as exc:
            raise PersistenceFailure(f"Store operation failed: {exc}") from exc

    def executemany(self, sql: str, rows: Iterable[Sequence[Any]]) -> None:
        try:
            with self._lock:
                self._conn.execute("BEGIN")
                try:
                    self._conn.executemany(sql, rows)
                except sqlite3.Error:
                    self._conn.execute("ROLLBACK")
                    raise
                self._conn.execute("COMMIT")
        except sqlite3.Error as exc:
            raise PersistenceFailure(f"Store operation failed: {exc}") from exc

    # Job history

    def insert_proposal(
        self,
        *,
        user_id: str,
        job_description: str,
        proposal_text: str,
        match_score: str | None,
    ) -> JobRecord:
        record = JobRecord(
            id=new_id(),
            user_id=user_id,
            created_at=self.now(),
            job_description=job_description,
            proposal_text=proposal_text,
            match_score=match_score,
        )
        self.execute(
            """
            INSERT INTO proposals (
                id, user_id, created_at, job_description, proposal_text, match_score
            ) VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                record.id,
                record.user_id,
                record.created_at.isoformat(),
                record.job_description,
                record.proposal_text,
                record.match_score,
            ),
        )
        return record

    def list_proposals(self, user_id: str, limit: int | None = None) -> list[JobRecord]:
        sql = """
            SELECT id, user_id, created_at, job_description, proposal_text, match_score
            FROM proposals
            WHERE user_id = ?
            ORDER BY created_at DESC, rowid DESC
        """
        params: tuple[Any, ...] = (user_id,)
        if limit is not None:
            sql += " LIMIT ?"
            params = (user_id, limit)
        return [_row_to_record(row) for row in self.fetchall(sql, params)]

    def get_proposal(self, user_id: str, proposal_id: str) -> JobRecord | None:
        rows = self.fetchall(
            """
            SELECT id, user_id, created_at, job_description, proposal_text, match_score
            FROM proposals
            WHERE user_id = ? AND id = ?
            """,
            (user_id, proposal_id),
        )
        return _row_to_record(rows[0]) if rows else None

    def delete_proposal(self, user_id: str, proposal_id: str) -> bool:
        cur = self.execute(
            "DELETE FROM proposals WHERE user_id = ? AND id = ?",
            (user_id, proposal_id),
        )
        return bool(cur.rowcount)

    def find_proposal_ids_with_prefix(self, user_id: str, prefix: str, limit: int = 1) -> list[str]:
        """Ids of records whose job description starts with ``prefix``, ignoring case."""
        rows = self.fetchall(
            """
            SELECT id FROM proposals
            WHERE user_id = ?
              AND casefold(substr(job_description, 1, ?)) = ?
            LIMIT ?
            """,
            (user_id, len(prefix), prefix.casefold(), limit),
        )
        return [row[0] for row in rows]

    # Knowledge base

    def insert_knowledge_items(
        self,
        user_id: str,
        items: Sequence[tuple[str, str, str]],
    ) -> list[KnowledgeItem]:
        created_at = self.now()
        records = [
            KnowledgeItem(
                id=new_id(),
                user_id=user_id,
                name=name,
                content=content,
                type=mime_type or "text/plain",
                created_at=created_at,
            )
            for name, content, mime_type in items
        ]
        self.executemany(
            """
            INSERT INTO knowledge_base (id, user_id, created_at, name, content, type)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            [
                (r.id, r.user_id, created_at.isoformat(), r.name, r.content, r.type)
                for r in records
            ],
        )
        return records

    def list_knowledge_items(self, user_id: str) -> list[KnowledgeItem]:
        rows = self.fetchall(
            """
            SELECT id, user_id, created_at, name, content, type
            FROM knowledge_base
            WHERE user_id = ?
            ORDER BY created_at ASC, rowid ASC
            """,
            (user_id,),
        )
        return [
            KnowledgeItem(
                id=row[0],
                user_id=row[1],
                created_at=datetime.fromisoformat(row[2]),
                name=row[3],
                content=row[4],
                type=row[5] or "text/plain",
            )
            for row in rows
        ]

    def delete_knowledge_item(self, user_id: str, item_id: str) -> bool:
        cur = self.execute(
            "DELETE FROM knowledge_base WHERE user_id = ? AND id = ?",
            (user_id, item_id),
        )
        return bool(cur.rowcount)


def _row_to_record(row: tuple) -> JobRecord:
    return JobRecord(
        id=row[0],
        user_id=row[1],
        created_at=datetime.fromisoformat(row[2]),
        job_description=row[3],
        proposal_text=row[4],
        match_score=row[5],
    )


_store: Store | None = None
_store_lock = threading.Lock()


def get_store() -> Store:
    global _store
    with _store_lock:
        if _store is None:
            _store = Store(settings.db_path)
            logger.info("store_opened path=%s", settings.db_path)
        return _store
