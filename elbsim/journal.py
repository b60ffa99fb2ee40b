from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from datetime import datetime, timezone
from threading import Lock

from .settings import settings


def utc_now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


@dataclass(frozen=True)
class JournalEntry:
    id: int
    ts: str
    request_id: str
    action: str
    status_code: int
    error_code: str | None


class Journal:
    """Record of every request the simulator answered.

    Tests use it to check which operations a client actually performed.
    """

    def __init__(self, path: str | None = None) -> None:
        self.path = path or settings.journal_path
        self._lock = Lock()
        self._conn = sqlite3.connect(self.path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self.init_db()

    def init_db(self) -> None:
        with self._lock, self._conn:
            self._conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS requests (
                  id INTEGER PRIMARY KEY AUTOINCREMENT,
                  ts TEXT NOT NULL,
                  request_id TEXT NOT NULL,
                  action TEXT NOT NULL,
                  status_code INTEGER NOT NULL,
                  error_code TEXT
                );

                CREATE INDEX IF NOT EXISTS idx_requests_action ON requests(action);
                """
            )

    def record(self, request_id: str, action: str, status_code: int, error_code: str | None = None) -> None:
        with self._lock, self._conn:
            self._conn.execute(
                "INSERT INTO requests (ts, request_id, action, status_code, error_code) VALUES (?, ?, ?, ?, ?)",
                (utc_now(), request_id, action, status_code, error_code),
            )

    def entries(self, action: str | None = None) -> list[JournalEntry]:
        with self._lock:
            if action:
                rows = self._conn.execute("SELECT * FROM requests WHERE action=? ORDER BY id", (action,)).fetchall()
            else:
                rows = self._conn.execute("SELECT * FROM requests ORDER BY id").fetchall()
        return [JournalEntry(**dict(r)) for r in rows]

    def close(self) -> None:
        with self._lock:
            self._conn.close()
