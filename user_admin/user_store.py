from __future__ import annotations

import logging
import sqlite3
from typing import Any, Sequence

from user_admin.errors import ConfigurationError, StoreError
from user_admin.models import UserRecord
from user_admin.settings import Settings

logger = logging.getLogger("user_admin.store")

SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS users (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        username TEXT NOT NULL,
        username_key TEXT NOT NULL,
        password TEXT NOT NULL,
        is_blocked INTEGER NOT NULL DEFAULT 0,
        renewal_date TEXT NOT NULL,
        ip TEXT,
        indicacao INTEGER NOT NULL DEFAULT 0
    )
    """,
    # SQLite LOWER() only folds ASCII, so the case-insensitive key is computed in Python.
    "CREATE UNIQUE INDEX IF NOT EXISTS users_username_key_idx ON users (username_key)",
)

_SELECT_ALL = "SELECT id, username, is_blocked, renewal_date, ip, indicacao FROM users ORDER BY id"


def database_path(url: str) -> str:
    """Resolve DATABASE_URL into something sqlite3.connect() accepts.

    Accepts ``sqlite:///relative.db``, ``sqlite:////abs/path.db``,
    ``sqlite://path.db`` and bare filesystem paths.
    """
    u = (url or "").strip()
    if not u:
        raise ConfigurationError("DATABASE_URL is not set")
    for prefix in ("sqlite:///", "sqlite://"):
        if u.startswith(prefix):
            u = u[len(prefix) :]
            break
    if not u:
        raise ConfigurationError("DATABASE_URL does not name a database")
    return u


class SQLUserStore:
    """Users table behind a per-call sqlite3 connection.

    Every call opens its own connection and closes it before returning, so
    request handlers running on different worker threads never share one.
    Serialization of concurrent writes is left to the database.
    """

    def __init__(self, database_url: str):
        self.database_url = database_url
        self.db_path = database_path(database_url)

    def _get_conn(self) -> sqlite3.Connection:
        try:
            conn = sqlite3.connect(self.db_path)
        except sqlite3.Error as e:
            raise StoreError(str(e)) from e
        conn.row_factory = sqlite3.Row
        return conn

    def execute(self, statement: str, params: Sequence[Any] = ()) -> int:
        """Run one write statement and return the affected-row count."""
        conn = self._get_conn()
        try:
            cur = conn.execute(statement, tuple(params))
            conn.commit()
            return cur.rowcount
        except sqlite3.Error as e:
            conn.rollback()
            raise StoreError(str(e)) from e
        finally:
            conn.close()

    def query_all(self) -> list[UserRecord]:
        conn = self._get_conn()
        try:
            rows = conn.execute(_SELECT_ALL).fetchall()
        except sqlite3.Error as e:
            raise StoreError(str(e)) from e
        finally:
            conn.close()
        return [self._map_row(r) for r in rows]

    def ping(self) -> None:
        conn = self._get_conn()
        try:
            conn.execute("SELECT 1").fetchone()
        except sqlite3.Error as e:
            raise StoreError(str(e)) from e
        finally:
            conn.close()

    def ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            for stmt in SCHEMA:
                conn.execute(stmt)
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise StoreError(str(e)) from e
        finally:
            conn.close()

    @staticmethod
    def _map_row(row: sqlite3.Row) -> UserRecord:
        return UserRecord(
            id=row["id"],
            username=row["username"],
            is_blocked=bool(row["is_blocked"]),
            renewal_date=row["renewal_date"] or "",
            ip=row["ip"],
            indicacao=row["indicacao"] or 0,
        )


def bootstrap_store(settings: Settings) -> SQLUserStore:
    """Open the configured store, check it answers and create the table if needed.

    Both a missing DATABASE_URL and an unreachable database are fatal for
    the process; callers let the exception propagate.
    """
    if not (settings.database_url or "").strip():
        raise ConfigurationError("DATABASE_URL is not set")

    store = SQLUserStore(settings.database_url)
    store.ping()
    store.ensure_schema()
    logger.info("Database connection succeeded", extra={"db_path": store.db_path})
    return store
