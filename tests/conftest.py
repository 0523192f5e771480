from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from user_admin.main import app
from user_admin.user_store import SQLUserStore


@pytest.fixture
def db_url(tmp_path, monkeypatch) -> str:
    url = "sqlite:///" + str(tmp_path / "users.db")
    monkeypatch.setenv("DATABASE_URL", url)
    return url


@pytest.fixture
def store(db_url) -> SQLUserStore:
    s = SQLUserStore(db_url)
    s.ensure_schema()
    return s


@pytest.fixture
def add_user(store):
    def _add(username: str, *, password: str = "secret", renewal_date: str = "2025-01-01") -> None:
        store.execute(
            "INSERT INTO users (username, username_key, password, is_blocked, renewal_date, indicacao)"
            " VALUES (?, ?, ?, 0, ?, 0)",
            (username, username.casefold(), password, renewal_date),
        )

    return _add


@pytest.fixture
def client(store):
    with TestClient(app) as c:
        yield c
