from __future__ import annotations

from pathlib import Path

from user_admin.settings import DEFAULT_STATIC_DIR, get_settings


def test_defaults_apply_when_env_is_absent(monkeypatch):
    for var in ("DATABASE_URL", "PORT", "HOST", "STATIC_DIR", "CORS_ALLOW_ORIGINS", "LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)

    s = get_settings()
    assert s.database_url == ""
    assert s.port == 8080
    assert s.cors_allow_origins == ["*"]
    assert s.static_dir == DEFAULT_STATIC_DIR
    assert (DEFAULT_STATIC_DIR / "index.html").is_file()


def test_env_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("DATABASE_URL", "sqlite:///x.db")
    monkeypatch.setenv("PORT", "9090")
    monkeypatch.setenv("STATIC_DIR", str(tmp_path))
    monkeypatch.setenv("CORS_ALLOW_ORIGINS", '["https://admin.example.com"]')

    s = get_settings()
    assert s.database_url == "sqlite:///x.db"
    assert s.port == 9090
    assert s.static_dir == Path(tmp_path)
    assert s.cors_allow_origins == ["https://admin.example.com"]
