from __future__ import annotations

from fastapi import Depends

from user_admin.dispatcher import ActionDispatcher
from user_admin.settings import Settings, get_settings
from user_admin.user_store import SQLUserStore


def get_settings_dep() -> Settings:
    """FastAPI dependency for settings.

    Delegates to user_admin.settings.get_settings (canonical constructor).
    """
    return get_settings()


# NOTE: Do not cache across process lifetime. Tests point DATABASE_URL at a
# fresh temporary database per test; caching breaks isolation.


def get_store(settings: Settings = Depends(get_settings_dep)) -> SQLUserStore:
    return SQLUserStore(settings.database_url)


def get_dispatcher(store: SQLUserStore = Depends(get_store)) -> ActionDispatcher:
    return ActionDispatcher(store)
