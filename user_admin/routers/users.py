from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends

from user_admin.deps import get_dispatcher, get_store
from user_admin.dispatcher import ActionDispatcher
from user_admin.errors import StoreError
from user_admin.responses import envelope_response
from user_admin.user_store import SQLUserStore

logger = logging.getLogger("user_admin")

router = APIRouter(prefix="/api", tags=["users"])


# Sync handlers: FastAPI runs them on its worker threadpool, one per request,
# so the blocking store call never stalls the event loop.


@router.get("/usuarios")
def list_users(store: SQLUserStore = Depends(get_store)):
    try:
        users = store.query_all()
    except StoreError as e:
        logger.error("Listing users failed: %s", e)
        return envelope_response(500, f"Error fetching users: {e}")
    return envelope_response(200, "Users listed successfully", [u.model_dump(by_alias=True) for u in users])


@router.post("/user-action")
def user_action(
    payload: Any = Body(default=None),
    dispatcher: ActionDispatcher = Depends(get_dispatcher),
):
    """Apply one user mutation.

    Accepts:
      {"action": "set-blocked", "username": "alice", "isBlocked": true}

    Errors raised by the dispatcher are turned into envelopes by the
    exception handlers registered in user_admin.main.
    """
    result = dispatcher.dispatch(payload)
    return envelope_response(200, result.message, {"action": result.action, "affectedRows": result.affected_rows})
