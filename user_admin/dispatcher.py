from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol, Sequence

from user_admin.errors import ExecutionError, NotFoundError, StoreError, ValidationError
from user_admin.models import parse_action

logger = logging.getLogger("user_admin.dispatcher")


class RecordStore(Protocol):
    def execute(self, statement: str, params: Sequence[Any] = ()) -> int: ...


@dataclass(frozen=True)
class ActionResult:
    action: str
    affected_rows: int

    @property
    def message(self) -> str:
        return f"Action '{self.action}' executed successfully"


class ActionDispatcher:
    """Apply one tagged user action to the store.

    Flow per call:
      1) pick and validate the payload variant by its `action` tag
      2) run its single-row statement
      3) classify: store failure -> ExecutionError, zero rows -> NotFoundError

    Validation failures are raised before the store is touched. Creation
    relies on the store's unique index; a duplicate surfaces as an
    ExecutionError carrying the driver message.
    """

    def __init__(self, store: RecordStore):
        self.store = store

    def dispatch(self, payload: Any) -> ActionResult:
        try:
            tag, action = parse_action(payload)
        except ValidationError as e:
            logger.warning("Rejected user action: %s", e.message)
            raise

        statement, params = action.statement()
        try:
            affected = self.store.execute(statement, params)
        except StoreError as e:
            logger.error("User action %r failed: %s", tag, e)
            raise ExecutionError(f"Error executing action '{tag}': {e}", cause=e) from e

        if affected == 0:
            logger.warning("User action %r matched no user", tag, extra={"target_username": action.username})
            raise NotFoundError("No user found with the given username.")

        logger.info("User action %r applied to %d row(s)", tag, affected, extra={"target_username": action.username})
        return ActionResult(action=tag, affected_rows=affected)
