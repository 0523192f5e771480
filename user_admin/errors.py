from __future__ import annotations


class DispatchError(Exception):
    """Outcome of a user action that is not a success.

    Every subclass maps to one HTTP status; the handler boundary in
    ``user_admin.main`` turns it into a JSON envelope.
    """

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(DispatchError):
    """Malformed or unrecognized request. Raised before any store access."""

    status_code = 400


class NotFoundError(DispatchError):
    """The statement ran but matched no row."""

    status_code = 404


class ExecutionError(DispatchError):
    """The store failed while running a well-formed request."""

    status_code = 500

    def __init__(self, message: str, *, cause: BaseException | None = None):
        super().__init__(message)
        self.cause = cause


class StoreError(Exception):
    """Any driver-level failure (constraint violation, I/O, connection)."""


class ConfigurationError(RuntimeError):
    pass
