# This file defines the errors raised while building view models.
# Handlers in `error_handlers` turn each of them into the standard JSON error body.

from __future__ import annotations

from typing import Any


class InvalidArgumentError(ValueError):
    """A caller supplied a value outside an operation's contract."""


class NotFoundError(LookupError):
    """The requested unit, module or directory does not exist in the data source."""


class APIError(Exception):
    """Error carrying its own HTTP status and error code."""

    def __init__(
        self,
        *,
        status_code: int,
        error_code: str,
        message: str,
        details: Any | None = None,
    ) -> None:
        self.status_code = status_code
        self.error_code = error_code
        self.message = message
        self.details = details
        super().__init__(message)


class NotSupportedError(APIError):
    """The configured data source cannot answer this kind of request."""

    def __init__(self, message: str) -> None:
        super().__init__(status_code=501, error_code="NOT_SUPPORTED", message=message)
