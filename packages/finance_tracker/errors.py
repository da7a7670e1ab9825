"""Exception hierarchy for request-boundary failures.

Each error carries the HTTP-style ``status_code`` a web layer would answer
with, and ``to_dict()`` renders the ``{"message", "errors"}`` response body.
Row-level CSV problems are not errors at all; they are reported as
normalization diagnostics and never raised.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from pydantic import ValidationError


class FinanceTrackerError(Exception):
    """Base class for errors surfaced to callers of the service layer."""

    status_code: int = 500

    def __init__(self, message: str, *, errors: Sequence[Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.errors: list[Any] = list(errors or [])

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"message": self.message}
        if self.errors:
            body["errors"] = self.errors
        return body


class RequestValidationError(FinanceTrackerError):
    """Structural or precondition failure; the operation was not performed."""

    status_code = 400

    @classmethod
    def from_pydantic(cls, message: str, exc: ValidationError) -> RequestValidationError:
        items = [
            {
                "path": list(err.get("loc", ())),
                "message": err.get("msg", ""),
                "type": err.get("type", ""),
            }
            for err in exc.errors(include_url=False, include_context=False)
        ]
        return cls(message, errors=items)


class NotFoundError(FinanceTrackerError):
    status_code = 404


class InternalError(FinanceTrackerError):
    """Unexpected failure; details stay in the server-side log."""

    status_code = 500


__all__ = [
    "FinanceTrackerError",
    "InternalError",
    "NotFoundError",
    "RequestValidationError",
]
