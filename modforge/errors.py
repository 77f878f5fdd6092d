"""Error kinds raised by the scaffolding engine.

Three kinds exist and every failure surfaces as exactly one of them:

* ``ValidationError`` -- the request is malformed; raised before any storage
  interaction happens.
* ``PlanningError`` -- an internal invariant was violated (e.g. an unknown
  library kind reached the metadata resolver).
* ``StorageError`` -- a storage backend failed to read, write, or create a
  directory.  Carries the failing path, the underlying cause, and the files
  written before the failure.
"""

from __future__ import annotations

from typing import Any


class ScaffoldError(Exception):
    """Base class for every failure the engine reports."""

    kind: str = "ScaffoldError"

    def __init__(self, message: str, path: str | None = None) -> None:
        self.message = message
        self.path = path
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Return the structured failure shape ``{kind, message, path?}``."""
        payload: dict[str, Any] = {"kind": self.kind, "message": self.message}
        if self.path is not None:
            payload["path"] = self.path
        return payload


class ValidationError(ScaffoldError):
    """Raised when request fields are missing or invalid."""

    kind = "ValidationError"


class PlanningError(ScaffoldError):
    """Raised when the planner hits a state it should never reach."""

    kind = "PlanningError"


class StorageError(ScaffoldError):
    """Raised when a storage backend operation fails."""

    kind = "StorageError"

    def __init__(
        self,
        message: str,
        path: str,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message, path=path)
        self.cause = cause
        self.files_written: list[str] = []

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        if self.cause is not None:
            payload["cause"] = f"{type(self.cause).__name__}: {self.cause}"
        payload["files_written"] = list(self.files_written)
        return payload
