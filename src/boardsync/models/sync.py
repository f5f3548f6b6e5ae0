"""Models describing remote calls and their reconciliation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class RemoteResult:
    """Response of a remote operation."""

    success: bool
    data: Any = None
    error: str | None = None

    @classmethod
    def ok(cls, data: Any = None) -> RemoteResult:
        """Successful response with optional payload."""
        return cls(success=True, data=data)

    @classmethod
    def failure(cls, error: str) -> RemoteResult:
        """Failed response with an error message."""
        return cls(success=False, error=error)


@dataclass
class SyncOutcome:
    """Result of the remote phase of an optimistic operation.

    ``ok`` is False whenever the remote call failed, in which case the
    optimistic local state has been kept and ``error`` says why.
    """

    operation: str
    ok: bool
    data: Any = None
    error: str | None = None

    @property
    def has_error(self) -> bool:
        """Whether the remote phase failed."""
        return not self.ok
