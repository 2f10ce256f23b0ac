"""Exception types raised at the edges of the synchronization engine."""

from __future__ import annotations

from typing import Any, Mapping

__all__ = ["SyncError", "StoreDispatchError", "InvalidStatePayloadError"]


class SyncError(RuntimeError):
    """Base class for synchronization failures."""

    def __init__(self, message: str, *, details: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        self.details = dict(details) if isinstance(details, Mapping) else None


class StoreDispatchError(SyncError):
    """Raised when an action could not be delivered to the store."""

    def __init__(
        self,
        message: str,
        *,
        action_type: str | None = None,
        details: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details=details)
        self.action_type = action_type


class InvalidStatePayloadError(SyncError):
    """Raised when a store state payload cannot be parsed into a snapshot."""
