"""Service helpers (settings persistence)."""

from .settings import SettingsStore, SyncSettings

__all__ = ["SettingsStore", "SyncSettings"]
