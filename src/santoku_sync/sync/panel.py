"""Single-panel bookkeeping: at most one live synchronization session."""

from __future__ import annotations

import logging
from typing import Callable, List

from ..core.paths import PathResolver
from ..editor.workspace import SurfaceWorkspace
from ..services.settings import SettingsStore, SyncSettings
from ..store.actions import ChunkCreationRequest
from ..store.adapter import StoreAdapter
from ..utils.logging import setup_logging_from_settings
from .session import SyncSession

__all__ = ["PanelManager", "AdapterFactory", "AdapterCreatedListener"]

_LOGGER = logging.getLogger(__name__)

AdapterFactory = Callable[[], StoreAdapter]
AdapterCreatedListener = Callable[[StoreAdapter], None]


class PanelManager:
    """Owns the live session and notifies listeners when a store adapter appears."""

    def __init__(
        self,
        workspace: SurfaceWorkspace,
        settings: SyncSettings | None = None,
        *,
        resolver: PathResolver | None = None,
        configure_logging: bool = False,
    ) -> None:
        self._workspace = workspace
        self._settings = settings or SyncSettings()
        self._resolver = resolver or PathResolver(self._settings.workspace_root)
        self._session: SyncSession | None = None
        self._adapter_listeners: List[AdapterCreatedListener] = []
        if configure_logging:
            setup_logging_from_settings(self._settings, force=True)

    @classmethod
    def from_settings_store(
        cls,
        workspace: SurfaceWorkspace,
        store: SettingsStore | None = None,
        *,
        configure_logging: bool = True,
    ) -> "PanelManager":
        """Load persisted settings and build a manager around them.

        Logging is routed to the configured log directory unless
        ``configure_logging`` is false.
        """

        active_store = store or SettingsStore()
        try:
            settings = active_store.load()
        except OSError as exc:
            _LOGGER.warning("Failed to load settings from %s: %s", active_store.path, exc)
            settings = SyncSettings()
        return cls(workspace, settings, configure_logging=configure_logging)

    @property
    def current(self) -> SyncSession | None:
        return self._session

    def on_adapter_created(self, listener: AdapterCreatedListener) -> Callable[[], None]:
        self._adapter_listeners.append(listener)

        def unsubscribe() -> None:
            try:
                self._adapter_listeners.remove(listener)
            except ValueError:
                pass

        return unsubscribe

    def create_or_show(self, adapter_factory: AdapterFactory) -> SyncSession:
        """Return the live session, creating it (and its adapter) when there is none."""

        if self._session is not None and not self._session.disposed:
            _LOGGER.debug("Reusing live sync session")
            return self._session

        adapter = adapter_factory()
        session = SyncSession(self._workspace, self._resolver, adapter, settings=self._settings)
        self._session = session
        session.start()
        _LOGGER.info("Sync session created (workspace root: %s)", self._resolver.normalized_root)
        for listener in list(self._adapter_listeners):
            try:
                listener(adapter)
            except Exception:  # pragma: no cover - listener failures are isolated
                _LOGGER.exception("Adapter-created listener failed")
        return session

    def add_snippet(self, index: int | None = None) -> list[ChunkCreationRequest]:
        session = self._session
        if session is None:
            return []
        return session.add_snippet(index)

    def dispose(self) -> None:
        session, self._session = self._session, None
        if session is None:
            return
        adapter = session.adapter
        session.dispose()
        close = getattr(adapter, "close", None)
        if callable(close):
            close()
        _LOGGER.info("Sync session closed")
