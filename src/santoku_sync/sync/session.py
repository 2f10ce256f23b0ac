"""Synchronization session: wires surfaces, the store and the propagator together."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Mapping, Sequence

from ..core.paths import PathResolver
from ..core.positions import HostSelection
from ..editor.surface import HostEdit, Surface
from ..editor.workspace import SurfaceWorkspace
from ..errors import StoreDispatchError, SyncError
from ..services.settings import SyncSettings
from ..store.actions import ChunkCreationRequest
from ..store.adapter import StoreAdapter
from ..store.state import StoreState, changed_paths
from .extractor import ChunkExtractor
from .propagator import ApplyReport, ChangePropagator
from .tracker import ActiveSurfaceTracker

__all__ = ["SyncSession", "FailureListener"]

_LOGGER = logging.getLogger(__name__)

FailureListener = Callable[[SyncError], None]


class SyncSession:
    """One live synchronization session, created per panel and disposed with it.

    The session owns the store adapter reference and the last processed
    snapshot. Every subscription it makes is kept as an unsubscribe handle so
    :meth:`dispose` can release them; callbacks arriving afterwards are no-ops.
    """

    def __init__(
        self,
        workspace: SurfaceWorkspace,
        resolver: PathResolver,
        adapter: StoreAdapter | None = None,
        *,
        settings: SyncSettings | None = None,
    ) -> None:
        settings = settings or SyncSettings()
        self.workspace = workspace
        self.resolver = resolver
        self.snippet_index = settings.snippet_index
        self.tracker = ActiveSurfaceTracker(workspace)
        self.propagator = ChangePropagator(
            self.tracker,
            resolver,
            sync_text=settings.sync_text,
            sync_selections=settings.sync_selections,
        )
        self.extractor = ChunkExtractor(resolver)
        self._adapter: StoreAdapter | None = None
        self._previous_state: StoreState | None = None
        self._surface_handles: Dict[str, List[Callable[[], None]]] = {}
        self._adapter_handles: List[Callable[[], None]] = []
        self._workspace_handles: List[Callable[[], None]] = []
        self._failure_listeners: List[FailureListener] = []
        self._started = False
        self._disposed = False
        if adapter is not None:
            self.attach_adapter(adapter)

    @classmethod
    def from_settings(
        cls,
        workspace: SurfaceWorkspace,
        settings: SyncSettings,
        adapter: StoreAdapter | None = None,
    ) -> "SyncSession":
        return cls(workspace, PathResolver(settings.workspace_root), adapter, settings=settings)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    @property
    def adapter(self) -> StoreAdapter | None:
        return self._adapter

    @property
    def previous_state(self) -> StoreState | None:
        """The last snapshot fully processed by :meth:`handle_state_change`."""

        return self._previous_state

    @property
    def started(self) -> bool:
        return self._started

    @property
    def disposed(self) -> bool:
        return self._disposed

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start(self) -> None:
        """Attach to the workspace and every open surface."""

        if self._started or self._disposed:
            return
        self._started = True
        self._workspace_handles.append(self.workspace.add_opened_listener(self._handle_surface_opened))
        self._workspace_handles.append(self.workspace.add_closed_listener(self._handle_surface_closed))
        for surface in list(self.workspace.iter_surfaces()):
            self._attach_surface(surface)
        state = self._adapter.get_state() if self._adapter is not None else None
        if state is not None:
            self.handle_state_change(state)
        _LOGGER.debug("Sync session started with %d surface(s)", len(self._surface_handles))

    def attach_adapter(self, adapter: StoreAdapter) -> None:
        """Track ``adapter`` as the session's store, replacing any previous one."""

        if self._disposed:
            return
        self._release(self._adapter_handles)
        self._adapter = adapter
        self.propagator.adapter = adapter
        self._previous_state = None
        self._adapter_handles.append(adapter.subscribe(self.handle_state_change))
        add_failure_listener = getattr(adapter, "add_failure_listener", None)
        remove_failure_listener = getattr(adapter, "remove_failure_listener", None)
        if callable(add_failure_listener) and callable(remove_failure_listener):
            add_failure_listener(self._handle_store_failure)
            self._adapter_handles.append(lambda: remove_failure_listener(self._handle_store_failure))
        if self._started:
            state = adapter.get_state()
            if state is not None:
                self.handle_state_change(state)

    def dispose(self) -> None:
        """Release every subscription. Safe to call more than once."""

        if self._disposed:
            return
        self._disposed = True
        self._release(self._adapter_handles)
        self._release(self._workspace_handles)
        for handles in self._surface_handles.values():
            self._release(handles)
        self._surface_handles.clear()
        self._adapter = None
        self.propagator.adapter = None
        self._previous_state = None
        _LOGGER.debug("Sync session disposed")

    def add_failure_listener(self, listener: FailureListener) -> Callable[[], None]:
        """Register a callback receiving dispatch and store failures."""

        self._failure_listeners.append(listener)

        def unsubscribe() -> None:
            try:
                self._failure_listeners.remove(listener)
            except ValueError:
                pass

        return unsubscribe

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------
    def handle_state_change(self, state: StoreState) -> ApplyReport:
        """Bring every mirror in line with one store snapshot.

        All mirrors are compared on every notification, not only those whose
        path changed: a surface that was active, or whose edit never reached
        the store, is repaired by the next snapshot it sees as a mirror.
        """

        if self._disposed:
            return ApplyReport()
        touched = changed_paths(self._previous_state, state)
        report = self.propagator.apply_state(state)
        self._previous_state = state
        _LOGGER.debug(
            "Store snapshot touched %d path(s): %d text replacement(s), %d selection update(s)",
            len(touched),
            len(report.texts_replaced),
            len(report.selections_updated),
        )
        return report

    def add_snippet(self, index: int | None = None) -> list[ChunkCreationRequest]:
        """Create a snippet from the active surface's selections."""

        if self._disposed:
            return []
        surface = self.tracker.active_surface()
        if surface is None:
            return []
        try:
            return self.extractor.add_snippet(
                surface,
                self._adapter,
                index=self.snippet_index if index is None else index,
            )
        except StoreDispatchError as exc:
            self._report_failure(exc)
            return []

    # ------------------------------------------------------------------
    # Surface wiring
    # ------------------------------------------------------------------
    def _attach_surface(self, surface: Surface) -> None:
        if surface.surface_id in self._surface_handles:
            return
        self._surface_handles[surface.surface_id] = [
            surface.add_edit_listener(self._handle_edits),
            surface.add_selection_listener(self._handle_selections),
        ]

    def _handle_surface_opened(self, surface: Surface) -> None:
        if self._disposed:
            return
        self._attach_surface(surface)
        state = self._previous_state
        if state is not None:
            self.propagator.sync_surface(surface, state)

    def _handle_surface_closed(self, surface: Surface) -> None:
        handles = self._surface_handles.pop(surface.surface_id, None)
        if handles:
            self._release(handles)

    def _handle_edits(self, surface: Surface, edits: Sequence[HostEdit]) -> None:
        if not self._accepts_events_from(surface):
            return
        try:
            self.propagator.handle_edits(surface, edits)
        except StoreDispatchError as exc:
            self._report_failure(exc)

    def _handle_selections(self, surface: Surface, selections: Sequence[HostSelection]) -> None:
        if not self._accepts_events_from(surface):
            return
        try:
            self.propagator.handle_selections(surface, selections)
        except StoreDispatchError as exc:
            self._report_failure(exc)

    def _accepts_events_from(self, surface: Surface) -> bool:
        return not self._disposed and surface.surface_id in self._surface_handles

    # ------------------------------------------------------------------
    # Failure reporting
    # ------------------------------------------------------------------
    def _handle_store_failure(self, message: str, details: Mapping[str, Any]) -> None:
        self._report_failure(SyncError(message, details=details))

    def _report_failure(self, error: SyncError) -> None:
        _LOGGER.warning("Synchronization failure: %s", error)
        for listener in list(self._failure_listeners):
            listener(error)

    @staticmethod
    def _release(handles: List[Callable[[], None]]) -> None:
        while handles:
            handle = handles.pop()
            handle()
