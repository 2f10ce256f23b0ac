"""Registry of open surfaces and the host's active-surface designation."""

from __future__ import annotations

import logging
from typing import Callable, Dict, Iterator, List, Optional, Protocol

from .surface import Surface

__all__ = ["SurfaceWorkspace", "ActiveSurfaceListener", "SurfaceLifecycleListener"]

_LOGGER = logging.getLogger(__name__)


class ActiveSurfaceListener(Protocol):
    """Callback signature fired whenever the active surface changes."""

    def __call__(self, surface: Optional[Surface]) -> None:  # pragma: no cover - protocol
        ...


class SurfaceLifecycleListener(Protocol):
    """Callback fired when a surface opens or closes."""

    def __call__(self, surface: Surface) -> None:  # pragma: no cover - protocol
        ...


def _subscribe(listeners: list, listener) -> Callable[[], None]:
    listeners.append(listener)

    def unsubscribe() -> None:
        try:
            listeners.remove(listener)
        except ValueError:
            pass

    return unsubscribe


class SurfaceWorkspace:
    """Tracks open surfaces in host order and which one receives direct input."""

    def __init__(self) -> None:
        self._surfaces: Dict[str, Surface] = {}
        self._order: List[str] = []
        self._active_surface_id: str | None = None
        self._active_listeners: List[ActiveSurfaceListener] = []
        self._opened_listeners: List[SurfaceLifecycleListener] = []
        self._closed_listeners: List[SurfaceLifecycleListener] = []

    # ------------------------------------------------------------------
    # Surface lifecycle
    # ------------------------------------------------------------------
    def open_surface(self, surface: Surface, *, make_active: bool = True) -> Surface:
        """Register a surface the host has just opened."""

        surface_id = surface.surface_id
        if surface_id in self._surfaces:
            raise KeyError(f"Surface already open: {surface_id}")
        self._surfaces[surface_id] = surface
        self._order.append(surface_id)
        _LOGGER.debug("Surface opened: %s (%s)", surface_id, surface.file_identifier)
        for listener in list(self._opened_listeners):
            listener(surface)
        if make_active or self._active_surface_id is None:
            self.set_active_surface(surface_id)
        return surface

    def close_surface(self, surface_id: str) -> Surface:
        """Forget a surface the host has closed and return it."""

        if surface_id not in self._surfaces:
            raise KeyError(f"Unknown surface_id: {surface_id}")
        surface = self._surfaces.pop(surface_id)
        index = self._order.index(surface_id)
        self._order.pop(index)
        _LOGGER.debug("Surface closed: %s", surface_id)
        for listener in list(self._closed_listeners):
            listener(surface)

        if self._active_surface_id == surface_id:
            if self._order:
                fallback_index = index if index < len(self._order) else len(self._order) - 1
                self._active_surface_id = self._order[fallback_index]
            else:
                self._active_surface_id = None
            self._notify_active_listeners()
        return surface

    def set_active_surface(self, surface_id: str | None) -> Surface | None:
        """Designate the surface receiving direct input, or none (focus elsewhere)."""

        if surface_id is not None and surface_id not in self._surfaces:
            raise KeyError(f"Unknown surface_id: {surface_id}")
        if self._active_surface_id == surface_id:
            return self.active_surface
        self._active_surface_id = surface_id
        self._notify_active_listeners()
        return self.active_surface

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------
    def add_active_listener(self, listener: ActiveSurfaceListener) -> Callable[[], None]:
        return _subscribe(self._active_listeners, listener)

    def add_opened_listener(self, listener: SurfaceLifecycleListener) -> Callable[[], None]:
        return _subscribe(self._opened_listeners, listener)

    def add_closed_listener(self, listener: SurfaceLifecycleListener) -> Callable[[], None]:
        return _subscribe(self._closed_listeners, listener)

    def _notify_active_listeners(self) -> None:
        surface = self.active_surface
        for listener in list(self._active_listeners):
            listener(surface)

    # ------------------------------------------------------------------
    # Query helpers
    # ------------------------------------------------------------------
    @property
    def active_surface_id(self) -> str | None:
        return self._active_surface_id

    @property
    def active_surface(self) -> Surface | None:
        if self._active_surface_id is None:
            return None
        return self._surfaces.get(self._active_surface_id)

    def iter_surfaces(self) -> Iterator[Surface]:
        for surface_id in self._order:
            yield self._surfaces[surface_id]

    def surface_count(self) -> int:
        return len(self._order)

    def is_open(self, surface_id: str) -> bool:
        return surface_id in self._surfaces

    def get_surface(self, surface_id: str) -> Surface:
        surface = self._surfaces.get(surface_id)
        if surface is None:
            raise KeyError(f"Unknown surface_id: {surface_id}")
        return surface
