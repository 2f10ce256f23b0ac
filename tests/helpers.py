"""Shared test helpers and stub classes.

Import from here instead of duplicating these fakes in individual test files.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping

from santoku_sync.core.paths import PathResolver
from santoku_sync.editor.surface import BufferSurface
from santoku_sync.editor.workspace import SurfaceWorkspace
from santoku_sync.store.actions import Action
from santoku_sync.store.state import StoreState

ROOT = "/work"


class RecordingStore:
    """In-memory store adapter that records dispatched actions.

    State is only replaced when a test calls :meth:`publish`; dispatching an
    action never changes it, so tests control exactly what the engine sees.
    """

    def __init__(self, state: StoreState | None = None) -> None:
        self.state = state
        self.actions: list[Action] = []
        self.listeners: list[Callable[[StoreState], None]] = []
        self.fail_with: Exception | None = None

    def dispatch(self, action: Action) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.actions.append(action)

    def get_state(self) -> StoreState | None:
        return self.state

    def subscribe(self, listener: Callable[[StoreState], None]) -> Callable[[], None]:
        self.listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self.listeners:
                self.listeners.remove(listener)

        return unsubscribe

    def publish(self, state: StoreState | Mapping[str, Any]) -> StoreState:
        snapshot = StoreState.from_payload(state)
        self.state = snapshot
        for listener in list(self.listeners):
            listener(snapshot)
        return snapshot

    def types(self) -> list[str]:
        return [action.type for action in self.actions]


def make_resolver(root: str | None = ROOT) -> PathResolver:
    return PathResolver(root)


def make_surface(name: str = "doc.py", text: str = "", **kwargs: Any) -> BufferSurface:
    return BufferSurface(f"{ROOT}/{name}", text, **kwargs)


def make_workspace(*surfaces: BufferSurface) -> SurfaceWorkspace:
    """Open ``surfaces`` in order; the first one ends up active."""

    workspace = SurfaceWorkspace()
    for surface in surfaces:
        workspace.open_surface(surface, make_active=False)
    if surfaces:
        workspace.set_active_surface(surfaces[0].surface_id)
    return workspace


def numbered_lines(count: int) -> str:
    return "\n".join(f"line {index}" for index in range(1, count + 1))
