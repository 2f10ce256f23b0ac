"""Active vs mirror classification of open surfaces."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from ..editor.surface import Surface
from ..editor.workspace import SurfaceWorkspace

__all__ = ["ActiveSurfaceTracker"]


@dataclass(slots=True)
class ActiveSurfaceTracker:
    """Point-in-time check of which surface is receiving direct input.

    Nothing is cached: the host can move focus between any two events, so the
    workspace is queried on every call. Surfaces are compared by their stable
    ``surface_id`` rather than by object identity.

    Programmatic writes to a mirror raise the same events as typing does;
    treating those as input would send them straight back to the store, so
    only the active surface may originate outbound actions.
    """

    workspace: SurfaceWorkspace

    def is_active(self, surface: Surface) -> bool:
        active_id = self.workspace.active_surface_id
        return active_id is not None and surface.surface_id == active_id

    def active_surface(self) -> Surface | None:
        return self.workspace.active_surface

    def mirrors(self) -> Iterator[Surface]:
        """Yield every open surface that is not active right now."""

        for surface in self.workspace.iter_surfaces():
            if not self.is_active(surface):
                yield surface
