"""Two-channel propagation between host surfaces and the document-state store.

Outbound, edits and selections made on the active surface become canonical
store actions. Inbound, each store snapshot is applied to every mirror
surface. The text and selection channels are independent of each other.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from ..core.paths import PathResolver
from ..core.positions import HostSelection
from ..core.transforms import (
    canonical_selections_to_host,
    host_range_to_canonical,
    host_selection_to_canonical,
)
from ..editor.surface import HostEdit, Surface
from ..store import actions
from ..store.adapter import StoreAdapter
from ..store.state import StoreState
from .tracker import ActiveSurfaceTracker

__all__ = ["ChangePropagator", "ApplyReport"]

_LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class ApplyReport:
    """Surfaces written during one inbound pass, by surface id."""

    texts_replaced: list[str] = field(default_factory=list)
    selections_updated: list[str] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not self.texts_replaced and not self.selections_updated


class ChangePropagator:
    """Translate between host events and store actions/snapshots."""

    def __init__(
        self,
        tracker: ActiveSurfaceTracker,
        resolver: PathResolver,
        *,
        adapter: StoreAdapter | None = None,
        sync_text: bool = True,
        sync_selections: bool = True,
    ) -> None:
        self.tracker = tracker
        self.resolver = resolver
        self.adapter = adapter
        self.sync_text = sync_text
        self.sync_selections = sync_selections

    # ------------------------------------------------------------------
    # Outbound: local -> store
    # ------------------------------------------------------------------
    def handle_edits(self, surface: Surface, edits: Sequence[HostEdit]) -> int:
        """Dispatch one ``edit`` action per change, in host order. Returns the count."""

        target = self._outbound_target(surface)
        if target is None:
            return 0
        adapter, path = target
        for change in edits:
            adapter.dispatch(actions.edit(path, host_range_to_canonical(change.range), change.text))
        return len(edits)

    def handle_selections(self, surface: Surface, selections: Sequence[HostSelection]) -> bool:
        """Dispatch the surface's selections as one ``set_selections`` action."""

        target = self._outbound_target(surface)
        if target is None:
            return False
        adapter, path = target
        canonical = [host_selection_to_canonical(selection, path) for selection in selections]
        adapter.dispatch(actions.set_selections(*canonical))
        return True

    def _outbound_target(self, surface: Surface) -> tuple[StoreAdapter, str] | None:
        adapter = self.adapter
        if adapter is None or not self.tracker.is_active(surface):
            return None
        path = self.resolver.resolve(surface.file_identifier)
        if path is None:
            _LOGGER.debug("Skipping event on %s: outside the workspace", surface.file_identifier)
            return None
        return adapter, path

    # ------------------------------------------------------------------
    # Inbound: store -> mirrors
    # ------------------------------------------------------------------
    def apply_state(self, state: StoreState) -> ApplyReport:
        """Bring every mirror surface in line with ``state``.

        The active surface is never written. Surfaces already matching the
        snapshot are left untouched.
        """

        report = ApplyReport()
        for surface in list(self.tracker.mirrors()):
            path = self.resolver.resolve(surface.file_identifier)
            if path is None:
                continue
            self._apply_to_surface(surface, path, state, report)
        return report

    def sync_surface(self, surface: Surface, state: StoreState) -> ApplyReport:
        """Apply ``state`` to a single surface unless it is the active one."""

        report = ApplyReport()
        if self.tracker.is_active(surface):
            return report
        path = self.resolver.resolve(surface.file_identifier)
        if path is not None:
            self._apply_to_surface(surface, path, state, report)
        return report

    def _apply_to_surface(
        self, surface: Surface, path: str, state: StoreState, report: ApplyReport
    ) -> None:
        if self.sync_text and self._apply_text(surface, path, state):
            report.texts_replaced.append(surface.surface_id)
        if self.sync_selections and self._apply_selections(surface, path, state):
            report.selections_updated.append(surface.surface_id)

    def _apply_text(self, surface: Surface, path: str, state: StoreState) -> bool:
        if not state.is_path_active(path):
            return False
        target = state.text_for(path)
        if target is None or surface.text == target:
            return False
        # Whole-content replacement; no incremental patching.
        surface.replace_all_text(target)
        _LOGGER.debug("Replaced text of %s (%d chars)", path, len(target))
        return True

    def _apply_selections(self, surface: Surface, path: str, state: StoreState) -> bool:
        desired = tuple(canonical_selections_to_host(state, state.selections_for(path)))
        if tuple(surface.selections) == desired:
            return False
        surface.set_selections(desired)
        return True
