"""Host surface protocol plus a headless, in-memory surface implementation.

A surface is an open text view of one file. The engine only reads and writes
its text and selections; creating and closing surfaces belongs to the host.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Callable, Iterable, Protocol, Sequence

from ..core.offsets import apply_host_edit, line_start_offsets, offset_of, position_at
from ..core.positions import HostRange, HostSelection

__all__ = [
    "HostEdit",
    "EditListener",
    "SelectionListener",
    "Surface",
    "BufferSurface",
    "generate_surface_id",
]


def generate_surface_id() -> str:
    return uuid.uuid4().hex


@dataclass(slots=True, frozen=True)
class HostEdit:
    """One content change reported by the host: ``range`` of the old text became ``text``."""

    range: HostRange
    text: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "range", HostRange.from_value(self.range))


class EditListener(Protocol):
    """Callback fired with every change batch reported for a surface."""

    def __call__(self, surface: "Surface", edits: Sequence[HostEdit]) -> None:
        ...


class SelectionListener(Protocol):
    """Callback fired whenever a surface's ordered selections change."""

    def __call__(self, surface: "Surface", selections: Sequence[HostSelection]) -> None:
        ...


class Surface(Protocol):
    """Interface consumed from the host editor for each open document."""

    @property
    def surface_id(self) -> str:
        ...

    @property
    def file_identifier(self) -> str:
        ...

    @property
    def text(self) -> str:
        ...

    @property
    def selections(self) -> tuple[HostSelection, ...]:
        ...

    def replace_all_text(self, text: str) -> None:
        ...

    def set_selections(self, selections: Sequence[HostSelection]) -> None:
        ...

    def add_edit_listener(self, listener: EditListener) -> Callable[[], None]:
        ...

    def add_selection_listener(self, listener: SelectionListener) -> Callable[[], None]:
        ...


def _remover(listeners: list, listener) -> Callable[[], None]:
    def remove() -> None:
        try:
            listeners.remove(listener)
        except ValueError:
            pass

    return remove


class BufferSurface:
    """Headless surface backed by a string buffer.

    User actions (:meth:`apply_user_edits`, :meth:`select`) and programmatic
    writes (:meth:`replace_all_text`, :meth:`set_selections`) both fire the
    same events, exactly as a real host does.
    """

    def __init__(
        self,
        file_identifier: str,
        text: str = "",
        *,
        surface_id: str | None = None,
        selections: Iterable[HostSelection] | None = None,
    ) -> None:
        self._surface_id = surface_id or generate_surface_id()
        self._file_identifier = file_identifier
        self._text = text
        self._selections: tuple[HostSelection, ...] = tuple(selections or (HostSelection.caret(0, 0),))
        self._edit_listeners: list[EditListener] = []
        self._selection_listeners: list[SelectionListener] = []

    # ------------------------------------------------------------------
    # Surface protocol
    # ------------------------------------------------------------------
    @property
    def surface_id(self) -> str:
        return self._surface_id

    @property
    def file_identifier(self) -> str:
        return self._file_identifier

    @property
    def text(self) -> str:
        return self._text

    @property
    def selections(self) -> tuple[HostSelection, ...]:
        return self._selections

    def replace_all_text(self, text: str) -> None:
        """Replace the whole buffer in one operation."""

        whole = HostRange(position_at(self._text, 0), position_at(self._text, len(self._text)))
        self._text = text
        self._selections = self._clamp_selections(self._selections)
        self._emit_edits((HostEdit(whole, text),))

    def set_selections(self, selections: Sequence[HostSelection]) -> None:
        self._selections = self._clamp_selections(selections)
        self._emit_selections()

    def add_edit_listener(self, listener: EditListener) -> Callable[[], None]:
        self._edit_listeners.append(listener)
        return _remover(self._edit_listeners, listener)

    def add_selection_listener(self, listener: SelectionListener) -> Callable[[], None]:
        self._selection_listeners.append(listener)
        return _remover(self._selection_listeners, listener)

    # ------------------------------------------------------------------
    # Simulated user input
    # ------------------------------------------------------------------
    def apply_user_edits(self, edits: Sequence[HostEdit]) -> None:
        """Apply a batch of non-overlapping changes expressed against the current text."""

        ordered = sorted(edits, key=lambda change: change.range.start, reverse=True)
        text = self._text
        for change in ordered:
            text = apply_host_edit(text, change.range, change.text)
        self._text = text
        self._selections = self._clamp_selections(self._selections)
        self._emit_edits(tuple(edits))

    def insert(self, line: int, character: int, text: str) -> None:
        caret = HostSelection.caret(line, character).to_range()
        self.apply_user_edits((HostEdit(caret, text),))

    def select(self, *selections: HostSelection) -> None:
        self.set_selections(selections)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _clamp_selections(self, selections: Iterable[HostSelection]) -> tuple[HostSelection, ...]:
        starts = line_start_offsets(self._text)

        def clamp(position):
            return position_at(self._text, offset_of(self._text, position, offsets=starts), offsets=starts)

        return tuple(HostSelection(clamp(sel.anchor), clamp(sel.active)) for sel in selections)

    def _emit_edits(self, edits: Sequence[HostEdit]) -> None:
        for listener in list(self._edit_listeners):
            listener(self, edits)

    def _emit_selections(self) -> None:
        for listener in list(self._selection_listeners):
            listener(self, self._selections)

    def __repr__(self) -> str:
        return f"BufferSurface({self._file_identifier!r}, id={self._surface_id[:8]})"
