"""Surface adapter for a PySide6 ``QPlainTextEdit``.

Qt reports changes as ``(position, charsRemoved, charsAdded)`` against the
document *after* the edit, so a shadow copy of the previous text is kept to
express the removed span as a host range.
"""

from __future__ import annotations

from typing import Any, Callable, Sequence

from PySide6.QtCore import QEvent, QObject
from PySide6.QtGui import QColor, QTextCharFormat, QTextCursor
from PySide6.QtWidgets import QPlainTextEdit, QTextEdit

from ..core.offsets import line_start_offsets, offset_of, position_at
from ..core.positions import HostRange, HostSelection
from .surface import EditListener, HostEdit, SelectionListener, generate_surface_id
from .workspace import SurfaceWorkspace

__all__ = ["QtTextSurface"]

_MIRROR_HIGHLIGHT = "#3a6ea5"


class QtTextSurface(QObject):
    """Expose a ``QPlainTextEdit`` through the surface protocol.

    The first selection drives the widget's own cursor. Additional selections
    are rendered as highlighted extra selections since the widget only owns a
    single cursor. When ``workspace`` is given, focusing the editor marks this
    surface as the active one.
    """

    def __init__(
        self,
        editor: QPlainTextEdit,
        file_identifier: str,
        *,
        workspace: SurfaceWorkspace | None = None,
        surface_id: str | None = None,
    ) -> None:
        super().__init__(editor)
        self._editor = editor
        self._file_identifier = file_identifier
        self._surface_id = surface_id or generate_surface_id()
        self._workspace = workspace
        self._shadow_text = editor.toPlainText()
        self._extra_selections: tuple[HostSelection, ...] = ()
        self._edit_listeners: list[EditListener] = []
        self._selection_listeners: list[SelectionListener] = []
        self._applying_selections = False

        editor.document().contentsChange.connect(self._handle_contents_change)
        editor.cursorPositionChanged.connect(self._handle_cursor_changed)
        editor.selectionChanged.connect(self._handle_cursor_changed)
        editor.installEventFilter(self)

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
    def editor(self) -> QPlainTextEdit:
        return self._editor

    @property
    def text(self) -> str:
        return self._editor.toPlainText()

    @property
    def selections(self) -> tuple[HostSelection, ...]:
        return (self._cursor_selection(),) + self._extra_selections

    def replace_all_text(self, text: str) -> None:
        """Swap the full document content as a single undoable edit."""

        cursor = QTextCursor(self._editor.document())
        cursor.beginEditBlock()
        cursor.select(QTextCursor.SelectionType.Document)
        cursor.insertText(text)
        cursor.endEditBlock()

    def set_selections(self, selections: Sequence[HostSelection]) -> None:
        text = self.text
        starts = line_start_offsets(text)
        self._extra_selections = tuple(selections[1:])
        self._render_extra_selections(text, starts)
        cursor = self._editor.textCursor()
        if selections:
            primary = selections[0]
            cursor.setPosition(offset_of(text, primary.anchor, offsets=starts))
            cursor.setPosition(
                offset_of(text, primary.active, offsets=starts),
                QTextCursor.MoveMode.KeepAnchor,
            )
        else:
            cursor.clearSelection()
        self._applying_selections = True
        try:
            self._editor.setTextCursor(cursor)
        finally:
            self._applying_selections = False
        self._emit_selections()

    def add_edit_listener(self, listener: EditListener) -> Callable[[], None]:
        self._edit_listeners.append(listener)
        return self._remover(self._edit_listeners, listener)

    def add_selection_listener(self, listener: SelectionListener) -> Callable[[], None]:
        self._selection_listeners.append(listener)
        return self._remover(self._selection_listeners, listener)

    # ------------------------------------------------------------------
    # Qt callbacks
    # ------------------------------------------------------------------
    def eventFilter(self, watched: QObject, event: QEvent) -> bool:  # noqa: N802 - Qt override
        if watched is self._editor and event.type() == QEvent.Type.FocusIn:
            workspace = self._workspace
            if workspace is not None and workspace.is_open(self._surface_id):
                workspace.set_active_surface(self._surface_id)
        return super().eventFilter(watched, event)

    def _handle_contents_change(self, position: int, removed: int, added: int) -> None:
        previous = self._shadow_text
        current = self._editor.toPlainText()
        self._shadow_text = current
        # Whole-document changes count the trailing block separator; slicing clamps it.
        starts = line_start_offsets(previous)
        start = position_at(previous, position, offsets=starts)
        end = position_at(previous, position + removed, offsets=starts)
        replacement = current[position : position + added]
        if start == end and not replacement:
            return
        self._emit_edits((HostEdit(HostRange(start, end), replacement),))

    def _handle_cursor_changed(self) -> None:
        if self._applying_selections:
            return
        self._emit_selections()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _cursor_selection(self) -> HostSelection:
        cursor = self._editor.textCursor()
        text = self.text
        starts = line_start_offsets(text)
        return HostSelection(
            anchor=position_at(text, cursor.anchor(), offsets=starts),
            active=position_at(text, cursor.position(), offsets=starts),
        )

    def _render_extra_selections(self, text: str, starts: Sequence[int]) -> None:
        rendered: list[Any] = []
        for selection in self._extra_selections:
            extra = QTextEdit.ExtraSelection()
            cursor = QTextCursor(self._editor.document())
            cursor.setPosition(offset_of(text, selection.anchor, offsets=starts))
            cursor.setPosition(
                offset_of(text, selection.active, offsets=starts),
                QTextCursor.MoveMode.KeepAnchor,
            )
            char_format = QTextCharFormat()
            char_format.setBackground(QColor(_MIRROR_HIGHLIGHT))
            extra.cursor = cursor
            extra.format = char_format
            rendered.append(extra)
        self._editor.setExtraSelections(rendered)

    def _emit_edits(self, edits: Sequence[HostEdit]) -> None:
        for listener in list(self._edit_listeners):
            listener(self, edits)

    def _emit_selections(self) -> None:
        selections = self.selections
        for listener in list(self._selection_listeners):
            listener(self, selections)

    @staticmethod
    def _remover(listeners: list, listener) -> Callable[[], None]:
        def remove() -> None:
            try:
                listeners.remove(listener)
            except ValueError:
                pass

        return remove
