"""Qt-backed surface behaviour, exercised headlessly."""

from __future__ import annotations

import pytest

pytest.importorskip("PySide6.QtWidgets")

from PySide6.QtCore import QEvent  # noqa: E402
from PySide6.QtGui import QFocusEvent, QTextCursor  # noqa: E402
from PySide6.QtWidgets import QPlainTextEdit  # noqa: E402

from santoku_sync.core.offsets import apply_host_edit  # noqa: E402
from santoku_sync.core.positions import HostSelection  # noqa: E402
from santoku_sync.editor.qt_surface import QtTextSurface  # noqa: E402
from santoku_sync.editor.workspace import SurfaceWorkspace  # noqa: E402
from santoku_sync.sync.session import SyncSession  # noqa: E402

from tests.helpers import RecordingStore, make_resolver, make_surface  # noqa: E402


@pytest.fixture(autouse=True)
def _ensure_qapp(qapp):  # pragma: no cover - pytest-qt provides the fixture
    """Guarantee a running QApplication when PySide6 is installed."""

    return qapp


def _surface(text: str = "", **kwargs) -> QtTextSurface:
    editor = QPlainTextEdit()
    editor.setPlainText(text)
    return QtTextSurface(editor, "/work/doc.py", **kwargs)


def test_typing_reports_edits_against_previous_text() -> None:
    surface = _surface("alpha\nbeta")
    before = surface.text
    seen = []
    surface.add_edit_listener(lambda _surface, edits: seen.extend(edits))

    cursor = surface.editor.textCursor()
    cursor.setPosition(len("alpha\nbe"))
    cursor.insertText("XX")

    assert surface.text == "alpha\nbeXXta"
    rebuilt = before
    for change in seen:
        rebuilt = apply_host_edit(rebuilt, change.range, change.text)
    assert rebuilt == surface.text


def test_replace_all_text_swaps_content_in_one_edit_block() -> None:
    surface = _surface("old\ncontent")
    seen = []
    surface.add_edit_listener(lambda _surface, edits: seen.append(edits))

    surface.replace_all_text("fresh")

    assert surface.text == "fresh"
    assert seen
    surface.editor.undo()
    assert surface.text == "old\ncontent"


def test_set_selections_round_trip_and_single_notification() -> None:
    surface = _surface("one\ntwo\nthree")
    notifications = []
    surface.add_selection_listener(lambda _surface, selections: notifications.append(tuple(selections)))
    desired = (HostSelection(anchor=(1, 0), active=(2, 3)), HostSelection.caret(0, 1))

    surface.set_selections(desired)

    assert surface.selections == desired
    assert notifications == [desired]
    assert len(surface.editor.extraSelections()) == 1


def test_user_cursor_moves_emit_selection_events() -> None:
    surface = _surface("one\ntwo")
    notifications = []
    surface.add_selection_listener(lambda _surface, selections: notifications.append(tuple(selections)))

    cursor = surface.editor.textCursor()
    cursor.setPosition(4)
    cursor.setPosition(6, QTextCursor.MoveMode.KeepAnchor)
    surface.editor.setTextCursor(cursor)

    assert notifications
    assert notifications[-1] == (HostSelection(anchor=(1, 0), active=(1, 2)),)


def test_focus_in_marks_surface_active() -> None:
    workspace = SurfaceWorkspace()
    other = workspace.open_surface(make_surface("other.py"))
    surface = _surface("text", workspace=workspace)
    workspace.open_surface(surface, make_active=False)
    assert workspace.active_surface is other

    surface.eventFilter(surface.editor, QFocusEvent(QEvent.Type.FocusIn))

    assert workspace.active_surface_id == surface.surface_id


def test_qt_mirror_follows_store_without_echo() -> None:
    workspace = SurfaceWorkspace()
    active = workspace.open_surface(make_surface("doc.py", "same"))
    mirror = _surface("same", workspace=workspace)
    workspace.open_surface(mirror, make_active=False)
    store = RecordingStore()
    session = SyncSession(workspace, make_resolver(), store)
    session.start()

    store.publish(
        {
            "texts": {"doc.py": "from store\nsecond"},
            "selections": [{"anchor": [2, 0], "active": [2, 6], "path": "doc.py"}],
        }
    )

    assert workspace.active_surface is active
    assert mirror.text == "from store\nsecond"
    assert mirror.selections == (HostSelection(anchor=(1, 0), active=(1, 6)),)
    assert store.actions == []
