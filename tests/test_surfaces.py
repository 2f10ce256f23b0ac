"""Headless buffer surfaces and the surface workspace."""

from __future__ import annotations

import pytest

from santoku_sync.core.positions import HostRange, HostSelection
from santoku_sync.editor.surface import BufferSurface, HostEdit
from santoku_sync.editor.workspace import SurfaceWorkspace


def test_user_edits_apply_and_emit_in_host_order() -> None:
    surface = BufferSurface("/work/a.py", "abc\ndef")
    batches: list[tuple[HostEdit, ...]] = []
    surface.add_edit_listener(lambda _surface, edits: batches.append(tuple(edits)))
    edits = (
        HostEdit(HostRange((0, 0), (0, 1)), "A"),
        HostEdit(HostRange((1, 3), (1, 3)), "!"),
    )

    surface.apply_user_edits(edits)

    assert surface.text == "Abc\ndef!"
    assert batches == [edits]


def test_replace_all_text_reports_whole_document_change() -> None:
    surface = BufferSurface("/work/a.py", "one\ntwo")
    batches: list[tuple[HostEdit, ...]] = []
    surface.add_edit_listener(lambda _surface, edits: batches.append(tuple(edits)))

    surface.replace_all_text("new")

    assert surface.text == "new"
    assert batches == [(HostEdit(HostRange((0, 0), (1, 3)), "new"),)]


def test_selections_clamp_to_text_and_notify() -> None:
    surface = BufferSurface("/work/a.py", "ab\ncd")
    seen: list[tuple[HostSelection, ...]] = []
    unsubscribe = surface.add_selection_listener(lambda _surface, sels: seen.append(tuple(sels)))

    surface.select(HostSelection(anchor=(0, 1), active=(9, 9)))
    unsubscribe()
    surface.select(HostSelection.caret(0, 0))

    assert seen == [(HostSelection(anchor=(0, 1), active=(1, 2)),)]
    assert surface.selections == (HostSelection.caret(0, 0),)


def test_workspace_tracks_active_surface_and_fallback() -> None:
    workspace = SurfaceWorkspace()
    first = workspace.open_surface(BufferSurface("/work/a.py"))
    second = workspace.open_surface(BufferSurface("/work/b.py"), make_active=False)
    changes: list[str | None] = []
    workspace.add_active_listener(lambda surface: changes.append(surface.surface_id if surface else None))

    assert workspace.active_surface_id == first.surface_id
    workspace.close_surface(first.surface_id)
    assert workspace.active_surface is second
    workspace.set_active_surface(None)

    assert changes == [second.surface_id, None]
    assert workspace.surface_count() == 1


def test_workspace_rejects_unknown_and_duplicate_surfaces() -> None:
    workspace = SurfaceWorkspace()
    surface = workspace.open_surface(BufferSurface("/work/a.py"))

    with pytest.raises(KeyError):
        workspace.open_surface(surface)
    with pytest.raises(KeyError):
        workspace.set_active_surface("missing")
    with pytest.raises(KeyError):
        workspace.close_surface("missing")


def test_workspace_lifecycle_listeners_and_lookup() -> None:
    workspace = SurfaceWorkspace()
    opened: list[str] = []
    closed: list[str] = []
    workspace.add_opened_listener(lambda surface: opened.append(surface.file_identifier))
    workspace.add_closed_listener(lambda surface: closed.append(surface.file_identifier))

    left = workspace.open_surface(BufferSurface("/work/a.py"))
    right = workspace.open_surface(BufferSurface("file:///work/a.py"))
    workspace.close_surface(left.surface_id)

    assert opened == ["/work/a.py", "file:///work/a.py"]
    assert closed == ["/work/a.py"]
    assert list(workspace.iter_surfaces()) == [right]
    assert workspace.get_surface(right.surface_id) is right
