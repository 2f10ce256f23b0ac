"""Session wiring, lifecycle and the single-panel manager."""

from __future__ import annotations

from santoku_sync.core.positions import HostSelection
from santoku_sync.errors import StoreDispatchError, SyncError
from santoku_sync.services.settings import SyncSettings
from santoku_sync.store.adapter import SantokuAdapter
from santoku_sync.store.connector import SantokuConnector
from santoku_sync.sync.panel import PanelManager
from santoku_sync.sync.session import SyncSession

from tests.helpers import ROOT, RecordingStore, make_resolver, make_surface, make_workspace, numbered_lines

DOC = numbered_lines(8)


def _started_session(*surfaces, store=None, settings=None):
    workspace = make_workspace(*surfaces)
    store = store or RecordingStore()
    session = SyncSession(workspace, make_resolver(), store, settings=settings)
    session.start()
    return workspace, store, session


def test_typing_in_active_surface_reaches_store_once() -> None:
    active, mirror = make_surface("doc.py", DOC), make_surface("doc.py", DOC)
    _, store, _ = _started_session(active, mirror)

    active.insert(2, 0, "x")

    assert store.types() == ["edit"]
    assert store.actions[0].range.start.line == 3


def test_store_snapshot_flows_to_mirror_without_echo() -> None:
    active, mirror = make_surface("doc.py", DOC), make_surface("doc.py", DOC)
    _, store, session = _started_session(active, mirror)
    edited = DOC.replace("line 3", "xline 3")

    store.publish({"texts": {"doc.py": edited}})

    assert mirror.text == edited
    assert store.actions == []
    assert session.previous_state is store.state


def test_unchanged_paths_are_still_compared_on_each_snapshot() -> None:
    active = make_surface("doc.py", DOC)
    mirror_doc, mirror_other = make_surface("doc.py", DOC), make_surface("other.py", "")
    _, store, _ = _started_session(active, mirror_doc, mirror_other)
    store.publish({"texts": {"doc.py": DOC, "other.py": "first"}})
    mirror_other.replace_all_text("local drift")

    store.publish({"texts": {"doc.py": DOC + "\nline 9", "other.py": "first"}})

    assert mirror_doc.text.endswith("line 9")
    assert mirror_other.text == "first"
    assert store.actions == []


def test_rejected_edit_converges_once_surface_becomes_a_mirror() -> None:
    first, second = make_surface("doc.py", DOC), make_surface("other.py", "")
    workspace, store, session = _started_session(first, second)
    store.publish({"texts": {"doc.py": DOC, "other.py": ""}})
    failures: list[SyncError] = []
    session.add_failure_listener(failures.append)

    store.fail_with = StoreDispatchError("store unavailable", action_type="edit")
    first.insert(0, 0, "LOST ")
    store.fail_with = None
    assert first.text.startswith("LOST line 1\n")
    assert [failure.action_type for failure in failures] == ["edit"]

    workspace.set_active_surface(second.surface_id)
    store.publish({"texts": {"doc.py": DOC, "other.py": "changed"}})

    assert first.text == DOC
    assert second.text == ""
    assert store.actions == []


def test_previously_active_surface_catches_up_after_focus_moves() -> None:
    first, second = make_surface("doc.py", DOC), make_surface("other.py", "")
    workspace, store, _ = _started_session(first, second)
    updated = DOC.replace("line 5", "line five")

    store.publish({"texts": {"doc.py": updated, "other.py": ""}})
    assert first.text == DOC

    workspace.set_active_surface(second.surface_id)
    store.publish({"texts": {"doc.py": updated, "other.py": "next"}})

    assert first.text == updated
    assert store.actions == []


def test_doc_py_snippet_scenario() -> None:
    active, mirror = make_surface("doc.py", DOC), make_surface("doc.py", DOC)
    workspace, store, session = _started_session(active, mirror)
    active.select(HostSelection(anchor=(3, 2), active=(5, 1)))
    store.actions.clear()

    requests = session.add_snippet()

    assert store.types() == ["upload_file_contents", "create_snippet"]
    assert [(request.line, request.text) for request in requests] == [(4, "line 4\nline 5\nline 6")]

    store.publish(
        {
            "texts": {"doc.py": DOC},
            "chunks": {"c1": {"location": {"path": "doc.py", "line": 4}, "versions": ["v1"]}},
            "chunk_versions": {"v1": {"chunk": "c1", "text": "line 4\nline 5\nline 6"}},
            "selections": [
                {
                    "anchor": {"line": 2, "character": 0},
                    "active": {"line": 2, "character": 4},
                    "path": "doc.py",
                    "relative_to": {"source": "chunk-version", "chunk_version_id": "v1"},
                }
            ],
        }
    )

    assert mirror.text == DOC
    # relative line 2 of a chunk anchored at line 4 is line 5, host line 4
    assert mirror.selections == (HostSelection(anchor=(4, 0), active=(4, 4)),)
    assert workspace.active_surface is active


def test_surfaces_opened_later_are_synced_and_wired() -> None:
    active = make_surface("doc.py", DOC)
    workspace, store, _ = _started_session(active)
    store.publish({"texts": {"doc.py": "store text"}})

    late = make_surface("doc.py", "")
    workspace.open_surface(late, make_active=False)
    assert late.text == "store text"

    workspace.set_active_surface(late.surface_id)
    late.insert(0, 0, "!")
    assert store.types() == ["edit"]


def test_closed_surfaces_are_detached() -> None:
    active, extra = make_surface("doc.py", DOC), make_surface("doc.py", DOC)
    workspace, store, _ = _started_session(active, extra)

    workspace.set_active_surface(extra.surface_id)
    workspace.close_surface(extra.surface_id)
    extra.insert(0, 0, "ghost")

    assert store.actions == []


def test_disposed_session_ignores_late_callbacks() -> None:
    active, mirror = make_surface("doc.py", DOC), make_surface("doc.py", DOC)
    _, store, session = _started_session(active, mirror)

    session.dispose()
    active.insert(0, 0, "x")
    store.publish({"texts": {"doc.py": "after dispose"}})

    assert store.actions == []
    assert store.listeners == []
    assert mirror.text == DOC
    assert session.add_snippet() == []
    session.dispose()


def test_dispatch_failures_are_reported_not_raised() -> None:
    active = make_surface("doc.py", DOC)
    store = RecordingStore()
    store.fail_with = StoreDispatchError("panel closed", action_type="edit")
    _, _, session = _started_session(active, store=store)
    failures: list[SyncError] = []
    session.add_failure_listener(failures.append)

    active.insert(0, 0, "x")

    assert [failure.action_type for failure in failures] == ["edit"]


def test_store_error_messages_reach_session_listeners() -> None:
    connector = SantokuConnector(lambda payload: None)
    active = make_surface("doc.py", DOC)
    _, _, session = _started_session(active, store=SantokuAdapter(connector))
    failures: list[SyncError] = []
    session.add_failure_listener(failures.append)

    connector.receive({"type": "error", "data": {"message": "bad edit"}})

    assert [str(failure) for failure in failures] == ["bad edit"]
    assert failures[0].details == {"message": "bad edit"}


def test_settings_control_channels_and_snippet_index() -> None:
    active, mirror = make_surface("doc.py", DOC), make_surface("doc.py", "old")
    settings = SyncSettings(workspace_root=ROOT, snippet_index=5, sync_text=False)
    workspace = make_workspace(active, mirror)
    store = RecordingStore()
    session = SyncSession.from_settings(workspace, settings, store)
    session.start()

    store.publish({"texts": {"doc.py": "new"}})
    session.add_snippet()

    assert mirror.text == "old"
    assert store.actions[-1].index == 5


def test_panel_manager_keeps_a_single_session() -> None:
    workspace = make_workspace(make_surface("doc.py", DOC))
    panel = PanelManager(workspace, SyncSettings(workspace_root=ROOT))
    created: list[object] = []
    panel.on_adapter_created(created.append)
    factory_calls: list[RecordingStore] = []

    def factory() -> RecordingStore:
        store = RecordingStore()
        factory_calls.append(store)
        return store

    first = panel.create_or_show(factory)
    second = panel.create_or_show(factory)

    assert first is second is panel.current
    assert first.started
    assert created == factory_calls
    assert len(factory_calls) == 1


def test_panel_manager_dispose_closes_adapter_and_allows_recreate() -> None:
    connector = SantokuConnector(lambda payload: None)
    workspace = make_workspace(make_surface("doc.py", DOC))
    panel = PanelManager(workspace, resolver=make_resolver())
    unsubscribe = panel.on_adapter_created(lambda adapter: None)

    session = panel.create_or_show(lambda: SantokuAdapter(connector))
    panel.dispose()

    assert panel.current is None
    assert session.disposed
    assert panel.add_snippet() == []
    unsubscribe()
    replacement = panel.create_or_show(RecordingStore)
    assert replacement is not session
