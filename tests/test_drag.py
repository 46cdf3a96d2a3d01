"""Tests for the drag reconciler."""

import logging

import pytest

from tasklane.completion import CompletionResult
from tasklane.drag import DragHandle, DragReconciler, DropOutcome, Scope, Topology, classify, handle_at
from tasklane.errors import ContractViolation, CrossDocumentInconsistency, TransformError
from tasklane.model.entity import count
from tasklane.model.path import PREPEND
from tasklane.settings import Settings
from tasklane.state import StateManager
from tasklane.workspace import Workspace

from .conftest import _make_board, _make_item, _make_lane, ids

CLIPBOARD = Scope("clipboard", external=True)


def _setup(*boards, settings=None, completion=None):
    workspace = Workspace()
    managers = [
        workspace.add(StateManager(f"doc{i}", board, settings or Settings())) for i, board in enumerate(boards)
    ]
    return DragReconciler(workspace, completion), managers


# --- classify ---


def test_classify_same_list(board):
    doc = StateManager("doc", board)
    assert classify(handle_at(doc, (1,)), handle_at(doc, (0,))) == Topology.SAME_LIST
    assert classify(handle_at(doc, (0, 0)), handle_at(doc, (0, 1))) == Topology.SAME_LIST
    assert classify(handle_at(doc, (0, 0)), handle_at(doc, (0,))) == Topology.SAME_LIST


def test_classify_same_document(board):
    doc = StateManager("doc", board)
    assert classify(handle_at(doc, (0, 0)), handle_at(doc, (1,))) == Topology.SAME_DOCUMENT
    assert classify(handle_at(doc, (0, 0)), handle_at(doc, (1, 0))) == Topology.SAME_DOCUMENT


def test_classify_cross_document(board):
    a, b = StateManager("a", board), StateManager("b", board)
    assert classify(handle_at(a, (0, 0)), handle_at(b, (0, 0))) == Topology.CROSS_DOCUMENT


def test_classify_same_document_other_window(board):
    doc = StateManager("doc", board)
    drag = handle_at(doc, (0, 0), window_id="left")
    drop = handle_at(doc, (1,), window_id="right")
    assert classify(drag, drop) == Topology.SAME_DOCUMENT


def test_classify_external(board):
    doc = StateManager("doc", board)
    assert classify(DragHandle(CLIPBOARD, (), "text"), handle_at(doc, (0,))) == Topology.EXTERNAL


def test_handle_accessors(board):
    doc = StateManager("doc", board)
    handle = handle_at(doc, [0, 1])
    assert handle.get_path() == (0, 1)
    assert handle.get_data().id == "I1"
    assert handle.scope == Scope("doc")


# --- same document ---


def test_lane_reorder_scenario(board):
    reconciler, (doc,) = _setup(board)

    outcome = reconciler.handle_drop(handle_at(doc, (1,)), handle_at(doc, (0,)))

    assert outcome == DropOutcome(Topology.SAME_LIST, True)
    assert ids(doc.state) == ["L1", "L0"]
    assert ids(doc.state.children[0]) == ["I2"]
    assert ids(doc.state.children[1]) == ["I0", "I1"]
    assert doc.get_side_array() == (True, False)


def test_drop_on_container_appends(board):
    reconciler, (doc,) = _setup(board)

    outcome = reconciler.handle_drop(handle_at(doc, (0, 0)), handle_at(doc, (1,)))

    assert outcome == DropOutcome(Topology.SAME_DOCUMENT, True)
    assert ids(doc.state.children[1]) == ["I2", "I0"]
    assert ids(doc.state.children[0]) == ["I1"]


def test_drop_on_container_prepends(board):
    reconciler, (doc,) = _setup(board, settings=Settings(insertion_method=PREPEND))
    reconciler.handle_drop(handle_at(doc, (0, 0)), handle_at(doc, (1,)))
    assert ids(doc.state.children[1]) == ["I0", "I2"]


def test_drop_lane_on_board_appends(board):
    reconciler, (doc,) = _setup(board)
    reconciler.handle_drop(handle_at(doc, (0,)), handle_at(doc, ()))
    assert ids(doc.state) == ["L1", "L0"]
    assert doc.get_side_array() == (True, False)


def test_drop_past_last_item(board):
    reconciler, (doc,) = _setup(board)
    outcome = reconciler.handle_drop(handle_at(doc, (0, 0)), handle_at(doc, (0, 2)))
    assert outcome.committed
    assert ids(doc.state.children[0]) == ["I1", "I0"]


def test_drop_in_place_commits_nothing(board):
    reconciler, (doc,) = _setup(board)
    outcome = reconciler.handle_drop(handle_at(doc, (0, 1)), handle_at(doc, (0, 1)))
    assert outcome == DropOutcome(Topology.SAME_LIST, False)
    assert doc.state is board


def test_missing_source_is_noop(board):
    reconciler, (doc,) = _setup(board)
    outcome = reconciler.handle_drop(DragHandle(Scope(doc.document_id), (5, 0)), handle_at(doc, (0,)))
    assert not outcome.committed
    assert doc.state is board
    assert doc.error is None


def test_unknown_destination_is_noop(board):
    reconciler, (doc,) = _setup(board)
    outcome = reconciler.handle_drop(handle_at(doc, (0, 0)), DragHandle(Scope("closed"), (0,)))
    assert not outcome.committed
    assert doc.state is board


def test_completion_on_move_into_complete_lane():
    tree = _make_board([_make_lane("todo", ["a"]), _make_lane("done", complete=True)])
    reconciler, (doc,) = _setup(tree)

    reconciler.handle_drop(handle_at(doc, (0, 0)), handle_at(doc, (1,)))
    item = doc.state.children[1].children[0]
    assert item.data.checked

    reconciler.handle_drop(handle_at(doc, (1, 0)), handle_at(doc, (0,)))
    item = doc.state.children[0].children[0]
    assert not item.data.checked


def test_completion_hook_called_once_per_move(board):
    calls = []

    def hook(source_parent, destination_parent, item):
        calls.append((source_parent.id, destination_parent.id, item.id))
        return CompletionResult(item)

    reconciler, (doc,) = _setup(board, completion=hook)
    reconciler.handle_drop(handle_at(doc, (0, 0)), handle_at(doc, (1,)))
    assert calls == [("L0", "L1", "I0")]


def test_completion_hook_not_called_for_lanes(board):
    calls = []
    reconciler, (doc,) = _setup(board, completion=lambda *args: calls.append(args))
    reconciler.handle_drop(handle_at(doc, (1,)), handle_at(doc, (0,)))
    assert calls == []


def test_recurring_item_leaves_next_occurrence():
    recurring = _make_item("r", title="water 🔁 every day 📅 2024-05-01")
    tree = _make_board([_make_lane("todo", [recurring, "b"]), _make_lane("done", complete=True)])
    reconciler, (doc,) = _setup(tree)

    reconciler.handle_drop(handle_at(doc, (0, 0)), handle_at(doc, (1,)))

    todo, done = doc.state.children
    assert ids(done) == ["r"]
    assert done.children[0].data.checked
    assert len(todo.children) == 2
    assert todo.children[0].data.title_raw == "water 🔁 every day 📅 2024-05-02"
    assert ids(todo)[1] == "b"


def test_transform_failure_reported(board, caplog):
    def hook(source_parent, destination_parent, item):
        raise ValueError("bad recurrence")

    reconciler, (doc,) = _setup(board, completion=hook)
    with caplog.at_level(logging.WARNING, logger="tasklane.drag"):
        outcome = reconciler.handle_drop(handle_at(doc, (0, 0)), handle_at(doc, (1,)))

    assert not outcome.committed
    assert doc.state is board
    assert isinstance(doc.error, TransformError)
    assert "bad recurrence" in caplog.text


def test_contract_violation_reported(board):
    reconciler, (doc,) = _setup(board)
    outcome = reconciler.handle_drop(handle_at(doc, (0,)), handle_at(doc, (0, 1)))
    assert not outcome.committed
    assert doc.state is board
    assert isinstance(doc.error, ContractViolation)


def test_same_document_conserves_count(board):
    reconciler, (doc,) = _setup(board)
    reconciler.handle_drop(handle_at(doc, (0, 1)), handle_at(doc, (1, 0)))
    assert count(doc.state) == count(board)


# --- cross document ---


def _two_docs(**kwargs):
    a = _make_board([_make_lane("L0", ["I0", "I1"]), _make_lane("L1")], collapsed=(False, True), board_id="a")
    b = _make_board([_make_lane("M0", ["J0"])], board_id="b")
    return _setup(a, b, **kwargs)


def test_cross_document_scenario():
    reconciler, (a, b) = _two_docs()
    before = count(a.state) + count(b.state)

    outcome = reconciler.handle_drop(handle_at(a, (0, 0)), handle_at(b, (0,)))

    assert outcome == DropOutcome(Topology.CROSS_DOCUMENT, True)
    assert ids(a.state.children[0]) == ["I1"]
    assert ids(b.state.children[0]) == ["J0", "I0"]
    assert count(a.state) + count(b.state) == before


def test_cross_document_at_position():
    reconciler, (a, b) = _two_docs()
    reconciler.handle_drop(handle_at(a, (0, 1)), handle_at(b, (0, 0)))
    assert ids(b.state.children[0]) == ["I1", "J0"]
    assert ids(a.state.children[0]) == ["I0"]


def test_cross_document_completion_uses_destination_settings():
    a = _make_board([_make_lane("L0", ["I0"])])
    b = _make_board([_make_lane("Done", complete=True)])
    workspace = Workspace()
    source = workspace.add(StateManager("a", a))
    destination = workspace.add(StateManager("b", b, Settings(done_char="X")))

    DragReconciler(workspace).handle_drop(handle_at(source, (0, 0)), handle_at(destination, (0,)))

    item = destination.state.children[0].children[0]
    assert item.data.checked
    assert item.data.check_char == "X"


def test_cross_document_lane_carries_collapse():
    reconciler, (a, b) = _two_docs()
    reconciler.handle_drop(handle_at(a, (1,)), handle_at(b, ()))
    assert ids(b.state) == ["M0", "L1"]
    assert b.get_side_array() == (False, True)
    assert ids(a.state) == ["L0"]
    assert a.get_side_array() == (False,)


def test_cross_document_rejected_destination_commits_nothing():
    reconciler, (a, b) = _two_docs()
    a_before, b_before = a.state, b.state

    outcome = reconciler.handle_drop(handle_at(a, (0,)), handle_at(b, (0, 0)))

    assert not outcome.committed
    assert a.state is a_before
    assert b.state is b_before
    assert isinstance(a.error, ContractViolation)


def test_cross_document_missing_target_commits_nothing():
    reconciler, (a, b) = _two_docs()
    a_before, b_before = a.state, b.state
    outcome = reconciler.handle_drop(handle_at(a, (0, 0)), DragHandle(Scope(b.document_id), (4, 0)))
    assert not outcome.committed
    assert a.state is a_before
    assert b.state is b_before


def test_cross_document_transform_failure_commits_nothing():
    def hook(source_parent, destination_parent, item):
        raise ValueError("nope")

    reconciler, (a, b) = _two_docs(completion=hook)
    a_before, b_before = a.state, b.state
    reconciler.handle_drop(handle_at(a, (0, 0)), handle_at(b, (0,)))
    assert a.state is a_before
    assert b.state is b_before
    assert isinstance(a.error, TransformError)


def test_cross_document_id_collision_gets_fresh_id():
    a = _make_board([_make_lane("L0", ["same"])])
    b = _make_board([_make_lane("M0", ["same"])])
    reconciler, (src, dst) = _setup(a, b)

    reconciler.handle_drop(handle_at(src, (0, 0)), handle_at(dst, (0,)))

    moved = dst.state.children[0].children[1]
    assert moved.id != "same"
    assert moved.data.title_raw == "same"
    assert src.state.children[0].children == ()


def test_cross_document_source_commit_failure_is_loud(monkeypatch, caplog):
    reconciler, (a, b) = _two_docs()

    def broken(updater):
        raise RuntimeError("disk on fire")

    monkeypatch.setattr(a, "set_state", broken)
    with caplog.at_level(logging.CRITICAL, logger="tasklane.drag"):
        with pytest.raises(CrossDocumentInconsistency):
            reconciler.handle_drop(handle_at(a, (0, 0)), handle_at(b, (0,)))

    assert isinstance(a.error, CrossDocumentInconsistency)
    assert b.error is a.error
    assert "disk on fire" in caplog.text


def test_cross_document_survives_failing_destination_watcher():
    reconciler, (a, b) = _two_docs()

    def broken(*args):
        raise RuntimeError("view gone")

    b.watch("state", broken)
    outcome = reconciler.handle_drop(handle_at(a, (0, 0)), handle_at(b, (0,)))

    assert outcome.committed
    assert ids(a.state.children[0]) == ["I1"]
    assert ids(b.state.children[0]) == ["J0", "I0"]
    assert a.error is None
    assert b.error is None


def test_cross_document_unknown_source_is_noop():
    reconciler, (a, b) = _two_docs()
    outcome = reconciler.handle_drop(DragHandle(Scope("closed"), (0, 0)), handle_at(b, (0,)))
    assert outcome == DropOutcome(Topology.CROSS_DOCUMENT, False)


# --- external ---


def test_external_insertion(board):
    reconciler, (doc,) = _setup(board)
    outcome = reconciler.handle_drop(DragHandle(CLIPBOARD, (), ["one", "two"]), handle_at(doc, (1,)))

    assert outcome == DropOutcome(Topology.EXTERNAL, True)
    lane = doc.state.children[1]
    assert [i.data.title_raw for i in lane.children] == ["I2", "one", "two"]
    assert count(doc.state) == count(board) + 2


def test_external_string_payload_split_by_line(board):
    reconciler, (doc,) = _setup(board)
    reconciler.handle_drop(DragHandle(CLIPBOARD, (), "one\n\ntwo\n"), handle_at(doc, (0, 0)))
    assert [i.data.title_raw for i in doc.state.children[0].children] == ["one", "two", "I0", "I1"]


def test_external_insertion_runs_completion():
    tree = _make_board([_make_lane("done", complete=True)])
    reconciler, (doc,) = _setup(tree)
    reconciler.handle_drop(DragHandle(CLIPBOARD, (), ["shipped"]), handle_at(doc, (0,)))
    assert doc.state.children[0].children[0].data.checked


def test_external_insertion_clears_sorted():
    tree = _make_board([_make_lane("L0", ["a"], sorted="title")])
    reconciler, (doc,) = _setup(tree)
    reconciler.handle_drop(DragHandle(CLIPBOARD, (), ["b"]), handle_at(doc, (0,)))
    assert doc.state.children[0].data.sorted is None


def test_external_empty_payload_is_noop(board):
    reconciler, (doc,) = _setup(board)
    outcome = reconciler.handle_drop(DragHandle(CLIPBOARD, (), ["", "  "]), handle_at(doc, (0,)))
    assert not outcome.committed
    assert doc.state is board
