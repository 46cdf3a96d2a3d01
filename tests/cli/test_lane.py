"""Tests for 'tasklane lane' commands."""

import json
from argparse import Namespace

import pytest

from tasklane.cli.lane import lane_collapse, lane_list, lane_move
from tasklane.loader import load_document


def _lane_titles(path):
    board, _ = load_document(path)
    return [lane.data.title for lane in board.children]


def test_lane_list(board_file, capsys):
    args = Namespace(file=str(board_file), json=False)
    assert lane_list(args) == 0

    out = capsys.readouterr().out
    assert "Backlog" in out
    assert "3 items" in out
    assert "(complete)" in out


def test_lane_list_json(board_file, capsys):
    args = Namespace(file=str(board_file), json=True)
    assert lane_list(args) == 0

    data = json.loads(capsys.readouterr().out)
    assert [lane["title"] for lane in data] == ["Backlog", "Doing", "Done"]
    assert data[0] == {"position": 1, "title": "Backlog", "items": 3, "collapsed": False, "complete": False}
    assert data[2]["complete"] is True


def test_lane_list_missing_file(tmp_path, capsys):
    args = Namespace(file=str(tmp_path / "nope.md"), json=False)
    with pytest.raises(SystemExit) as exc:
        lane_list(args)
    assert exc.value.code == 1
    assert "cannot open" in capsys.readouterr().err


def test_lane_move_forward(board_file, capsys):
    args = Namespace(file=str(board_file), lane=1, position=3, json=False)
    assert lane_move(args) == 0

    assert 'Moved lane "Backlog" to position 3' in capsys.readouterr().out
    assert _lane_titles(board_file) == ["Doing", "Done", "Backlog"]


def test_lane_move_backward_json(board_file, capsys):
    args = Namespace(file=str(board_file), lane=3, position=1, json=True)
    assert lane_move(args) == 0

    data = json.loads(capsys.readouterr().out)
    assert data == {"title": "Done", "position": 1, "moved": True}
    assert _lane_titles(board_file) == ["Done", "Backlog", "Doing"]


def test_lane_move_keeps_items_and_marker(board_file):
    lane_move(Namespace(file=str(board_file), lane=1, position=2, json=False))
    board, _ = load_document(board_file)
    assert len(board.children[1].children) == 3
    assert board.children[2].data.should_mark_items_complete


def test_lane_move_same_position(board_file, capsys):
    before = board_file.read_text()
    args = Namespace(file=str(board_file), lane=2, position=2, json=False)
    assert lane_move(args) == 0
    assert "Nothing to move" in capsys.readouterr().out
    assert board_file.read_text() == before


def test_lane_move_not_found(board_file, capsys):
    args = Namespace(file=str(board_file), lane=9, position=1, json=False)
    with pytest.raises(SystemExit) as exc:
        lane_move(args)
    assert exc.value.code == 1
    err = capsys.readouterr().err
    assert "Lane 9 not found" in err
    assert "Backlog" in err


def test_lane_move_not_found_json(board_file, capsys):
    args = Namespace(file=str(board_file), lane=9, position=1, json=True)
    with pytest.raises(SystemExit):
        lane_move(args)
    assert "Lane 9 not found" in json.loads(capsys.readouterr().err)["error"]


def test_lane_collapse_toggles(board_file, capsys):
    args = Namespace(file=str(board_file), lane=2, json=True)
    assert lane_collapse(args) == 0
    assert json.loads(capsys.readouterr().out) == {"title": "Doing", "position": 2, "collapsed": True}

    board, _ = load_document(board_file)
    assert board.data.collapsed == (False, True, False)
    assert "list-collapse: [false, true, false]" in board_file.read_text()

    assert lane_collapse(args) == 0
    assert json.loads(capsys.readouterr().out)["collapsed"] is False
    assert "list-collapse" not in board_file.read_text()


def test_lane_collapse_follows_move(board_file):
    lane_collapse(Namespace(file=str(board_file), lane=1, json=False))
    lane_move(Namespace(file=str(board_file), lane=1, position=3, json=False))
    board, _ = load_document(board_file)
    assert board.data.collapsed == (False, False, True)
