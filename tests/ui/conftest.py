"""Fixtures for UI tests."""

import pytest

from tasklane.state import StateManager

from ..conftest import _make_board, _make_lane


@pytest.fixture
def manager():
    """Todo: [a, b], Doing: [c], Done (marks complete): []."""
    board = _make_board(
        [
            _make_lane("todo", ["a", "b"], title="Todo"),
            _make_lane("doing", ["c"], title="Doing"),
            _make_lane("done", title="Done", complete=True),
        ]
    )
    return StateManager("doc", board)


def titles(manager, lane):
    """Item titles of one lane in the manager's current snapshot."""
    return [item.data.title_raw for item in manager.state.children[lane].children]
