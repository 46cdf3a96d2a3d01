"""Shared fixtures for CLI tests."""

import pytest

BOARD = """\
---
kanban-plugin: board
---

## Backlog

- [ ] First
- [ ] Second
- [ ] Third

## Doing

## Done

**Complete**
"""


@pytest.fixture
def board_file(tmp_path):
    """A board with three lanes: Backlog (3 items), Doing (empty), Done (marks complete)."""
    path = tmp_path / "board.md"
    path.write_text(BOARD)
    return path


@pytest.fixture
def other_file(tmp_path):
    """A second board with one lane holding one item."""
    path = tmp_path / "other.md"
    path.write_text("## Inbox\n\n- [ ] Existing\n")
    return path
