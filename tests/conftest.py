"""Shared test helpers: small boards built by hand."""

import pytest

from tasklane.model.entity import Board, BoardData, Item, ItemData, Lane, LaneData


def _make_item(item_id, title=None, checked=False, check_char=None):
    """Helper to build an Item."""
    if check_char is None:
        check_char = "x" if checked else " "
    return Item(id=item_id, data=ItemData(title_raw=title or item_id, checked=checked, check_char=check_char))


def _make_lane(lane_id, items=(), title=None, complete=False, sorted=None):
    """Helper to build a Lane from items or item ids."""
    children = tuple(_make_item(i) if isinstance(i, str) else i for i in items)
    return Lane(
        id=lane_id,
        data=LaneData(title=title or lane_id, should_mark_items_complete=complete, sorted=sorted),
        children=children,
    )


def _make_board(lanes=(), collapsed=None, board_id="board"):
    """Helper to build a Board; collapse flags default to all False."""
    lanes = tuple(lanes)
    if collapsed is None:
        collapsed = (False,) * len(lanes)
    return Board(id=board_id, data=BoardData(title="Test", collapsed=tuple(collapsed)), children=lanes)


def ids(entity):
    """Child ids of an entity, in order."""
    return [c.id for c in entity.children]


@pytest.fixture
def board():
    """L0: [I0, I1], L1: [I2]; L1 collapsed."""
    return _make_board(
        [_make_lane("L0", ["I0", "I1"]), _make_lane("L1", ["I2"])],
        collapsed=(False, True),
    )
