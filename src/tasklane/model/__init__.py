"""Immutable board tree and its path-addressed mutations."""

from tasklane.model.collapse import normalize, splice_in_lockstep
from tasklane.model.entity import (
    BOARD,
    ITEM,
    LANE,
    Board,
    BoardData,
    Entity,
    Item,
    ItemData,
    Lane,
    LaneData,
    accepts,
    count,
    walk,
)
from tasklane.model.ops import clear_sort_override, insert, move, patch, remove
from tasklane.model.path import Path, drop_path_into, find_path, lookup, resolve, resolve_parent

__all__ = [
    "BOARD",
    "Board",
    "BoardData",
    "Entity",
    "ITEM",
    "Item",
    "ItemData",
    "LANE",
    "Lane",
    "LaneData",
    "Path",
    "accepts",
    "clear_sort_override",
    "count",
    "drop_path_into",
    "find_path",
    "insert",
    "lookup",
    "move",
    "normalize",
    "patch",
    "remove",
    "resolve",
    "resolve_parent",
    "splice_in_lockstep",
    "walk",
]
