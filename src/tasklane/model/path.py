"""Index paths into a board tree.

A path is a tuple of child indices read from the root: ``()`` is the board,
``(lane,)`` a lane and ``(lane, item)`` an item. Paths are only meaningful
against the snapshot they were taken from.
"""

from __future__ import annotations

from typing import Sequence

from tasklane.model.entity import Entity

Path = tuple[int, ...]

APPEND = "append"
PREPEND = "prepend"


def as_path(path: Sequence[int]) -> Path:
    return tuple(int(i) for i in path)


def resolve(tree: Entity, path: Sequence[int]) -> Entity | None:
    """Return the entity at path, or None if any step is out of range."""
    entity = tree
    for index in path:
        if index < 0 or index >= len(entity.children):
            return None
        entity = entity.children[index]
    return entity


lookup = resolve


def parent_path(path: Sequence[int]) -> Path:
    return as_path(path[:-1])


def resolve_parent(tree: Entity, path: Sequence[int]) -> Entity | None:
    """Return the parent of the entity addressed by path (None for the root)."""
    if not path:
        return None
    return resolve(tree, path[:-1])


def are_siblings(a: Sequence[int], b: Sequence[int]) -> bool:
    """Whether two non-root paths share the same parent."""
    return bool(a) and bool(b) and len(a) == len(b) and tuple(a[:-1]) == tuple(b[:-1])


def is_ancestor(ancestor: Sequence[int], path: Sequence[int]) -> bool:
    """Whether ancestor is a proper prefix of path."""
    return len(ancestor) < len(path) and tuple(path[: len(ancestor)]) == tuple(ancestor)


def find_path(tree: Entity, entity_id: str) -> Path | None:
    """Depth-first search for an entity id."""
    if tree.id == entity_id:
        return ()
    for index, child in enumerate(tree.children):
        sub = find_path(child, entity_id)
        if sub is not None:
            return (index, *sub)
    return None


def drop_path_into(container_path: Sequence[int], container: Entity, method: str = APPEND) -> Path:
    """Extend a container's path with a head or tail insertion index."""
    index = 0 if method == PREPEND else len(container.children)
    return (*as_path(container_path), index)
