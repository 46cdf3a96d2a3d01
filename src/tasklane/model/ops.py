"""Pure tree mutations: insert, remove, patch and move.

Every function takes a snapshot and returns a new one, copying only the
entities on the path to the change. By default a failed operation logs and
returns the tree it was given; pass ``strict=True`` to get the exception
instead.

Board-level changes (lanes inserted, removed or moved) splice the board's
collapse flags in the same returned value, so the flags and the lane list
never disagree.
"""

from __future__ import annotations

import logging
from dataclasses import MISSING, fields, replace
from typing import Any, Callable, Iterable, Sequence

from tasklane.errors import ContractViolation, PathNotFound, TransformError
from tasklane.model.collapse import INSERT, MOVE, REMOVE, normalize, splice_in_lockstep
from tasklane.model.entity import Board, Entity, Lane
from tasklane.model.path import Path, are_siblings, as_path, is_ancestor, resolve

logger = logging.getLogger(__name__)

Transform = Callable[[Entity], "Entity | None"]


def _update_in(entity: Entity, path: Path, fn: Callable[[Entity], Entity]) -> Entity:
    """Rebuild the spine from entity down to path, replacing the target with fn(target)."""
    if not path:
        return fn(entity)
    index, rest = path[0], path[1:]
    child = entity.children[index]
    new_child = _update_in(child, rest, fn)
    if new_child is child:
        return entity
    children = entity.children[:index] + (new_child,) + entity.children[index + 1 :]
    return replace(entity, children=children)


def _with_collapsed(board: Board, flags: tuple[bool, ...]) -> Board:
    return replace(board, data=replace(board.data, collapsed=flags))


def _board_flags(tree: Entity) -> tuple[bool, ...]:
    return normalize(tree.data.collapsed, len(tree.children))


def _is_lane_level(tree: Entity, parent: Path) -> bool:
    return isinstance(tree, Board) and not parent


def _clear_sort(entity: Entity) -> Entity:
    if isinstance(entity, Lane) and entity.data.sorted is not None:
        return replace(entity, data=replace(entity.data, sorted=None))
    return entity


def _field_default(entity: Entity, name: str) -> Any:
    for f in fields(entity.data):
        if f.name != name:
            continue
        if f.default is not MISSING:
            return f.default
        if f.default_factory is not MISSING:
            return f.default_factory()
        raise ContractViolation(f"{entity.type} field {name!r} cannot be unset")
    raise ContractViolation(f"{entity.type} has no field {name!r}")


# --- strict implementations ---


def _insert(
    tree: Entity,
    path: Path,
    entities: tuple[Entity, ...],
    collapsed: Sequence[bool] | None = None,
    sync_collapse: bool = True,
) -> Entity:
    if not path:
        raise ContractViolation("Cannot insert at the root")
    parent_p, index = path[:-1], path[-1]
    parent = resolve(tree, parent_p)
    if parent is None:
        raise PathNotFound(parent_p)
    if index < 0 or index > len(parent.children):
        raise PathNotFound(path)
    for entity in entities:
        if not parent.accepts_type(entity.type):
            raise ContractViolation(f"{parent.type} does not accept {entity.type}")
    if not entities:
        return tree

    def splice(p: Entity) -> Entity:
        children = p.children[:index] + entities + p.children[index:]
        return _clear_sort(replace(p, children=children))

    new_tree = _update_in(tree, parent_p, splice)

    if sync_collapse and _is_lane_level(tree, parent_p):
        values = list(collapsed) if collapsed is not None else [False] * len(entities)
        if len(values) != len(entities):
            raise ContractViolation(f"Got {len(values)} collapse flags for {len(entities)} lanes")
        flags = splice_in_lockstep(_board_flags(tree), None, index, INSERT, values)
        new_tree = _with_collapsed(new_tree, flags)
    return new_tree


def _remove(
    tree: Entity,
    path: Path,
    replacement: Entity | None = None,
    sync_collapse: bool = True,
) -> Entity:
    if not path:
        raise ContractViolation("Cannot remove the root")
    if resolve(tree, path) is None:
        raise PathNotFound(path)
    parent_p, index = path[:-1], path[-1]
    parent = resolve(tree, parent_p)
    if replacement is not None and not parent.accepts_type(replacement.type):
        raise ContractViolation(f"{parent.type} does not accept {replacement.type}")

    def cut(p: Entity) -> Entity:
        keep = (replacement,) if replacement is not None else ()
        return replace(p, children=p.children[:index] + keep + p.children[index + 1 :])

    new_tree = _update_in(tree, parent_p, cut)

    if sync_collapse and replacement is None and _is_lane_level(tree, parent_p):
        flags = splice_in_lockstep(_board_flags(tree), index, None, REMOVE)
        new_tree = _with_collapsed(new_tree, flags)
    return new_tree


def _patch(
    tree: Entity,
    path: Path,
    data: dict[str, Any] | None = None,
    unset: Iterable[str] = (),
    children: Iterable[Entity] | None = None,
) -> Entity:
    entity = resolve(tree, path)
    if entity is None:
        raise PathNotFound(path)

    changes = dict(data or {})
    names = {f.name for f in fields(entity.data)}
    for name in changes:
        if name not in names:
            raise ContractViolation(f"{entity.type} has no field {name!r}")
    for name in unset:
        changes[name] = _field_default(entity, name)

    new_children = entity.children
    if children is not None:
        new_children = tuple(children)
        for child in new_children:
            if not entity.accepts_type(child.type):
                raise ContractViolation(f"{entity.type} does not accept {child.type}")

    if isinstance(entity, Board):
        if "collapsed" in changes:
            flags = tuple(bool(v) for v in changes["collapsed"])
            if len(flags) != len(new_children):
                raise ContractViolation(f"Collapse array has {len(flags)} flags for {len(new_children)} lanes")
            changes["collapsed"] = flags
        elif children is not None:
            changes["collapsed"] = normalize(entity.data.collapsed, len(new_children))

    new_data = replace(entity.data, **changes) if changes else entity.data
    return _update_in(tree, path, lambda e: replace(e, data=new_data, children=new_children))


def _move(
    tree: Entity,
    from_path: Path,
    to_path: Path,
    transform_moved: Transform | None = None,
    transform_replacement: Transform | None = None,
) -> Entity:
    entity = resolve(tree, from_path)
    if entity is None:
        raise PathNotFound(from_path)
    if not from_path or not to_path:
        raise ContractViolation("Cannot move to or from the root")
    if is_ancestor(from_path, to_path):
        raise ContractViolation("Cannot move an entity into itself")

    try:
        replacement = transform_replacement(entity) if transform_replacement else None
        moved = transform_moved(entity) if transform_moved else entity
    except Exception as exc:
        raise TransformError(f"Transform failed for {entity.id}: {exc}") from exc
    if moved is None:
        raise ContractViolation(f"Transform dropped {entity.id}")

    if from_path == to_path and replacement is None and moved == entity:
        return tree

    from_index, to_index = from_path[-1], to_path[-1]
    target = to_index
    # Removal shifts later siblings left; a replacement keeps them in place.
    if replacement is None and are_siblings(from_path, to_path) and from_index < to_index:
        target -= 1
    corrected = (*to_path[:-1], target)

    removed = _remove(tree, from_path, replacement, sync_collapse=False)
    new_tree = _insert(removed, corrected, (moved,), sync_collapse=False)

    if _is_lane_level(tree, from_path[:-1]):
        flags = _board_flags(tree)
        if replacement is None:
            flags = splice_in_lockstep(flags, from_index, target, MOVE)
        else:
            flags = splice_in_lockstep(flags, None, target, INSERT, [flags[from_index]])
        new_tree = _with_collapsed(new_tree, flags)
    return new_tree


# --- public, lenient by default ---


def _attempt(name: str, tree: Entity, strict: bool, fn: Callable[[], Entity]) -> Entity:
    try:
        return fn()
    except PathNotFound as exc:
        if strict:
            raise
        logger.debug("%s skipped: %s", name, exc)
    except ContractViolation as exc:
        if strict:
            raise
        logger.warning("%s rejected: %s", name, exc)
    except TransformError as exc:
        if strict:
            raise
        logger.warning("%s aborted: %s", name, exc)
    return tree


def insert(
    tree: Entity,
    path: Sequence[int],
    entities: Iterable[Entity],
    collapsed: Sequence[bool] | None = None,
    strict: bool = False,
) -> Entity:
    """Insert entities at path (parent path + index).

    Children at and after the index shift right. Inserting lanes into a board
    also inserts their collapse flags (``collapsed``, default all False).
    Inserting items into a sorted lane clears its ``sorted`` marker.
    """
    return _attempt("insert", tree, strict, lambda: _insert(tree, as_path(path), tuple(entities), collapsed))


def remove(
    tree: Entity,
    path: Sequence[int],
    replacement: Entity | None = None,
    strict: bool = False,
) -> Entity:
    """Delete the entity at path, or swap in replacement at the same index."""
    return _attempt("remove", tree, strict, lambda: _remove(tree, as_path(path), replacement))


def patch(
    tree: Entity,
    path: Sequence[int],
    data: dict[str, Any] | None = None,
    unset: Iterable[str] = (),
    children: Iterable[Entity] | None = None,
    strict: bool = False,
) -> Entity:
    """Merge-patch an entity: set data fields, reset fields to their default,
    or replace its children wholesale."""
    return _attempt("patch", tree, strict, lambda: _patch(tree, as_path(path), data, unset, children))


def move(
    tree: Entity,
    from_path: Sequence[int],
    to_path: Sequence[int],
    transform_moved: Transform | None = None,
    transform_replacement: Transform | None = None,
    strict: bool = False,
) -> Entity:
    """Move the entity at from_path so it lands at to_path.

    ``to_path`` is read against the tree before the move; when both paths
    share a parent and the source comes first, the target index is shifted
    down by one to account for the removal. ``transform_replacement`` may
    return an entity to leave behind at the source instead of deleting it.
    If either transform raises, nothing changes.
    """
    return _attempt(
        "move",
        tree,
        strict,
        lambda: _move(tree, as_path(from_path), as_path(to_path), transform_moved, transform_replacement),
    )


def clear_sort_override(tree: Entity, lane_path: Sequence[int]) -> Entity:
    """Drop a lane's manual sort marker, if it has one."""
    lane = resolve(tree, lane_path)
    if not isinstance(lane, Lane) or lane.data.sorted is None:
        return tree
    return patch(tree, lane_path, unset=("sorted",))
