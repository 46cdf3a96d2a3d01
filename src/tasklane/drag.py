"""Turn one completed drag gesture into committed document state.

A gesture arrives as a ``(drag, drop)`` pair of handles. The reconciler works
out which of four topologies it is, resolves both paths against the current
snapshots, runs the completion hook once for items, and commits the result to
one document (same list, same document, external source) or two (cross
document).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Iterable

from tasklane.completion import CompletionHook, CompletionResult, CompletionTransform
from tasklane.errors import ContractViolation, CrossDocumentInconsistency, PathNotFound, TransformError
from tasklane.ids import fresh_id
from tasklane.model.entity import ITEM, LANE, Board, Entity, Item, count, walk
from tasklane.model.ops import insert, move, remove
from tasklane.model.path import Path, as_path, drop_path_into, find_path, resolve, resolve_parent
from tasklane.state import StateManager
from tasklane.workspace import DEFAULT_WINDOW, Workspace

logger = logging.getLogger(__name__)


class Topology(Enum):
    SAME_LIST = "same-list"
    SAME_DOCUMENT = "same-document"
    CROSS_DOCUMENT = "cross-document"
    EXTERNAL = "external"


@dataclass(frozen=True)
class Scope:
    """Where one side of a gesture comes from."""

    document_id: str
    window_id: str = DEFAULT_WINDOW
    external: bool = False


@dataclass(frozen=True)
class DragHandle:
    """One side of a gesture.

    ``data`` is the entity under the pointer when the gesture was recorded,
    or for an external source the text payload (a string or list of
    strings). ``path`` is only trusted against the current snapshot at drop
    time.
    """

    scope: Scope
    path: Path = ()
    data: Any = None

    def get_path(self) -> Path:
        return as_path(self.path)

    def get_data(self) -> Any:
        return self.data

    @property
    def entity_type(self) -> str | None:
        if self.scope.external:
            return ITEM
        if isinstance(self.data, Entity):
            return self.data.type
        return None


@dataclass(frozen=True)
class DropOutcome:
    topology: Topology
    committed: bool


def is_container_drop(drag: DragHandle, drop: DragHandle) -> bool:
    """Whether the drop landed on an entity that holds the dragged kind."""
    drag_type = drag.entity_type
    return drag_type is not None and isinstance(drop.data, Entity) and drop.data.accepts_type(drag_type)


def classify(drag: DragHandle, drop: DragHandle) -> Topology:
    if drag.scope.external:
        return Topology.EXTERNAL
    if drag.scope.document_id != drop.scope.document_id:
        return Topology.CROSS_DOCUMENT
    drag_path, drop_path = drag.get_path(), drop.get_path()
    drop_parent = drop_path if is_container_drop(drag, drop) else drop_path[:-1]
    if drag_path and drag_path[:-1] == drop_parent:
        return Topology.SAME_LIST
    return Topology.SAME_DOCUMENT


def target_path(board: Board, entity_type: str, drop_path: Path, method: str) -> Path:
    """Resolve where a dragged entity lands against the destination snapshot.

    Dropping onto a container extends the path with a head or tail index;
    otherwise the drop path is the insertion point, which may sit one past
    the last child.
    """
    target = resolve(board, drop_path)
    if target is not None and target.accepts_type(entity_type):
        return drop_path_into(drop_path, target, method)
    if target is None:
        parent = resolve_parent(board, drop_path)
        if parent is None or drop_path[-1] != len(parent.children):
            raise PathNotFound(drop_path)
    return drop_path


class DragReconciler:
    """Entry point for completed gestures.

    ``completion`` overrides the per-document default hook, which is a
    ``CompletionTransform`` built from the destination document's settings.
    """

    def __init__(self, workspace: Workspace, completion: CompletionHook | None = None) -> None:
        self.workspace = workspace
        self.completion = completion

    def handle_drop(self, drag: DragHandle, drop: DragHandle) -> DropOutcome:
        topology = classify(drag, drop)
        logger.debug("drop %s -> %s (%s)", list(drag.get_path()), list(drop.get_path()), topology.value)

        destination = self.workspace.state_manager_for(drop.scope)
        if destination is None:
            logger.debug("drop target %s is not an open document", drop.scope.document_id)
            return DropOutcome(topology, False)

        match topology:
            case Topology.EXTERNAL:
                committed = self._guard(destination, lambda: self._insert_external(drag, drop, destination))
            case Topology.CROSS_DOCUMENT:
                source = self.workspace.state_manager_for(drag.scope)
                if source is None:
                    logger.debug("drag source %s is not an open document", drag.scope.document_id)
                    return DropOutcome(topology, False)
                committed = self._guard(source, lambda: self._move_across(drag, drop, source, destination))
            case _:
                committed = self._guard(destination, lambda: self._move_within(drag, drop, destination))
        return DropOutcome(topology, committed)

    def _guard(self, owner: StateManager, fn) -> bool:
        try:
            return fn()
        except PathNotFound as exc:
            logger.debug("drop ignored: %s", exc)
        except (ContractViolation, TransformError) as exc:
            logger.warning("drop on %s failed: %s", owner.document_id, exc)
            owner.set_error(exc)
        return False

    def _hook_for(self, manager: StateManager) -> CompletionHook:
        if self.completion is not None:
            return self.completion
        return CompletionTransform(manager.settings)

    def _complete(self, hook: CompletionHook, source_parent, destination_parent, item: Item) -> CompletionResult:
        try:
            result = hook(source_parent, destination_parent, item)
        except Exception as exc:
            raise TransformError(f"Completion failed for {item.id}: {exc}") from exc
        if not isinstance(result, CompletionResult) or not isinstance(result.next, Item):
            raise ContractViolation(f"Completion hook returned {result!r}")
        return result

    def _move_within(self, drag: DragHandle, drop: DragHandle, manager: StateManager) -> bool:
        hook = self._hook_for(manager)
        from_path = drag.get_path()

        def updater(board: Board) -> Board:
            entity = resolve(board, from_path)
            if entity is None:
                raise PathNotFound(from_path)
            to_path = target_path(board, entity.type, drop.get_path(), manager.settings.insertion_method)
            if entity.type != ITEM:
                return move(board, from_path, to_path, strict=True)

            result = self._complete(hook, resolve_parent(board, from_path), resolve(board, to_path[:-1]), entity)
            return move(
                board,
                from_path,
                to_path,
                transform_moved=lambda _: result.next,
                transform_replacement=lambda _: result.replacement,
                strict=True,
            )

        old = manager.state
        return manager.set_state(updater) is not old

    def _move_across(self, drag: DragHandle, drop: DragHandle, source: StateManager, destination: StateManager) -> bool:
        from_path = drag.get_path()
        source_board, destination_board = source.state, destination.state

        entity = resolve(source_board, from_path)
        if entity is None or not from_path:
            raise PathNotFound(from_path)
        to_path = target_path(destination_board, entity.type, drop.get_path(), destination.settings.insertion_method)

        moved, replacement = entity, None
        if entity.type == ITEM:
            result = self._complete(
                self._hook_for(destination),
                resolve_parent(source_board, from_path),
                resolve(destination_board, to_path[:-1]),
                entity,
            )
            moved, replacement = result.next, result.replacement

        taken = {e.id for e in walk(destination_board)}
        if moved.id in taken:
            moved = replace(moved, id=fresh_id(taken))

        collapsed = None
        if entity.type == LANE:
            collapsed = [source.get_side_array()[from_path[-1]]]

        # Stage both sides before committing either.
        staged_destination = insert(destination_board, to_path, [moved], collapsed=collapsed, strict=True)
        staged_source = remove(source_board, from_path, replacement, strict=True)

        destination.set_state(lambda _: staged_destination)
        try:
            source.set_state(lambda _: staged_source)
        except Exception as exc:
            self._inconsistent(source, destination, f"source commit failed after destination commit: {exc}")

        expected = count(source_board) + count(destination_board) + (1 if replacement is not None else 0)
        actual = count(source.state) + count(destination.state)
        if actual != expected:
            self._inconsistent(source, destination, f"expected {expected} entities, found {actual}")
        if find_path(destination.state, moved.id) is None or find_path(source.state, entity.id) is not None:
            self._inconsistent(source, destination, f"{entity.id} is not in exactly one document")

        logger.info("moved %s %s from %s to %s", entity.type, entity.id, source.document_id, destination.document_id)
        return True

    def _inconsistent(self, source: StateManager, destination: StateManager, detail: str) -> None:
        exc = CrossDocumentInconsistency(f"{source.document_id} -> {destination.document_id}: {detail}")
        logger.critical("%s", exc)
        source.set_error(exc)
        destination.set_error(exc)
        raise exc

    def _insert_external(self, drag: DragHandle, drop: DragHandle, manager: StateManager) -> bool:
        texts = [t for t in _payload_lines(drag.get_data()) if t.strip()]
        if not texts:
            return False
        hook = self._hook_for(manager)

        def updater(board: Board) -> Board:
            to_path = target_path(board, ITEM, drop.get_path(), manager.settings.insertion_method)
            destination_parent = resolve(board, to_path[:-1])
            taken = {e.id for e in walk(board)}
            items = []
            for text in texts:
                item = manager.new_item(text)
                if item.id in taken:
                    item = replace(item, id=fresh_id(taken))
                taken.add(item.id)
                items.append(self._complete(hook, None, destination_parent, item).next)
            return insert(board, to_path, items, strict=True)

        old = manager.state
        return manager.set_state(updater) is not old


def _payload_lines(payload: Any) -> Iterable[str]:
    if payload is None:
        return []
    if isinstance(payload, str):
        return payload.splitlines()
    return [str(p) for p in payload]


def handle_at(manager: StateManager, path: Iterable[int], window_id: str = DEFAULT_WINDOW) -> DragHandle:
    """A gesture side addressing path in manager's current snapshot."""
    path = as_path(tuple(path))
    return DragHandle(Scope(manager.document_id, window_id), path, resolve(manager.state, path))
