"""Registry of open documents and the windows showing them."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable, Iterator

from tasklane.state import STATE, StateManager

if TYPE_CHECKING:
    from tasklane.drag import Scope
    from tasklane.writer import DebouncedWriter

logger = logging.getLogger(__name__)

DEFAULT_WINDOW = "main"


class Workspace:
    """Open documents keyed by document id.

    When a writer is attached, every commit on a document that has a file
    path is handed to it.
    """

    def __init__(self, writer: DebouncedWriter | None = None) -> None:
        self.writer = writer
        self._documents: dict[str, StateManager] = {}
        self._windows: dict[str, str] = {}
        self._unwatch: dict[str, Callable[[], Any]] = {}

    def __contains__(self, document_id: str) -> bool:
        return document_id in self._documents

    def __iter__(self) -> Iterator[StateManager]:
        return iter(self._documents.values())

    def __len__(self) -> int:
        return len(self._documents)

    def add(self, manager: StateManager, window_id: str = DEFAULT_WINDOW) -> StateManager:
        """Register a document. Re-adding the same id replaces the old holder."""
        if manager.document_id in self._documents:
            self.remove(manager.document_id)
        self._documents[manager.document_id] = manager
        self._windows[manager.document_id] = window_id
        self._unwatch[manager.document_id] = manager.watch(STATE, self._on_commit)
        logger.debug("opened %s in window %s", manager.document_id, window_id)
        return manager

    def remove(self, document_id: str) -> StateManager | None:
        manager = self._documents.pop(document_id, None)
        self._windows.pop(document_id, None)
        unwatch = self._unwatch.pop(document_id, None)
        if unwatch is not None:
            unwatch()
        return manager

    def get(self, document_id: str) -> StateManager | None:
        return self._documents.get(document_id)

    def window_of(self, document_id: str) -> str | None:
        return self._windows.get(document_id)

    def state_manager_for(self, scope: Scope) -> StateManager | None:
        """The state holder a gesture side belongs to, None for external sources."""
        if scope.external:
            return None
        return self._documents.get(scope.document_id)

    def get_side_array(self, document_id: str) -> tuple[bool, ...]:
        return self._require(document_id).get_side_array()

    def set_side_array(self, document_id: str, op: Callable[[tuple[bool, ...]], Any]) -> None:
        self._require(document_id).set_side_array(op)

    def _require(self, document_id: str) -> StateManager:
        manager = self._documents.get(document_id)
        if manager is None:
            raise KeyError(f"Document {document_id!r} is not open")
        return manager

    def _on_commit(self, manager: StateManager, key: str, old: Any, new: Any) -> None:
        if self.writer is not None and manager.path is not None:
            self.writer.schedule(manager)
