"""Per-document state holder with atomic commits and change notification."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable

from tasklane.errors import ContractViolation
from tasklane.ids import fresh_id
from tasklane.model.entity import Board, Item, ItemData, walk
from tasklane.model.ops import patch
from tasklane.settings import Settings

logger = logging.getLogger(__name__)

Callback = Callable[["StateManager", str, Any, Any], None]
Updater = Callable[[Board], Board]

STATE = "state"
ERROR = "error"


class StateManager:
    """Holds the current Board snapshot of one open document.

    ``set_state`` runs an updater on the current snapshot and swaps the result
    in only if the updater returns normally. Watchers registered on
    ``"state"`` and ``"error"`` are told about every change, in the same
    ``(source, key, old, new)`` shape throughout.
    """

    def __init__(
        self,
        document_id: str,
        board: Board,
        settings: Settings | None = None,
        path: Path | None = None,
    ) -> None:
        self.document_id = document_id
        self.settings = settings or Settings()
        self.path = path
        self._state = board
        self._error: Exception | None = None
        self._watchers: dict[str, list[Callback]] = {}

    def __repr__(self) -> str:
        return f"StateManager({self.document_id!r})"

    @property
    def state(self) -> Board:
        return self._state

    @property
    def error(self) -> Exception | None:
        return self._error

    def set_state(self, updater: Updater) -> Board:
        """Commit updater(current).

        If the updater raises, the exception propagates and nothing changes.
        Once the new snapshot is swapped in the commit stands; a failing
        watcher is logged and the remaining watchers still run.
        """
        old = self._state
        new = updater(old)
        if not isinstance(new, Board):
            raise ContractViolation(f"Updater returned {type(new).__name__}, not a Board")
        if new is old:
            return old
        self._state = new
        logger.debug("%s: committed new state", self.document_id)
        self._emit(STATE, old, new)
        return new

    def set_error(self, error: Exception | None) -> None:
        """Record (or clear with None) the document's last error."""
        old = self._error
        self._error = error
        if error is not None:
            logger.info("%s: %s", self.document_id, error)
        if old is not error:
            self._emit(ERROR, old, error)

    def watch(self, key: str, callback: Callback) -> Callable[[], None]:
        """Watch "state" or "error". Returns an unwatch callable."""
        self._watchers.setdefault(key, []).append(callback)

        def unwatch() -> None:
            callbacks = self._watchers.get(key, [])
            if callback in callbacks:
                callbacks.remove(callback)

        return unwatch

    def _emit(self, key: str, old: Any, new: Any) -> None:
        for cb in list(self._watchers.get(key, ())):
            try:
                cb(self, key, old, new)
            except Exception:
                logger.exception("%s: %s watcher failed", self.document_id, key)

    def get_setting(self, key: str, default: Any = None) -> Any:
        return self.settings.get(key, default)

    def get_side_array(self) -> tuple[bool, ...]:
        """The collapse flags, one per lane."""
        board = self._state
        return tuple(board.data.collapsed) + (False,) * (len(board.children) - len(board.data.collapsed))

    def set_side_array(self, op: Callable[[tuple[bool, ...]], Any]) -> Board:
        """Replace the collapse flags with op(current); the length must not change."""

        def updater(board: Board) -> Board:
            flags = tuple(bool(v) for v in op(self.get_side_array()))
            if len(flags) != len(board.children):
                raise ContractViolation(f"Collapse array has {len(flags)} flags for {len(board.children)} lanes")
            return patch(board, (), data={"collapsed": flags}, strict=True)

        return self.set_state(updater)

    def new_item(self, title: str, check_char: str = " ") -> Item:
        """Materialize an Item from raw text, with an id unused in this document."""
        existing = {e.id for e in walk(self._state)}
        checked = check_char != " "
        return Item(
            id=fresh_id(existing),
            data=ItemData(title_raw=title.strip(), checked=checked, check_char=check_char),
        )
