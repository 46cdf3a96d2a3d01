"""Write boards back to disk."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import os
import tempfile
from pathlib import Path

from tasklane.model.entity import Board
from tasklane.parser import serialize_board
from tasklane.settings import Settings
from tasklane.state import StateManager

logger = logging.getLogger(__name__)

DEFAULT_DELAY = 0.5


def save_document(path: str | Path, board: Board, settings: Settings | None = None) -> Path:
    """Serialize board to path, replacing the file in one step."""
    path = Path(path)
    text = serialize_board(board, settings)
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        os.replace(tmp, path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise
    logger.debug("wrote %s", path)
    return path


class DebouncedWriter:
    """Coalesce bursts of commits into one write per document.

    ``schedule`` restarts the document's timer; when it fires, the latest
    snapshot is written off the event loop with ``asyncio.to_thread``.
    Failures are logged and recorded on the document, never raised.
    """

    def __init__(self, delay: float = DEFAULT_DELAY) -> None:
        self.delay = delay
        self._pending: dict[str, tuple[StateManager, asyncio.Task]] = {}

    @property
    def pending(self) -> bool:
        return any(not task.done() for _, task in self._pending.values())

    def schedule(self, manager: StateManager) -> None:
        entry = self._pending.get(manager.document_id)
        if entry is not None and not entry[1].done():
            entry[1].cancel()
        task = asyncio.create_task(self._write_later(manager))
        self._pending[manager.document_id] = (manager, task)

    async def _write_later(self, manager: StateManager) -> None:
        await asyncio.sleep(self.delay)
        await self._write(manager)

    async def _write(self, manager: StateManager) -> None:
        if manager.path is None:
            return
        try:
            await asyncio.to_thread(save_document, manager.path, manager.state, manager.settings)
        except Exception as exc:
            logger.exception("saving %s failed", manager.path)
            manager.set_error(exc)

    async def flush(self) -> None:
        """Write everything still waiting, now."""
        waiting = list(self._pending.values())
        self._pending.clear()
        for manager, task in waiting:
            if task.done():
                continue
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
            await self._write(manager)
