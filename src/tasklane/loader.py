"""Load board documents from disk."""

from __future__ import annotations

import logging
from pathlib import Path

from tasklane.model.entity import Board
from tasklane.parser import parse_board
from tasklane.settings import Settings
from tasklane.state import StateManager

logger = logging.getLogger(__name__)


def load_document(path: str | Path) -> tuple[Board, Settings]:
    """Read and parse a board file."""
    path = Path(path)
    text = path.read_text(encoding="utf-8")
    board, settings = parse_board(text)
    logger.debug("loaded %s: %d lanes", path, len(board.children))
    return board, settings


def open_document(path: str | Path, document_id: str | None = None) -> StateManager:
    """Load a board file into a state holder keyed by its resolved path."""
    path = Path(path).resolve()
    board, settings = load_document(path)
    return StateManager(document_id or str(path), board, settings, path=path)
