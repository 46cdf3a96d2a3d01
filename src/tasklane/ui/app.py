"""Main Textual application for tasklane."""

from __future__ import annotations

import logging
from pathlib import Path

from textual.app import App

from tasklane.drag import DragHandle, DragReconciler, DropOutcome, classify
from tasklane.errors import CrossDocumentInconsistency
from tasklane.loader import open_document
from tasklane.state import StateManager
from tasklane.ui.board import BoardScreen
from tasklane.workspace import DEFAULT_WINDOW, Workspace
from tasklane.writer import DebouncedWriter

logger = logging.getLogger(__name__)


class TasklaneApp(App):
    """Markdown kanban board TUI."""

    CSS = """
    Tooltip {
        padding: 0 1;
        margin: 0;
    }
    """

    TITLE = "tasklane"
    BINDINGS = [("ctrl+q", "quit", "Quit")]

    def __init__(
        self,
        paths: list[Path] | None = None,
        managers: list[StateManager] | None = None,
        window_id: str = DEFAULT_WINDOW,
    ):
        super().__init__()
        self.paths = list(paths or [])
        self.window_id = window_id
        self.writer = DebouncedWriter()
        self.workspace = Workspace(self.writer)
        self.reconciler = DragReconciler(self.workspace)
        for manager in managers or []:
            self.workspace.add(manager, window_id)

    def on_mount(self) -> None:
        for path in self.paths:
            try:
                self.workspace.add(open_document(path), self.window_id)
            except OSError as e:
                logger.warning("cannot open %s: %s", path, e)
                self.notify(f"Cannot open {path}: {e.strerror or e}", severity="error")
        self.push_screen(BoardScreen(list(self.workspace), self.window_id))

    def reconcile(self, drag: DragHandle, drop: DragHandle) -> DropOutcome:
        """Apply one finished gesture."""
        try:
            return self.reconciler.handle_drop(drag, drop)
        except CrossDocumentInconsistency as e:
            self.notify(str(e), title="Documents out of step", severity="error", timeout=30)
            return DropOutcome(classify(drag, drop), False)

    async def action_quit(self) -> None:
        """Write pending changes and quit."""
        await self.writer.flush()
        self.exit()
