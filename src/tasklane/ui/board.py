"""Board views and the screen that stacks them."""

from __future__ import annotations

from rich.text import Text
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.screen import Screen
from textual.widgets import Footer, Static

from tasklane.drag import DragHandle, Scope
from tasklane.model.path import resolve
from tasklane.state import ERROR, STATE, StateManager
from tasklane.ui.drag import DropTarget, LanePlaceholder
from tasklane.ui.item import ItemWidget
from tasklane.ui.lane import LaneWidget
from tasklane.ui.watcher import StateWatcherMixin


class BoardEnd(Static):
    """Empty tail of the lane row, the insert point for drops after the last lane."""

    DEFAULT_CSS = """
    BoardEnd {
        width: 4;
    }
    """


class BoardView(StateWatcherMixin, DropTarget, Vertical):
    """All lanes of one open document."""

    DEFAULT_CSS = """
    BoardView {
        height: auto;
        border-bottom: tall $surface-lighten-1;
    }
    BoardView > #board-title {
        padding: 0 1;
        background: $boost;
    }
    BoardView > .lanes {
        height: auto;
    }
    LanePlaceholder {
        width: 2;
        background: $primary-darken-2;
    }
    """

    def __init__(self, manager: StateManager, window_id: str):
        self._init_watcher()
        super().__init__()
        self.manager = manager
        self.scope = Scope(manager.document_id, window_id)
        self._lane_placeholder: LanePlaceholder | None = None

    def compose(self) -> ComposeResult:
        board = self.manager.state
        title = board.data.title or (self.manager.path.name if self.manager.path else self.manager.document_id)
        yield Static(Text(title, style="bold"), id="board-title")
        flags = self.manager.get_side_array()
        with Horizontal(classes="lanes"):
            for index, lane in enumerate(board.children):
                yield LaneWidget(self.manager, self.scope, index, lane, flags[index])
            yield BoardEnd()

    def on_mount(self) -> None:
        self.state_watch(self.manager, STATE, self._on_state_changed)
        self.state_watch(self.manager, ERROR, self._on_error)

    def _on_state_changed(self, manager, key, old, new) -> None:
        self.refresh(recompose=True)

    def _on_error(self, manager, key, old, new) -> None:
        if new is not None:
            self.notify(str(new), title="Move failed", severity="error")

    # -- DropTarget: board accepting lane drops --

    def drag_over(self, draggable, x: int, y: int) -> bool:
        if not isinstance(draggable, LaneWidget):
            return False
        self._ensure_lane_placeholder(self._insert_before(draggable, x))
        return True

    def drag_away(self, draggable) -> None:
        if self._lane_placeholder is not None and self._lane_placeholder.parent is not None:
            self._lane_placeholder.remove()
        self._lane_placeholder = None

    def drop_handle(self, draggable, x: int, y: int) -> DragHandle | None:
        if not isinstance(draggable, LaneWidget):
            return None
        insert_before = self._insert_before(draggable, x)
        position = 0
        for child in self._lanes.children:
            if child is insert_before:
                break
            if isinstance(child, LaneWidget) and child is not draggable:
                position += 1
        if draggable.scope.document_id == self.scope.document_id and draggable.index < position:
            position += 1
        return DragHandle(self.scope, (position,), resolve(self.manager.state, (position,)))

    @property
    def _lanes(self) -> Horizontal:
        return self.query_one(".lanes", Horizontal)

    def _insert_before(self, draggable, screen_x: int) -> Static:
        for child in self._lanes.children:
            if isinstance(child, LaneWidget) and child is not draggable:
                if screen_x < child.region.x + child.region.width // 2:
                    return child
        return self._lanes.query_one(BoardEnd)

    def _ensure_lane_placeholder(self, insert_before: Static) -> None:
        lanes = self._lanes
        if self._lane_placeholder is None or self._lane_placeholder.parent is not lanes:
            self.drag_away(None)
            self._lane_placeholder = LanePlaceholder()
            lanes.mount(self._lane_placeholder, before=insert_before)
            return
        children = list(lanes.children)
        if children.index(self._lane_placeholder) + 1 != children.index(insert_before):
            lanes.move_child(self._lane_placeholder, before=insert_before)

    # -- keyboard moves --

    def on_item_widget_move_requested(self, event: ItemWidget.MoveRequested) -> None:
        event.stop()
        lane_index, index = event.item_widget.path
        board = self.manager.state
        if event.lane_delta:
            target = lane_index + event.lane_delta
            if not 0 <= target < len(board.children):
                return
            drop = DragHandle(self.scope, (target,), board.children[target])
        else:
            final = index + event.offset
            if not 0 <= final < len(board.children[lane_index].children):
                return
            drop = DragHandle(self.scope, (lane_index, final + 1 if event.offset > 0 else final), None)

        item_id = event.item_widget.item_id
        self.app.reconcile(event.item_widget.drag_handle(), drop)
        self.call_after_refresh(self._refocus, item_id)

    def _refocus(self, item_id: str) -> None:
        for widget in self.query(ItemWidget):
            if widget.item_id == item_id:
                widget.focus()
                return


class BoardScreen(Screen):
    """Every open document, one board view each."""

    BINDINGS = [
        Binding("escape", "cancel_drag", "Cancel drag", show=False),
        ("ctrl+s", "save", "Save"),
    ]

    def __init__(self, managers: list[StateManager], window_id: str):
        super().__init__()
        self.managers = managers
        self.window_id = window_id
        self._active_draggable = None

    def compose(self) -> ComposeResult:
        with VerticalScroll(id="boards"):
            for manager in self.managers:
                yield BoardView(manager, self.window_id)
        yield Footer()

    # -- Thin delegation: screen routes mouse events to active draggable --

    def on_mouse_move(self, event) -> None:
        if self._active_draggable is not None:
            self._active_draggable._drag_move(event.screen_x, event.screen_y)

    def on_mouse_up(self, event) -> None:
        if self._active_draggable is not None:
            self._active_draggable._drag_finish(event.screen_x, event.screen_y)

    def action_cancel_drag(self) -> None:
        if self._active_draggable is not None:
            self._active_draggable._drag_cancel()

    async def action_save(self) -> None:
        await self.app.writer.flush()
        self.notify("Saved")
