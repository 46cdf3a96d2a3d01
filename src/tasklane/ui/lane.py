"""Lane widgets for the tasklane UI."""

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.widgets import Static

from tasklane.drag import DragHandle, Scope
from tasklane.model.collapse import toggle
from tasklane.model.entity import Lane
from tasklane.state import StateManager
from tasklane.ui.drag import DraggableMixin, DragGhost, DropTarget, ItemPlaceholder
from tasklane.ui.item import ItemWidget

EXPANDED = "▾"
COLLAPSED = "▸"
COMPLETE = "✓"


def lane_label(lane: Lane, collapsed: bool) -> Text:
    arrow = COLLAPSED if collapsed else EXPANDED
    label = Text(f"{arrow} {lane.data.title} ({len(lane.children)})", style="bold")
    if lane.data.should_mark_items_complete:
        label.append(f" {COMPLETE}", style="green")
    return label


class LaneEnd(Static):
    """Empty tail of a lane, the insert point for drops below the last item."""

    DEFAULT_CSS = """
    LaneEnd {
        height: 1;
    }
    """


class LaneWidget(DraggableMixin, DropTarget, Vertical):
    """A single lane on a board. Clicking the lane toggles it collapsed."""

    DEFAULT_CSS = """
    LaneWidget {
        width: 1fr;
        height: auto;
        min-width: 25;
        max-width: 32;
        padding: 0 1;
        border-right: tall $surface-lighten-1;
    }
    LaneWidget.dragging {
        opacity: 0.4;
    }
    LaneWidget.collapsed {
        min-width: 12;
        max-width: 16;
    }
    LaneWidget > #lane-title {
        width: 100%;
        text-align: center;
    }
    ItemPlaceholder {
        height: 1;
        background: $primary-darken-2;
    }
    """

    def __init__(self, manager: StateManager, scope: Scope, index: int, lane: Lane, collapsed: bool):
        Vertical.__init__(self)
        self._init_draggable()
        self.manager = manager
        self.scope = scope
        self.index = index
        self.lane = lane
        self.collapsed = collapsed
        self._item_placeholder: ItemPlaceholder | None = None
        self.set_class(collapsed, "collapsed")

    def compose(self) -> ComposeResult:
        yield Static(lane_label(self.lane, self.collapsed), id="lane-title")
        if self.collapsed:
            return
        for position, item in enumerate(self.lane.children):
            yield ItemWidget(self.scope, (self.index, position), item)
        yield LaneEnd()

    # -- DraggableMixin: lane being dragged --

    def drag_handle(self) -> DragHandle:
        return DragHandle(self.scope, (self.index,), self.lane)

    def draggable_make_ghost(self):
        return DragGhost(Text(self.lane.data.title, style="bold"))

    def draggable_clicked(self) -> None:
        self.manager.set_side_array(lambda flags: toggle(flags, self.index))

    # -- DropTarget: lane accepting item drops --

    def drag_over(self, draggable, x: int, y: int) -> bool:
        if not isinstance(draggable, ItemWidget):
            return False
        if self.collapsed:
            return True
        self._ensure_item_placeholder(self._insert_before(draggable, y))
        return True

    def drag_away(self, draggable) -> None:
        if self._item_placeholder is not None and self._item_placeholder.parent is not None:
            self._item_placeholder.remove()
        self._item_placeholder = None

    def drop_handle(self, draggable, x: int, y: int) -> DragHandle | None:
        if not isinstance(draggable, ItemWidget):
            return None
        if self.collapsed:
            return DragHandle(self.scope, (self.index,), self.lane)
        position = self.item_position(draggable, self._insert_before(draggable, y))
        return DragHandle(self.scope, (self.index, position), None)

    def item_position(self, draggable: ItemWidget, insert_before: Static) -> int:
        """Insertion index in the current snapshot for a drop before insert_before."""
        position = 0
        for child in self.children:
            if child is insert_before:
                break
            if isinstance(child, ItemWidget) and child is not draggable:
                position += 1
        from_lane, from_index = draggable.path
        same_lane = draggable.scope.document_id == self.scope.document_id and from_lane == self.index
        if same_lane and from_index < position:
            position += 1
        return position

    def _insert_before(self, draggable, screen_y: int) -> Static:
        for child in self.children:
            if isinstance(child, ItemWidget) and child is not draggable:
                if screen_y < child.region.y + child.region.height // 2:
                    return child
        return self.query_one(LaneEnd)

    def _ensure_item_placeholder(self, insert_before: Static) -> None:
        if self._item_placeholder is None or self._item_placeholder.parent is not self:
            self.drag_away(None)
            self._item_placeholder = ItemPlaceholder()
            self.mount(self._item_placeholder, before=insert_before)
            return
        children = list(self.children)
        if children.index(self._item_placeholder) + 1 != children.index(insert_before):
            self.move_child(self._item_placeholder, before=insert_before)
