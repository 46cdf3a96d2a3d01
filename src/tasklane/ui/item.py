"""Item widgets for the tasklane UI."""

from rich.text import Text
from textual.message import Message
from textual.widgets import Static

from tasklane.drag import DragHandle, Scope
from tasklane.model.entity import Item
from tasklane.ui.drag import DraggableMixin, DragGhost

CHECKED = "☑"
UNCHECKED = "☐"


def item_label(item: Item) -> Text:
    box = CHECKED if item.data.checked else UNCHECKED
    text = Text(f"{box} {item.data.title}")
    if item.data.checked:
        text.stylize("dim strike", 2)
    return text


class ItemWidget(DraggableMixin, Static, can_focus=True):
    """A single item in a lane."""

    BINDINGS = [
        ("shift+left", "move(-1, 0)", "Move left"),
        ("shift+right", "move(1, 0)", "Move right"),
        ("shift+up", "move(0, -1)", "Move up"),
        ("shift+down", "move(0, 1)", "Move down"),
    ]

    DEFAULT_CSS = """
    ItemWidget {
        width: 100%;
        height: auto;
        padding: 0 1;
        margin-bottom: 1;
        background: $surface;
    }
    ItemWidget:focus {
        background: $primary;
    }
    ItemWidget.dragging {
        display: none;
    }
    """

    class MoveRequested(Message):
        """Posted when the item should move by keyboard."""

        def __init__(self, item_widget: "ItemWidget", lane_delta: int, offset: int) -> None:
            super().__init__()
            self.item_widget = item_widget
            self.lane_delta = lane_delta
            self.offset = offset

    def __init__(self, scope: Scope, path: tuple[int, int], item: Item):
        Static.__init__(self, item_label(item))
        self._init_draggable()
        self.scope = scope
        self.path = path
        self.item = item

    @property
    def item_id(self) -> str:
        return self.item.id

    def drag_handle(self) -> DragHandle:
        return DragHandle(self.scope, self.path, self.item)

    def draggable_make_ghost(self):
        return DragGhost(item_label(self.item))

    def draggable_clicked(self) -> None:
        self.focus()

    def action_move(self, lane_delta: int, offset: int) -> None:
        self.post_message(self.MoveRequested(self, lane_delta, offset))
