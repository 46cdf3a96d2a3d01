"""Drag-and-drop plumbing for the board UI.

Widgets only track the pointer. A finished drop is turned into a
``(drag, drop)`` handle pair and handed to the app's reconciler, which owns
every model change:

- DraggableMixin: on lanes and items, owns the "flying" phase
- DropTarget: on boards and lanes, owns the "landing" phase
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterator

from textual.geometry import Offset
from textual.widgets import Static

from tasklane.drag import DragHandle

if TYPE_CHECKING:
    from textual.widget import Widget


class DropTarget:
    """Mixin for widgets that can accept drops.

    ``drop_handle`` returns the destination side of the gesture, or None to
    let the drop fall through to an outer target.
    """

    def drag_over(self, draggable: DraggableMixin, x: int, y: int) -> bool:
        """Called while a draggable hovers over this target. Return True to accept."""
        return False

    def drag_away(self, draggable: DraggableMixin) -> None:
        """Called when a draggable leaves this target."""

    def drop_handle(self, draggable: DraggableMixin, x: int, y: int) -> DragHandle | None:
        return None

    def try_drop(self, draggable: DraggableMixin, x: int, y: int) -> bool:
        """Called on mouse-up. Hands the gesture to the reconciler if this target takes it."""
        drop = self.drop_handle(draggable, x, y)
        self.drag_away(draggable)
        if drop is None:
            return False
        self.app.reconcile(draggable.drag_handle(), drop)
        return True


def _ancestors(widget: Widget | None) -> Iterator[Widget]:
    while widget is not None:
        yield widget
        widget = widget.parent


class DraggableMixin:
    """Mixin for widgets that can be dragged.

    Subclasses should:
    - Call _init_draggable() in __init__
    - Implement drag_handle() to describe what is being dragged
    - Implement draggable_make_ghost() to return the ghost widget
    - Optionally implement draggable_clicked() for click-without-drag behavior
    """

    DRAG_THRESHOLD = 2

    def _init_draggable(self) -> None:
        self._drag_start_pos: Offset | None = None
        self._dragging = False
        self._ghost: Widget | None = None
        self._drag_offset = Offset(0, 0)
        self._current_target: DropTarget | None = None

    @property
    def is_dragging(self) -> bool:
        return self._dragging

    def on_mouse_down(self, event) -> None:
        if event.button != 1:
            return
        event.stop()
        event.prevent_default()
        self._drag_start_pos = Offset(event.screen_x, event.screen_y)
        self.capture_mouse()

    def on_mouse_move(self, event) -> None:
        if self._drag_start_pos is None:
            return
        event.stop()
        event.prevent_default()
        dx = abs(event.screen_x - self._drag_start_pos.x)
        dy = abs(event.screen_y - self._drag_start_pos.y)
        if dx > self.DRAG_THRESHOLD or dy > self.DRAG_THRESHOLD:
            self.release_mouse()
            start, self._drag_start_pos = self._drag_start_pos, None
            self._drag_start(start)

    def on_mouse_up(self, event) -> None:
        event.stop()
        event.prevent_default()
        self.release_mouse()
        if self._drag_start_pos is not None:
            self._drag_start_pos = None
            self.draggable_clicked()

    def _drag_start(self, mouse_pos: Offset) -> None:
        """Begin drag: mount the ghost and register with the screen."""
        self._dragging = True
        self.add_class("dragging")
        self.screen.set_focus(None)

        region = self.region
        self._drag_offset = Offset(mouse_pos.x - region.x, mouse_pos.y - region.y)
        self._ghost = self.draggable_make_ghost()
        self._ghost.styles.width = region.width
        self._ghost.styles.offset = (region.x, region.y)
        self.screen.mount(self._ghost)

        self.screen._active_draggable = self
        self.screen.capture_mouse()

    def _drag_move(self, x: int, y: int) -> None:
        """Called by the screen on mouse move during a drag."""
        if self._ghost is not None:
            self._ghost.styles.offset = (x - self._drag_offset.x, y - self._drag_offset.y)
        for target in self._targets_at(x, y):
            if target.drag_over(self, x, y):
                break
        else:
            # Keep the last placeholder while over dead space
            return
        if target is not self._current_target and self._current_target is not None:
            self._current_target.drag_away(self)
        self._current_target = target

    def _drag_finish(self, x: int, y: int) -> None:
        """Called by the screen on mouse-up. Try targets innermost-out, then the last hovered one."""
        self.screen.release_mouse()
        candidates = list(self._targets_at(x, y))
        if self._current_target is not None and self._current_target not in candidates:
            candidates.append(self._current_target)
        dropped = any(target.try_drop(self, x, y) for target in candidates)
        if not dropped:
            self._drag_cancel()
            return
        self._current_target = None
        self._drag_cleanup()

    def _drag_cancel(self) -> None:
        self.screen.release_mouse()
        if self._current_target is not None:
            self._current_target.drag_away(self)
            self._current_target = None
        self._drag_cleanup()

    def _drag_cleanup(self) -> None:
        if self._ghost is not None:
            self._ghost.remove()
        self._ghost = None
        self._dragging = False
        self._drag_offset = Offset(0, 0)
        self.remove_class("dragging")
        if getattr(self.screen, "_active_draggable", None) is self:
            self.screen._active_draggable = None

    def _targets_at(self, x: int, y: int) -> Iterator[DropTarget]:
        """DropTargets under a screen position, innermost first, skipping the ghost."""
        seen: set[int] = set()
        for widget, _region in self.screen.get_widgets_at(x, y):
            if self._ghost is not None and (widget is self._ghost or self._ghost in widget.ancestors):
                continue
            for candidate in _ancestors(widget):
                if isinstance(candidate, DropTarget) and candidate is not self and id(candidate) not in seen:
                    seen.add(id(candidate))
                    yield candidate

    def drag_handle(self) -> DragHandle:
        """The source side of the gesture. Override in subclass."""
        raise NotImplementedError

    def draggable_make_ghost(self) -> Widget:
        """Create and return the ghost widget for dragging. Override in subclass."""
        raise NotImplementedError

    def draggable_clicked(self) -> None:
        """Called when the mouse is released without dragging."""


class DragGhost(Static):
    """Floating overlay showing what is being dragged."""

    DEFAULT_CSS = """
    DragGhost {
        layer: overlay;
        height: auto;
        padding: 0 1;
        background: $primary;
        opacity: 0.8;
    }
    """


class ItemPlaceholder(Static):
    """Placeholder showing where a dragged item will drop."""


class LanePlaceholder(Static):
    """Placeholder showing where a dragged lane will drop."""
