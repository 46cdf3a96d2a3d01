"""Mixin for widgets that follow a document's state holder."""

from __future__ import annotations

from typing import Any, Callable

from tasklane.state import Callback, StateManager


class StateWatcherMixin:
    """Registers ``StateManager`` watches and drops them all on unmount.

    Call ``_init_watcher()`` in ``__init__`` and use ``state_watch`` instead of
    ``manager.watch``. Unwatching is idempotent, so a document closed by the
    workspace before the widget unmounts is fine.
    """

    def _init_watcher(self) -> None:
        self._unwatchers: list[Callable[[], Any]] = []

    def state_watch(self, manager: StateManager, key: str, callback: Callback) -> None:
        self._unwatchers.append(manager.watch(key, callback))

    def on_unmount(self) -> None:
        while self._unwatchers:
            self._unwatchers.pop()()
