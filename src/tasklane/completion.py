"""Completion state changes for items crossing a "marks complete" lane boundary.

The drag reconciler calls a completion transform once per item move with the
source lane, the destination lane and the item. The transform answers with the
item to insert and, optionally, an item to leave behind at the source (the
next occurrence of a recurring task).
"""

from __future__ import annotations

import calendar
import re
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta
from typing import Callable, Protocol

from tasklane.ids import generate_id
from tasklane.model.entity import Entity, Item, Lane
from tasklane.settings import Settings

DONE_MARK = "\u2705"  # ✅
RECUR_MARK = "\U0001f501"  # 🔁
DUE_MARK = "\U0001f4c5"  # 📅

DUE_FORMAT = "%Y-%m-%d"

_DONE_STAMP = re.compile("\\s*\u2705\ufe0f?\\s*([^\u2705]+?)\\s*$")
_DUE_DATE = re.compile("([\U0001f4c5\U0001f4c6\U0001f5d3]\ufe0f?\\s*)(\\S+)")
_RECURRENCE = re.compile(
    "\U0001f501\ufe0f?\\s*every\\s+(?:(\\d+)\\s+)?(day|week|month|year)s?\\b",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class CompletionResult:
    """What to insert at the destination and what to leave at the source."""

    next: Item
    replacement: Item | None = None


class CompletionHook(Protocol):
    def __call__(
        self,
        source_parent: Entity | None,
        destination_parent: Entity | None,
        item: Item,
    ) -> CompletionResult: ...


def marks_complete(parent: Entity | None) -> bool:
    return isinstance(parent, Lane) and parent.data.should_mark_items_complete


def _add_months(day: date, months: int) -> date:
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    return date(year, month, min(day.day, calendar.monthrange(year, month)[1]))


def advance(day: date, every: int, unit: str) -> date:
    """Step a date forward by a recurrence interval."""
    match unit.lower():
        case "day":
            return day + timedelta(days=every)
        case "week":
            return day + timedelta(weeks=every)
        case "month":
            return _add_months(day, every)
        case "year":
            return _add_months(day, 12 * every)
    raise ValueError(f"Unknown recurrence unit {unit!r}")


class CompletionTransform:
    """Default completion hook.

    - neither lane marks items complete: the item is untouched
    - the item already matches the destination: untouched
    - destination marks complete: the item is checked with the configured done
      character, optionally stamped with today's date, and a recurring item
      leaves its next occurrence behind
    - otherwise the item is unchecked and its done stamp removed
    """

    def __init__(self, settings: Settings | None = None, today: Callable[[], date] = date.today):
        self.settings = settings or Settings()
        self.today = today

    def __call__(
        self,
        source_parent: Entity | None,
        destination_parent: Entity | None,
        item: Item,
    ) -> CompletionResult:
        was_complete_lane = marks_complete(source_parent)
        now_complete_lane = marks_complete(destination_parent)

        if not was_complete_lane and not now_complete_lane:
            return CompletionResult(item)
        if self.is_complete(item) == now_complete_lane:
            return CompletionResult(item)
        if now_complete_lane:
            return self.complete(item)
        return CompletionResult(self.reopen(item))

    def strip_stamp(self, title: str) -> str:
        """Remove a trailing done stamp. Text after a ✅ that is not a date stays."""
        match = _DONE_STAMP.search(title)
        if match is None or not self._is_date(match.group(1)):
            return title.rstrip()
        return title[: match.start()].rstrip()

    def _is_date(self, text: str) -> bool:
        for fmt in (self.settings.date_format, DUE_FORMAT):
            try:
                datetime.strptime(text, fmt)
            except ValueError:
                continue
            return True
        return False

    def is_complete(self, item: Item) -> bool:
        return item.data.checked and item.data.check_char.lower() == self.settings.done_char.lower()

    def complete(self, item: Item) -> CompletionResult:
        title = self.strip_stamp(item.data.title_raw)
        replacement = self.next_occurrence(item)
        if self.settings.append_done_date:
            title = f"{title} {DONE_MARK} {self.today().strftime(self.settings.date_format)}"
        done = replace(item, data=replace(item.data, title_raw=title, checked=True, check_char=self.settings.done_char))
        return CompletionResult(done, replacement)

    def reopen(self, item: Item) -> Item:
        title = self.strip_stamp(item.data.title_raw)
        return replace(item, data=replace(item.data, title_raw=title, checked=False, check_char=" "))

    def next_occurrence(self, item: Item) -> Item | None:
        """The open copy of a recurring item with its due date moved on.

        Returns None for non-recurring items and recurring items without a
        due date. Raises ValueError if the due date does not parse.
        """
        title = self.strip_stamp(item.data.title_raw)
        rule = _RECURRENCE.search(title)
        if rule is None:
            return None
        due = _DUE_DATE.search(title)
        if due is None:
            return None

        current = datetime.strptime(due.group(2), DUE_FORMAT).date()
        every = int(rule.group(1) or 1)
        if every < 1:
            raise ValueError(f"Recurrence interval must be positive: {rule.group(0)!r}")
        following = advance(current, every, rule.group(2))

        new_title = title[: due.start(2)] + following.strftime(DUE_FORMAT) + title[due.end(2) :]
        return Item(id=generate_id(), data=replace(item.data, title_raw=new_title, checked=False, check_char=" "))


def identity_transform(source_parent: Entity | None, destination_parent: Entity | None, item: Item) -> CompletionResult:
    """A hook that never changes anything."""
    return CompletionResult(item)
