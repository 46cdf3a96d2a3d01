"""Board settings read from and written to document front-matter."""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from datetime import datetime
from typing import Any

from tasklane.model.path import APPEND, PREPEND

logger = logging.getLogger(__name__)

FRONTMATTER_KEY = "kanban-plugin"
COLLAPSE_KEY = "list-collapse"

_KEYS = {
    "insertion_method": "new-card-insertion-method",
    "done_char": "task-status-done",
    "append_done_date": "append-done-date",
    "date_format": "date-format",
}


@dataclass(frozen=True)
class Settings:
    """Per-document settings. Defaults apply to anything missing or invalid."""

    insertion_method: str = APPEND
    done_char: str = "x"
    append_done_date: bool = False
    date_format: str = "%Y-%m-%d"

    @classmethod
    def from_meta(cls, meta: dict[str, Any] | None) -> Settings:
        """Build settings from a front-matter dict."""
        meta = meta or {}
        values: dict[str, Any] = {}
        for name, key in _KEYS.items():
            if key not in meta:
                continue
            value = meta[key]
            if _valid(name, value):
                values[name] = value
            else:
                logger.warning("ignoring invalid %s: %r", key, value)
        return cls(**values)

    def to_meta(self) -> dict[str, Any]:
        """Front-matter entries for every setting that differs from its default."""
        defaults = Settings()
        meta = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value != getattr(defaults, f.name):
                meta[_KEYS[f.name]] = value
        return meta

    def get(self, key: str, default: Any = None) -> Any:
        """Look a setting up by its front-matter key."""
        for name, meta_key in _KEYS.items():
            if meta_key == key:
                return getattr(self, name)
        return default


def _valid(name: str, value: Any) -> bool:
    match name:
        case "insertion_method":
            return value in (APPEND, PREPEND)
        case "done_char":
            return isinstance(value, str) and len(value) == 1 and value != " "
        case "append_done_date":
            return isinstance(value, bool)
        case "date_format":
            if not isinstance(value, str) or "%" not in value:
                return False
            try:
                datetime(2000, 1, 2).strftime(value)
            except ValueError:
                return False
            return True
    return False


def collapse_from_meta(meta: dict[str, Any] | None) -> tuple[bool, ...]:
    """Read the per-lane collapse flags, tolerating junk."""
    raw = (meta or {}).get(COLLAPSE_KEY)
    if not isinstance(raw, list):
        if raw is not None:
            logger.warning("ignoring invalid %s: %r", COLLAPSE_KEY, raw)
        return ()
    return tuple(bool(v) for v in raw)
