"""Shared helpers for CLI command handlers."""

import json
import logging
import sys
from pathlib import Path

from tasklane.loader import open_document
from tasklane.model.entity import Item, Lane
from tasklane.state import StateManager
from tasklane.writer import save_document


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        format="%(asctime)s %(levelname)s %(message)s",
        stream=sys.stderr,
        level=logging.DEBUG if verbose else logging.WARNING,
    )


def open_or_die(path: str, json_mode: bool) -> StateManager:
    """Open a board file. Exit 1 with message if it cannot be read."""
    try:
        return open_document(Path(path))
    except OSError as e:
        error(f"cannot open {path}: {e.strerror or e}", json_mode)


def find_lane(manager: StateManager, position: int, json_mode: bool) -> Lane:
    """Lookup a lane by 1-indexed position. Exit 1 listing available lanes if not found."""
    lanes = manager.state.children
    if 1 <= position <= len(lanes):
        return lanes[position - 1]
    available = [f"  {i}  {lane.data.title}" for i, lane in enumerate(lanes, 1)]
    msg = f"Lane {position} not found. Available:\n" + "\n".join(available)
    error(msg, json_mode)


def find_item(manager: StateManager, lane_position: int, position: int, json_mode: bool) -> Item:
    """Lookup an item by 1-indexed lane and item position. Exit 1 if not found."""
    lane = find_lane(manager, lane_position, json_mode)
    if 1 <= position <= len(lane.children):
        return lane.children[position - 1]
    error(f"Item {position} not found in lane {lane_position} ({len(lane.children)} items).", json_mode)


def final_index(from_index: int, position: int, length: int) -> int:
    """Pre-move insertion index that leaves a sibling at 1-indexed position."""
    target = max(0, min(position - 1, length - 1))
    return target + 1 if from_index < target else target


def save(manager: StateManager) -> None:
    save_document(manager.path, manager.state, manager.settings)


def check_error(manager: StateManager, json_mode: bool) -> None:
    """Exit 1 if the last gesture left an error on the document."""
    if manager.error is not None:
        error(str(manager.error), json_mode)


def output_json(data: dict | list) -> None:
    """Write JSON to stdout."""
    print(json.dumps(data, indent=2))


def output_result(data: dict, text: str, json_mode: bool) -> None:
    """Output mutation result as JSON or plain text."""
    if json_mode:
        output_json(data)
    else:
        print(text)


def error(message: str, json_mode: bool) -> None:
    """Print error to stderr and exit 1."""
    if json_mode:
        print(json.dumps({"error": message}), file=sys.stderr)
    else:
        print(f"error: {message}", file=sys.stderr)
    sys.exit(1)


def lane_summaries(manager: StateManager) -> list[dict]:
    """Build lane summary dicts from a document."""
    flags = manager.get_side_array()
    return [
        {
            "position": i,
            "title": lane.data.title,
            "items": len(lane.children),
            "collapsed": flags[i - 1],
            "complete": lane.data.should_mark_items_complete,
        }
        for i, lane in enumerate(manager.state.children, 1)
    ]


def format_lane_line(lane: dict, indent: str = "") -> str:
    """Format a lane summary dict as a text line."""
    flags = ("  (collapsed)" if lane["collapsed"] else "") + ("  (complete)" if lane["complete"] else "")
    items = "item" if lane["items"] == 1 else "items"
    return f"{indent}{lane['position']}  {lane['title']:<16} {lane['items']} {items}{flags}"
