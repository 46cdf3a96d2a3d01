"""Parse and serialize markdown boards with YAML front-matter.

A board document looks like::

    ---
    kanban-plugin: board
    list-collapse: [false, true]
    ---

    # Optional board title

    ## Lane title

    - [ ] an open item
    - [x] a finished item

    ## Done

    **Complete**
    - [x] lanes with a **Complete** marker check items dropped into them
"""

from __future__ import annotations

import logging
import re

import yaml
from markdown_it import MarkdownIt

from tasklane.ids import fresh_id
from tasklane.model.entity import Board, BoardData, Item, ItemData, Lane, LaneData
from tasklane.model.collapse import normalize
from tasklane.settings import COLLAPSE_KEY, FRONTMATTER_KEY, Settings, collapse_from_meta

logger = logging.getLogger(__name__)

COMPLETE_MARKER = "**Complete**"

_TASK = re.compile(r"^\s*[-*+]\s+(?:\[(.)\]\s?)?(.*)$")
_CONTINUATION_INDENT = "    "


def _extract_front_matter(text: str) -> tuple[str, dict]:
    """Extract YAML front-matter from text. Returns (remaining_text, meta)."""
    if not text.startswith("---"):
        return text, {}

    match = re.match(r"^---\n(.*?)\n---\n?", text, re.DOTALL)
    if not match:
        return text, {}

    remaining = text[match.end() :]
    try:
        meta = yaml.safe_load(match.group(1)) or {}
    except yaml.YAMLError as e:
        logger.warning("ignoring unreadable front-matter: %s", e)
        meta = {}
    if not isinstance(meta, dict):
        logger.warning("ignoring front-matter that is not a mapping")
        meta = {}
    return remaining, meta


def _parse_item(source: str, taken: set[str]) -> Item:
    first, _, rest = source.partition("\n")
    match = _TASK.match(first)
    check_char = match.group(1) if match and match.group(1) else " "
    text = match.group(2) if match else first.strip()

    lines = [text]
    for line in rest.split("\n") if rest else []:
        if line.startswith(_CONTINUATION_INDENT):
            line = line[len(_CONTINUATION_INDENT) :]
        else:
            line = line.lstrip()
        lines.append(line)

    item_id = fresh_id(taken)
    taken.add(item_id)
    return Item(
        id=item_id,
        data=ItemData(
            title_raw="\n".join(lines).rstrip(),
            checked=check_char != " ",
            check_char=check_char,
        ),
    )


def parse_board(text: str) -> tuple[Board, Settings]:
    """Hydrate a Board and its Settings from document text.

    Only top-level list items under a ``##`` heading become items; anything
    else in a lane body is ignored apart from the ``**Complete**`` marker.
    """
    body, meta = _extract_front_matter(text)
    settings = Settings.from_meta(meta)

    md = MarkdownIt("gfm-like")
    tokens = md.parse(body)
    lines = body.split("\n")

    taken: set[str] = set()
    title = ""
    lanes: list[tuple[LaneData, list[Item]]] = []
    heading: str | None = None
    depth = 0

    for i, token in enumerate(tokens):
        match token.type:
            case "heading_open":
                heading = token.tag
            case "inline" if heading is not None:
                if heading == "h1" and not lanes and not title:
                    title = token.content.strip()
                elif heading == "h2":
                    lanes.append((LaneData(title=token.content.strip()), []))
            case "heading_close":
                heading = None
            case "bullet_list_open" | "ordered_list_open":
                depth += 1
            case "bullet_list_close" | "ordered_list_close":
                depth -= 1
            case "list_item_open" if depth == 1 and lanes and token.map:
                start, end = token.map
                item_lines = lines[start:end]
                while item_lines and not item_lines[-1].strip():
                    item_lines.pop()
                lanes[-1][1].append(_parse_item("\n".join(item_lines), taken))
            case "inline" if depth == 0 and lanes and token.content.strip() == COMPLETE_MARKER:
                data, items = lanes[-1]
                lanes[-1] = (LaneData(title=data.title, should_mark_items_complete=True), items)

    children = []
    for data, items in lanes:
        lane_id = fresh_id(taken)
        taken.add(lane_id)
        children.append(Lane(id=lane_id, data=data, children=tuple(items)))

    collapsed = normalize(collapse_from_meta(meta), len(children))
    board = Board(id="board", data=BoardData(title=title, collapsed=collapsed), children=tuple(children))
    return board, settings


def _serialize_item(item: Item) -> str:
    first, *rest = item.data.title_raw.split("\n")
    check_char = item.data.check_char if item.data.checked else " "
    lines = [f"- [{check_char}] {first}"]
    lines.extend(f"{_CONTINUATION_INDENT}{line}" if line else "" for line in rest)
    return "\n".join(lines)


def serialize_board(board: Board, settings: Settings | None = None) -> str:
    """Serialize a Board back to document text."""
    settings = settings or Settings()
    meta = {FRONTMATTER_KEY: "board", **settings.to_meta()}
    flags = normalize(board.data.collapsed, len(board.children))
    if any(flags):
        meta[COLLAPSE_KEY] = list(flags)

    parts = ["---", yaml.dump(meta, default_flow_style=None, sort_keys=False).rstrip(), "---", ""]
    if board.data.title:
        parts.extend([f"# {board.data.title}", ""])

    for lane in board.children:
        parts.extend([f"## {lane.data.title}", ""])
        if lane.data.should_mark_items_complete:
            parts.append(COMPLETE_MARKER)
        for item in lane.children:
            parts.append(_serialize_item(item))
        if lane.data.should_mark_items_complete or lane.children:
            parts.append("")

    return "\n".join(parts).rstrip() + "\n"
