"""CLI argument parser and dispatch for tasklane."""

import argparse

from tasklane.cli.item import item_add, item_list, item_move
from tasklane.cli.lane import lane_collapse, lane_list, lane_move


def build_parser() -> argparse.ArgumentParser:
    """Build the full CLI argument parser."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--json", action="store_true", help="Machine-readable JSON output")
    common.add_argument("-v", "--verbose", action="store_true", help="Log debug output to stderr")

    parser = argparse.ArgumentParser(
        prog="tasklane",
        description="Markdown kanban boards",
        parents=[common],
    )

    nouns = parser.add_subparsers(dest="noun")

    # --- lane ---
    lane_p = nouns.add_parser("lane", help="Lane operations", parents=[common])
    lane_verbs = lane_p.add_subparsers(dest="verb")

    lane_list_p = lane_verbs.add_parser("list", help="List lanes", parents=[common])
    lane_list_p.add_argument("file", help="Board file")
    lane_list_p.set_defaults(func=lane_list)

    lane_move_p = lane_verbs.add_parser("move", help="Move a lane", parents=[common])
    lane_move_p.add_argument("file", help="Board file")
    lane_move_p.add_argument("lane", type=int, help="Lane position (1-indexed)")
    lane_move_p.add_argument("--position", type=int, required=True, help="New position (1-indexed)")
    lane_move_p.set_defaults(func=lane_move)

    lane_collapse_p = lane_verbs.add_parser("collapse", help="Toggle a lane collapsed", parents=[common])
    lane_collapse_p.add_argument("file", help="Board file")
    lane_collapse_p.add_argument("lane", type=int, help="Lane position (1-indexed)")
    lane_collapse_p.set_defaults(func=lane_collapse)

    # --- item ---
    item_p = nouns.add_parser("item", help="Item operations", parents=[common])
    item_verbs = item_p.add_subparsers(dest="verb")

    item_list_p = item_verbs.add_parser("list", help="List items", parents=[common])
    item_list_p.add_argument("file", help="Board file")
    item_list_p.add_argument("--lane", type=int, help="Only this lane (1-indexed)")
    item_list_p.set_defaults(func=item_list)

    item_move_p = item_verbs.add_parser("move", help="Move an item", parents=[common])
    item_move_p.add_argument("file", help="Board file")
    item_move_p.add_argument("lane", type=int, help="Lane position (1-indexed)")
    item_move_p.add_argument("item", type=int, help="Item position in lane (1-indexed)")
    item_move_p.add_argument("--to-lane", dest="to_lane", type=int, help="Target lane (1-indexed, default: same lane)")
    item_move_p.add_argument("--position", type=int, help="Position in target lane (1-indexed, default: per board setting)")
    item_move_p.add_argument("--to-file", dest="to_file", help="Move into another board file")
    item_move_p.set_defaults(func=item_move)

    item_add_p = item_verbs.add_parser("add", help="Add items", parents=[common])
    item_add_p.add_argument("file", help="Board file")
    item_add_p.add_argument("lane", type=int, help="Lane position (1-indexed)")
    item_add_p.add_argument("text", nargs="+", help="Item text, one item per argument")
    item_add_p.add_argument("--position", type=int, help="Position in lane (1-indexed, default: per board setting)")
    item_add_p.set_defaults(func=item_add)

    return parser
