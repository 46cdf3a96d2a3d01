"""Handlers for 'tasklane lane' commands."""

from tasklane.cli._common import (
    check_error,
    final_index,
    find_lane,
    format_lane_line,
    lane_summaries,
    open_or_die,
    output_json,
    output_result,
    save,
)
from tasklane.drag import DragReconciler, handle_at
from tasklane.model.collapse import toggle
from tasklane.model.path import find_path
from tasklane.workspace import Workspace


def lane_list(args) -> int:
    """List all lanes."""
    manager = open_or_die(args.file, args.json)
    lanes = lane_summaries(manager)

    if args.json:
        output_json(lanes)
    else:
        for lane in lanes:
            print(format_lane_line(lane))

    return 0


def lane_move(args) -> int:
    """Move a lane to a new position."""
    manager = open_or_die(args.file, args.json)
    lane = find_lane(manager, args.lane, args.json)
    from_index = args.lane - 1
    count = len(manager.state.children)
    to_index = final_index(from_index, args.position, count)

    workspace = Workspace()
    workspace.add(manager)
    outcome = DragReconciler(workspace).handle_drop(
        handle_at(manager, (from_index,), "cli"),
        handle_at(manager, (to_index,), "cli"),
    )
    check_error(manager, args.json)

    position = find_path(manager.state, lane.id)[0] + 1
    if outcome.committed:
        save(manager)
    output_result(
        {"title": lane.data.title, "position": position, "moved": outcome.committed},
        f'Moved lane "{lane.data.title}" to position {position}' if outcome.committed else "Nothing to move",
        args.json,
    )
    return 0


def lane_collapse(args) -> int:
    """Toggle a lane's collapsed flag."""
    manager = open_or_die(args.file, args.json)
    lane = find_lane(manager, args.lane, args.json)

    workspace = Workspace()
    workspace.add(manager)
    workspace.set_side_array(manager.document_id, lambda flags: toggle(flags, args.lane - 1))
    save(manager)

    collapsed = workspace.get_side_array(manager.document_id)[args.lane - 1]
    state = "collapsed" if collapsed else "expanded"
    output_result(
        {"title": lane.data.title, "position": args.lane, "collapsed": collapsed},
        f'Lane "{lane.data.title}" {state}',
        args.json,
    )
    return 0
