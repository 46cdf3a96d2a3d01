"""Handlers for 'tasklane item' commands."""

from tasklane.cli._common import (
    check_error,
    error,
    final_index,
    find_item,
    find_lane,
    open_or_die,
    output_json,
    output_result,
    save,
)
from tasklane.drag import DragHandle, DragReconciler, Scope, handle_at
from tasklane.errors import CrossDocumentInconsistency
from tasklane.model.path import find_path
from tasklane.workspace import Workspace

STDIN_SCOPE = Scope("stdin", "cli", external=True)


def item_list(args) -> int:
    """List items grouped by lane."""
    manager = open_or_die(args.file, args.json)

    lanes = []
    for i, lane in enumerate(manager.state.children, 1):
        if args.lane and i != args.lane:
            continue
        items = [
            {"position": j, "title": item.data.title, "checked": item.data.checked}
            for j, item in enumerate(lane.children, 1)
        ]
        lanes.append({"position": i, "title": lane.data.title, "items": items})

    if args.json:
        output_json(
            [
                {**item, "lane": {"position": lane["position"], "title": lane["title"]}}
                for lane in lanes
                for item in lane["items"]
            ]
        )
    else:
        for lane in lanes:
            print(f"{lane['position']}  {lane['title']}")
            for item in lane["items"]:
                box = "[x]" if item["checked"] else "[ ]"
                print(f"  {item['position']}  {box} {item['title']}")

    return 0


def item_move(args) -> int:
    """Move an item to another lane, position or file."""
    source = open_or_die(args.file, args.json)
    item = find_item(source, args.lane, args.item, args.json)

    destination = source
    if args.to_file:
        destination = open_or_die(args.to_file, args.json)
        if destination.document_id == source.document_id:
            destination = source
    to_lane = args.to_lane or args.lane
    lane = find_lane(destination, to_lane, args.json)

    if args.position is None:
        drop_path = (to_lane - 1,)
    elif destination is source and to_lane == args.lane:
        drop_path = (to_lane - 1, final_index(args.item - 1, args.position, len(lane.children)))
    else:
        drop_path = (to_lane - 1, max(0, min(args.position - 1, len(lane.children))))

    workspace = Workspace()
    workspace.add(source)
    workspace.add(destination)
    try:
        outcome = DragReconciler(workspace).handle_drop(
            handle_at(source, (args.lane - 1, args.item - 1), "cli"),
            handle_at(destination, drop_path, "cli"),
        )
    except CrossDocumentInconsistency as e:
        error(str(e), args.json)
    check_error(source, args.json)
    check_error(destination, args.json)

    if not outcome.committed:
        output_result({"title": item.data.title, "moved": False}, "Nothing to move", args.json)
        return 0

    save(destination)
    if destination is not source:
        save(source)

    landed = find_path(destination.state, item.id)
    data = {"title": item.data.title, "moved": True, "topology": outcome.topology.value}
    if landed is not None:
        moved = destination.state.children[landed[0]].children[landed[1]]
        data.update(lane=landed[0] + 1, position=landed[1] + 1, checked=moved.data.checked)
        text = f'Moved "{item.data.title}" to lane {landed[0] + 1} position {landed[1] + 1}'
    else:
        text = f'Moved "{item.data.title}"'
    output_result(data, text, args.json)
    return 0


def item_add(args) -> int:
    """Add new items to a lane."""
    manager = open_or_die(args.file, args.json)
    lane = find_lane(manager, args.lane, args.json)

    if args.position is None:
        drop_path = (args.lane - 1,)
    else:
        drop_path = (args.lane - 1, max(0, min(args.position - 1, len(lane.children))))

    workspace = Workspace()
    workspace.add(manager)
    outcome = DragReconciler(workspace).handle_drop(
        DragHandle(STDIN_SCOPE, (), list(args.text)),
        handle_at(manager, drop_path, "cli"),
    )
    check_error(manager, args.json)
    if outcome.committed:
        save(manager)

    count = len(manager.state.children[args.lane - 1].children) - len(lane.children)
    items = "item" if count == 1 else "items"
    output_result(
        {"lane": args.lane, "title": lane.data.title, "added": count},
        f'Added {count} {items} to "{lane.data.title}"',
        args.json,
    )
    return 0
