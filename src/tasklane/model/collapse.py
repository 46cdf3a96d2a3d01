"""Per-lane collapse flags kept in step with the board's lane list."""

from __future__ import annotations

from typing import Iterable, Sequence

from tasklane.errors import ContractViolation

INSERT = "insert"
REMOVE = "remove"
MOVE = "move"


def splice_in_lockstep(
    array: Sequence[bool],
    from_index: int | None,
    to_index: int | None,
    op: str,
    values: Iterable[bool] = (),
) -> tuple[bool, ...]:
    """Apply the same positional edit the lane list just received.

    - insert: ``values`` (default one ``False``) go in at ``to_index``
    - remove: the flag at ``from_index`` is dropped
    - move: the flag at ``from_index`` is taken out and put back at
      ``to_index``, which must already be corrected for the removal
    """
    flags = list(array)
    match op:
        case "insert":
            new = [bool(v) for v in values] or [False]
            index = max(0, min(to_index, len(flags)))
            flags[index:index] = new
        case "remove":
            if 0 <= from_index < len(flags):
                del flags[from_index]
        case "move":
            if 0 <= from_index < len(flags):
                flag = flags.pop(from_index)
            else:
                flag = False
            index = max(0, min(to_index, len(flags)))
            flags.insert(index, flag)
        case _:
            raise ContractViolation(f"Unknown collapse op {op!r}")
    return tuple(flags)


def normalize(array: Sequence[bool], length: int) -> tuple[bool, ...]:
    """Pad with False or truncate so there is exactly one flag per lane."""
    flags = tuple(bool(v) for v in array[:length])
    return flags + (False,) * (length - len(flags))


def toggle(array: Sequence[bool], index: int) -> tuple[bool, ...]:
    flags = list(array)
    if 0 <= index < len(flags):
        flags[index] = not flags[index]
    return tuple(flags)
