"""Immutable board tree: Board → Lane → Item."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Iterator

BOARD = "board"
LANE = "lane"
ITEM = "item"


@dataclass(frozen=True)
class ItemData:
    """Payload of an Item.

    ``title_raw`` is the task text as written in the document, without the
    list marker and checkbox. ``check_char`` is the raw status character
    between the brackets (``" "`` when open).
    """

    title_raw: str
    checked: bool = False
    check_char: str = " "
    metadata: dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def title(self) -> str:
        """First line of the raw text."""
        return self.title_raw.split("\n", 1)[0]


@dataclass(frozen=True)
class LaneData:
    """Payload of a Lane."""

    title: str
    should_mark_items_complete: bool = False
    sorted: str | None = None


@dataclass(frozen=True)
class BoardData:
    """Payload of a Board. ``collapsed`` has one flag per lane."""

    title: str = ""
    collapsed: tuple[bool, ...] = ()


@dataclass(frozen=True)
class Entity:
    """Base tree node. Subclasses fix ``type`` and ``accepts``."""

    id: str
    data: Any
    children: tuple[Entity, ...] = ()

    type: ClassVar[str] = ""
    accepts: ClassVar[tuple[str, ...]] = ()

    def accepts_type(self, child_type: str) -> bool:
        return child_type in self.accepts


@dataclass(frozen=True)
class Item(Entity):
    data: ItemData = field(default_factory=lambda: ItemData(""))
    children: tuple[Entity, ...] = ()

    type: ClassVar[str] = ITEM
    accepts: ClassVar[tuple[str, ...]] = ()

    @property
    def checked(self) -> bool:
        return self.data.checked


@dataclass(frozen=True)
class Lane(Entity):
    data: LaneData = field(default_factory=lambda: LaneData(""))
    children: tuple[Item, ...] = ()

    type: ClassVar[str] = LANE
    accepts: ClassVar[tuple[str, ...]] = (ITEM,)


@dataclass(frozen=True)
class Board(Entity):
    data: BoardData = field(default_factory=BoardData)
    children: tuple[Lane, ...] = ()

    type: ClassVar[str] = BOARD
    accepts: ClassVar[tuple[str, ...]] = (LANE,)

    @property
    def collapsed(self) -> tuple[bool, ...]:
        return self.data.collapsed


ENTITY_TYPES: dict[str, type[Entity]] = {BOARD: Board, LANE: Lane, ITEM: Item}


def accepts(parent_type: str, child_type: str) -> bool:
    """Whether an entity of parent_type may contain one of child_type."""
    cls = ENTITY_TYPES.get(parent_type)
    return cls is not None and child_type in cls.accepts


def walk(entity: Entity) -> Iterator[Entity]:
    """Yield entity and all its descendants, depth-first, in order."""
    yield entity
    for child in entity.children:
        yield from walk(child)


def count(entity: Entity, entity_type: str | None = None) -> int:
    """Count entities below (not including) the given one, optionally by type."""
    return sum(1 for e in walk(entity) if e is not entity and (entity_type is None or e.type == entity_type))
