"""
Patterns: ordered sequences of primitive features.

A pattern is what the model perceives, learns and recalls. Its primitives are
plain tokens, numbers, or items located on a square of a scene. Patterns
carry a modality and may be marked "finished", meaning nothing may follow
the last item.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, List, Union


class Modality(Enum):
    """Perceptual channel a pattern (and the node that learns it) belongs to."""

    VISUAL = "visual"
    VERBAL = "verbal"
    ACTION = "action"


@dataclass(frozen=True)
class ItemSquarePattern:
    """
    An item located on a square.

    Attributes:
        item: Identifier or class of the object on the square
        column: Column (x) of the square
        row: Row (y) of the square
    """

    item: str
    column: int
    row: int

    def translate(self, delta_column: int, delta_row: int) -> "ItemSquarePattern":
        """Return a copy shifted by the given offsets."""
        return ItemSquarePattern(self.item, self.column + delta_column, self.row + delta_row)

    def __str__(self):
        return f"[{self.item} {self.column} {self.row}]"


Primitive = Union[str, int, float, ItemSquarePattern]


class ListPattern:
    """
    Ordered list of primitives with a modality and a finished flag.

    Equality takes the modality, the items and the finished flag into account.
    Once finished, items can no longer be added in place.

    Attributes:
        modality (Modality): Channel this pattern belongs to
    """

    def __init__(self, items: Iterable[Primitive] = (),
                 modality: Modality = Modality.VISUAL,
                 finished: bool = False):
        self.modality = modality
        self._items: List[Primitive] = list(items)
        self._finished = finished

    # ------------------------------------------------------------------ state

    @property
    def is_finished(self) -> bool:
        return self._finished

    def set_finished(self):
        self._finished = True

    def set_not_finished(self):
        self._finished = False

    def is_empty(self) -> bool:
        return len(self._items) == 0

    def clone(self) -> "ListPattern":
        return ListPattern(self._items, self.modality, self._finished)

    def add(self, item: Primitive):
        """Add item to the end of the pattern, unless the pattern is finished."""
        if not self._finished:
            self._items.append(item)

    # ------------------------------------------------------------- operations

    def append(self, other: Union["ListPattern", Primitive]) -> "ListPattern":
        """
        Return a new pattern holding these items followed by other's.

        Args:
            other: A list pattern or a single primitive

        Returns:
            ListPattern: Finished only if other is a finished list pattern
        """
        if isinstance(other, ListPattern):
            return ListPattern(self._items + other._items, self.modality, other.is_finished)
        return ListPattern(self._items + [other], self.modality)

    def remove(self, other: "ListPattern") -> "ListPattern":
        """
        Return the items left after dropping the prefix shared with other.

        The result keeps this pattern's finished flag, except when everything
        was consumed by a finished pattern.
        """
        index = 0
        while (index < len(self._items) and index < len(other._items)
               and self._items[index] == other._items[index]):
            index += 1

        result = ListPattern(self._items[index:], self.modality)
        if self._finished and not (result.is_empty() and other.is_finished):
            result.set_finished()
        return result

    def matches(self, other: "ListPattern") -> bool:
        """
        Check whether this pattern is a prefix test for other.

        A finished pattern only matches a finished pattern of the same length.
        """
        if self.modality != other.modality:
            return False
        if self._finished:
            if not other.is_finished or len(self._items) != len(other._items):
                return False
        elif len(self._items) > len(other._items):
            return False
        return self._items == other._items[:len(self._items)]

    def first_item(self) -> "ListPattern":
        """Return a finished pattern holding only the first item (or nothing)."""
        result = ListPattern(self._items[:1], self.modality)
        result.set_finished()
        return result

    def without(self, tokens: Iterable[str]) -> "ListPattern":
        """
        Return a copy without the given tokens and without repeated items.

        Item-square primitives are dropped when their item is one of the tokens.
        """
        excluded = set(tokens)
        result = ListPattern(modality=self.modality)
        for item in self._items:
            key = item.item if isinstance(item, ItemSquarePattern) else item
            if key in excluded or item in result:
                continue
            result.add(item)
        if self._finished:
            result.set_finished()
        return result

    # --------------------------------------------------------------- protocol

    def __len__(self):
        return len(self._items)

    def __iter__(self) -> Iterator[Primitive]:
        return iter(self._items)

    def __getitem__(self, index):
        return self._items[index]

    def __contains__(self, item) -> bool:
        return item in self._items

    def __eq__(self, other):
        if not isinstance(other, ListPattern):
            return NotImplemented
        return (self.modality == other.modality
                and self._finished == other._finished
                and self._items == other._items)

    def __hash__(self):
        return hash((self.modality, self._finished, tuple(self._items)))

    def __str__(self):
        parts = ["<"] + [str(item) for item in self._items]
        if self._finished:
            parts.append("$")
        parts.append(">")
        return " ".join(parts)

    def __repr__(self):
        return f"ListPattern({self}, modality={self.modality.name})"


def visual_pattern(*items: Primitive) -> ListPattern:
    """Create an unfinished visual pattern."""
    return ListPattern(items, Modality.VISUAL)


def verbal_pattern(*items: Primitive) -> ListPattern:
    """Create an unfinished verbal pattern."""
    return ListPattern(items, Modality.VERBAL)


def action_pattern(*items: Primitive) -> ListPattern:
    """Create an unfinished action pattern."""
    return ListPattern(items, Modality.ACTION)
