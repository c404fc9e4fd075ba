"""
Scenes: 2-D grids of named objects.

A scene is what the model looks at. Every square holds exactly one
SceneObject; squares that cannot be seen hold the blind sentinel and
squares known to be vacant hold the empty sentinel. Coordinates are
(column, row) with both starting at 0.
"""

from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple, Union

import numpy as np

from chrest.exceptions import DimensionMismatchError
from chrest.patterns import ItemSquarePattern, ListPattern, Modality

BLIND_SQUARE_TOKEN = "*"
EMPTY_SQUARE_TOKEN = "."
CREATOR_TOKEN = "SELF"
UNKNOWN_SQUARE_TOKEN = "?"
GHOST_ID_PREFIX = "g"

NON_OBJECT_TOKENS = (BLIND_SQUARE_TOKEN, EMPTY_SQUARE_TOKEN, UNKNOWN_SQUARE_TOKEN)
SENTINEL_TOKENS = NON_OBJECT_TOKENS + (CREATOR_TOKEN,)


@dataclass(frozen=True)
class SceneObject:
    """
    Contents of one square.

    Blind, empty and unknown squares always use their class token as
    identifier.
    """

    identifier: str
    object_class: str

    def __post_init__(self):
        if self.object_class in NON_OBJECT_TOKENS:
            object.__setattr__(self, "identifier", self.object_class)

    @property
    def is_blind(self) -> bool:
        return self.object_class == BLIND_SQUARE_TOKEN

    @property
    def is_empty(self) -> bool:
        return self.object_class == EMPTY_SQUARE_TOKEN

    @property
    def is_creator(self) -> bool:
        return self.object_class == CREATOR_TOKEN

    @property
    def is_concrete(self) -> bool:
        """True for real objects: not a sentinel and not the creator."""
        return self.object_class not in SENTINEL_TOKENS


BLIND_SQUARE = SceneObject(BLIND_SQUARE_TOKEN, BLIND_SQUARE_TOKEN)
EMPTY_SQUARE = SceneObject(EMPTY_SQUARE_TOKEN, EMPTY_SQUARE_TOKEN)
UNKNOWN_SQUARE = SceneObject(UNKNOWN_SQUARE_TOKEN, UNKNOWN_SQUARE_TOKEN)


def normalise_pattern(pattern: ListPattern) -> ListPattern:
    """Drop sentinel items, the creator and duplicates from a perceived pattern."""
    return pattern.without(SENTINEL_TOKENS)


class Scene:
    """
    A width x height grid of SceneObjects.

    Attributes:
        name (str): Human-readable name
        width (int): Number of columns
        height (int): Number of rows
    """

    def __init__(self, name: str, width: int, height: int):
        """
        Create a scene whose squares are all blind.

        Args:
            name: Scene name
            width: Number of columns (>= 0)
            height: Number of rows (>= 0)
        """
        if width < 0 or height < 0:
            raise ValueError(f"Scene dimensions must be non-negative, got {width}x{height}")
        self.name = name
        self.width = width
        self.height = height
        self._squares = np.full((width, height), BLIND_SQUARE, dtype=object)

    @classmethod
    def from_rows(cls, name: str,
                  rows: Sequence[Sequence[Union[str, Tuple[str, str]]]]) -> "Scene":
        """
        Build a scene from rows of square descriptions.

        rows[r][c] describes square (c, r). A description is either an
        (identifier, class) pair or a single token used as both.

        Args:
            name: Scene name
            rows: Equal-length rows of square descriptions

        Returns:
            Scene: The populated scene
        """
        height = len(rows)
        width = len(rows[0]) if height else 0
        scene = cls(name, width, height)
        for row, squares in enumerate(rows):
            if len(squares) != width:
                raise ValueError(f"Row {row} has {len(squares)} squares, expected {width}")
            for col, square in enumerate(squares):
                identifier, object_class = (square, square) if isinstance(square, str) else square
                scene.add_object(col, row, identifier, object_class)
        return scene

    # ----------------------------------------------------------------- editing

    def _check_bounds(self, col: int, row: int):
        if not self.in_bounds(col, row):
            raise IndexError(f"Square ({col}, {row}) is outside {self.width}x{self.height} scene")

    def in_bounds(self, col: int, row: int) -> bool:
        return 0 <= col < self.width and 0 <= row < self.height

    def add_object(self, col: int, row: int, identifier: str, object_class: str):
        """Place an object on a square, replacing whatever was there."""
        self._check_bounds(col, row)
        self._squares[col, row] = SceneObject(identifier, object_class)

    def add_blind_square(self, col: int, row: int):
        self.add_object(col, row, BLIND_SQUARE_TOKEN, BLIND_SQUARE_TOKEN)

    def add_empty_square(self, col: int, row: int):
        self.add_object(col, row, EMPTY_SQUARE_TOKEN, EMPTY_SQUARE_TOKEN)

    def add_creator(self, col: int, row: int, identifier: str = "0"):
        self.add_object(col, row, identifier, CREATOR_TOKEN)

    # ----------------------------------------------------------------- queries

    def get_square_contents(self, col: int, row: int) -> Optional[SceneObject]:
        """Return the object on a square, or None outside the scene."""
        if not self.in_bounds(col, row):
            return None
        return self._squares[col, row]

    def is_square_blind(self, col: int, row: int) -> bool:
        """Squares outside the scene count as blind."""
        contents = self.get_square_contents(col, row)
        return contents is None or contents.is_blind

    def is_entirely_blind(self) -> bool:
        """True when every square is blind, ignoring the creator's square."""
        return all(obj.is_blind or obj.is_creator for obj in self._squares.flat)

    def location_of_creator(self) -> Optional[Tuple[int, int]]:
        for col, row, obj in self.squares():
            if obj.is_creator:
                return col, row
        return None

    def squares(self) -> Iterator[Tuple[int, int, SceneObject]]:
        """Yield (col, row, object) for every square, row by row."""
        for row in range(self.height):
            for col in range(self.width):
                yield col, row, self._squares[col, row]

    def objects(self) -> List[Tuple[int, int, SceneObject]]:
        """Concrete objects in the scene with their locations."""
        return [(col, row, obj) for col, row, obj in self.squares() if obj.is_concrete]

    def items_in_scope(self, col: int, row: int, scope: int) -> ListPattern:
        """
        Items within scope squares of (col, row), as an unfinished visual pattern.

        Blind squares and squares outside the scene are skipped. Items are
        object classes located on their squares.
        """
        pattern = ListPattern(modality=Modality.VISUAL)
        for r in range(row - scope, row + scope + 1):
            for c in range(col - scope, col + scope + 1):
                contents = self.get_square_contents(c, r)
                if contents is not None and not contents.is_blind:
                    pattern.add(ItemSquarePattern(contents.object_class, c, r))
        return pattern

    def as_list_pattern(self) -> ListPattern:
        """Every non-blind square as an item-square pattern, row by row."""
        return ListPattern(
            (ItemSquarePattern(obj.object_class, col, row)
             for col, row, obj in self.squares() if not obj.is_blind),
            Modality.VISUAL,
        )

    # ----------------------------------------------------------------- metrics

    def _check_dimensions(self, other: "Scene"):
        if self.width != other.width or self.height != other.height:
            raise DimensionMismatchError(
                f"Cannot compare {self.width}x{self.height} scene '{self.name}' with "
                f"{other.width}x{other.height} scene '{other.name}'"
            )

    def _placed(self, other: "Scene") -> int:
        """Concrete objects here whose class sits on the same square in other."""
        count = 0
        for col, row, obj in self.objects():
            theirs = other.get_square_contents(col, row)
            if theirs.is_concrete and theirs.object_class == obj.object_class:
                count += 1
        return count

    def errors_of_commission(self, other: "Scene") -> int:
        """Objects in this scene beyond those in other."""
        self._check_dimensions(other)
        return max(0, len(self.objects()) - len(other.objects()))

    def errors_of_omission(self, other: "Scene") -> int:
        """Objects in other beyond those in this scene."""
        self._check_dimensions(other)
        return max(0, len(other.objects()) - len(self.objects()))

    def precision(self, other: "Scene") -> float:
        """Share of this scene's objects that are correctly placed in other."""
        self._check_dimensions(other)
        mine = len(self.objects())
        if mine == 0 or not other.objects():
            return 0.0
        return self._placed(other) / mine

    def recall(self, other: "Scene") -> float:
        """Share of other's objects reproduced on the same square here."""
        self._check_dimensions(other)
        theirs = len(other.objects())
        if theirs == 0 or not self.objects():
            return 0.0
        return other._placed(self) / theirs

    def __str__(self):
        lines = []
        for row in reversed(range(self.height)):
            lines.append(" ".join(self._squares[col, row].object_class for col in range(self.width)))
        return "\n".join(lines)

    def __repr__(self):
        return f"Scene(name={self.name!r}, width={self.width}, height={self.height})"
