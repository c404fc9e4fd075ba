"""
Objects held in a visual-spatial field.

Each object lives from its creation time up to (but excluding) its terminus.
A missing terminus means the object never decays; blind placeholders and the
creator are created that way. Whether the object is currently recognised is
kept as a history so that it can be asked about any past time.
"""

from bisect import bisect_right, insort
from typing import List, Optional, Tuple

from chrest.perception.scene import (
    BLIND_SQUARE_TOKEN,
    CREATOR_TOKEN,
    EMPTY_SQUARE_TOKEN,
    SceneObject,
)


class VisualSpatialFieldObject:
    """
    An object with a lifespan in a visual-spatial field.

    The object only knows its own lifespans, never the field holding it.

    Attributes:
        identifier (str): Unique identifier (class token for blind/empty squares)
        object_class (str): Class of the object
        time_created (int): Start of the object's life
        terminus (Optional[int]): End of the object's life, None if eternal
        ghost (bool): Inferred from recognition rather than seen
        recognised_lifespan (int): Lifespan granted when refreshed while recognised
        unrecognised_lifespan (int): Lifespan granted when refreshed while unrecognised
    """

    def __init__(self, identifier: str, object_class: str, time_created: int,
                 recognised_lifespan: int, unrecognised_lifespan: int,
                 recognised: bool = False, ghost: bool = False,
                 set_terminus: bool = True):
        """
        Create an object.

        Args:
            identifier: Object identifier
            object_class: Object class
            time_created: Creation time
            recognised_lifespan: Lifespan when recognised
            unrecognised_lifespan: Lifespan when unrecognised
            recognised: Recognised status at creation
            ghost: Whether the object is a ghost
            set_terminus: If False the terminus stays None (eternal)
        """
        if object_class in (BLIND_SQUARE_TOKEN, EMPTY_SQUARE_TOKEN):
            identifier = object_class

        self.identifier = identifier
        self.object_class = object_class
        self.time_created = time_created
        self.ghost = ghost
        self.recognised_lifespan = recognised_lifespan
        self.unrecognised_lifespan = unrecognised_lifespan
        self._recognised_history: List[Tuple[int, bool]] = [(time_created, recognised)]

        self.terminus: Optional[int] = None
        if set_terminus and not self.is_blind and not self.is_creator:
            self.terminus = time_created + self._lifespan(recognised)

    # -------------------------------------------------------------- categories

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
        """True for objects that may be moved or must have unique identifiers."""
        return not (self.is_blind or self.is_empty)

    # ---------------------------------------------------------------- lifetime

    def _lifespan(self, recognised: bool) -> int:
        return self.recognised_lifespan if recognised else self.unrecognised_lifespan

    def alive(self, time: int) -> bool:
        return self.time_created <= time and (self.terminus is None or time < self.terminus)

    def recognised(self, time: int) -> bool:
        """Recognised status at time (False before creation)."""
        index = bisect_right(self._recognised_history, (time, True)) - 1
        if index < 0:
            return False
        return self._recognised_history[index][1]

    def _set_recognised_status(self, time: int, recognised: bool, update_terminus: bool):
        if not self.alive(time):
            return
        # One status per instant: the latest call wins
        self._recognised_history = [entry for entry in self._recognised_history if entry[0] != time]
        insort(self._recognised_history, (time, recognised))
        if update_terminus:
            self.refresh(time)

    def set_recognised(self, time: int, update_terminus: bool = True):
        self._set_recognised_status(time, True, update_terminus)

    def set_unrecognised(self, time: int, update_terminus: bool = True):
        self._set_recognised_status(time, False, update_terminus)

    def refresh(self, time: int):
        """Extend the life of a live, mortal object from time onwards."""
        if self.alive(time) and self.terminus is not None:
            self.terminus = time + self._lifespan(self.recognised(time))

    def terminate(self, time: int):
        """End the life of a live object at time."""
        if self.alive(time):
            self.terminus = time

    # ----------------------------------------------------------------- helpers

    def as_scene_object(self) -> SceneObject:
        return SceneObject(self.identifier, self.object_class)

    def clone(self) -> "VisualSpatialFieldObject":
        copy = VisualSpatialFieldObject.__new__(VisualSpatialFieldObject)
        copy.__dict__.update(self.__dict__)
        copy._recognised_history = list(self._recognised_history)
        return copy

    def __repr__(self):
        flags = " ghost" if self.ghost else ""
        return (f"VisualSpatialFieldObject({self.identifier!r}, {self.object_class!r}, "
                f"created={self.time_created}, terminus={self.terminus}{flags})")
