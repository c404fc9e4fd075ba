"""
Fixation strategies: where to look next in a scene.

A strategy proposes the square the next fixation lands on. Random choices
come from a seeded numpy RandomState, so a scan is reproducible given the
seed.
"""

from abc import ABC, abstractmethod
from typing import Optional, Sequence, Tuple

import numpy as np

Location = Tuple[int, int]


class FixationStrategy(ABC):
    """Proposes fixation locations for a Perceiver."""

    @abstractmethod
    def propose(self, scene, perceiver) -> Optional[Location]:
        """
        Propose the next fixation.

        Args:
            scene: Scene being scanned
            perceiver: Perceiver doing the scan (gives access to past fixations)

        Returns:
            (col, row) to fixate, or None to end the scan early
        """

    def reset(self):
        """Forget any per-scan state."""


class CentralFixation(FixationStrategy):
    """Always fixate the centre of the scene."""

    def propose(self, scene, perceiver) -> Optional[Location]:
        if scene.width == 0 or scene.height == 0:
            return None
        return scene.width // 2, scene.height // 2


class ScriptedFixations(FixationStrategy):
    """Cycle through a fixed list of locations."""

    def __init__(self, locations: Sequence[Location]):
        if not locations:
            raise ValueError("ScriptedFixations needs at least one location")
        self.locations = [tuple(location) for location in locations]
        self._index = 0

    def propose(self, scene, perceiver) -> Optional[Location]:
        location = self.locations[self._index % len(self.locations)]
        self._index += 1
        return location

    def reset(self):
        self._index = 0


class RandomObjectFixation(FixationStrategy):
    """Fixate a randomly chosen object, or the centre if there are none."""

    def __init__(self, random_seed: Optional[int] = None):
        self.random_state = np.random.RandomState(random_seed)

    def propose(self, scene, perceiver) -> Optional[Location]:
        objects = scene.objects()
        if not objects:
            return CentralFixation().propose(scene, perceiver)
        col, row, _ = objects[self.random_state.randint(len(objects))]
        return col, row


class PeripheralFixation(RandomObjectFixation):
    """
    Fixate an object seen in the periphery of the previous fixation.

    Falls back to a random object when nothing new is in view.
    """

    def propose(self, scene, perceiver) -> Optional[Location]:
        last = perceiver.last_fixation
        if last is None:
            return super().propose(scene, perceiver)

        fov = perceiver.field_of_view
        candidates = [
            (col, row) for col, row, _ in scene.objects()
            if abs(col - last.col) <= fov and abs(row - last.row) <= fov
            and (col, row) != (last.col, last.row)
        ]
        if not candidates:
            return super().propose(scene, perceiver)
        return candidates[self.random_state.randint(len(candidates))]


class DefaultFixationStrategy(FixationStrategy):
    """Central first fixation, peripheral fixations afterwards."""

    def __init__(self, random_seed: Optional[int] = None):
        self.central = CentralFixation()
        self.peripheral = PeripheralFixation(random_seed)

    def propose(self, scene, perceiver) -> Optional[Location]:
        if perceiver.last_fixation is None:
            return self.central.propose(scene, perceiver)
        return self.peripheral.propose(scene, perceiver)
