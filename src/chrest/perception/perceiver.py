"""
Perceiver: scans a scene fixation by fixation.

Each fixation reads the items around the fixated square, strips sentinels,
and hands the resulting pattern to the model's recognise-and-learn cycle so
that recognised chunks accumulate in visual STM.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from chrest.patterns import ItemSquarePattern, ListPattern
from chrest.perception.fixations import DefaultFixationStrategy, FixationStrategy
from chrest.perception.scene import Scene, normalise_pattern

logger = logging.getLogger(__name__)


@dataclass
class Fixation:
    """One perceptual sample of a scene."""

    col: int
    row: int
    time: int
    pattern: ListPattern


class Perceiver:
    """
    Drives fixations over a scene for a model.

    Attributes:
        model: Chrest model recognising what is seen
        field_of_view (int): Squares visible either side of a fixation
        strategy (FixationStrategy): Chooses fixation locations
        fixations (List[Fixation]): Fixations made since the last clear()
    """

    def __init__(self, model, field_of_view: int = 2,
                 strategy: Optional[FixationStrategy] = None):
        self.model = model
        self.field_of_view = field_of_view
        self.strategy = strategy if strategy is not None else DefaultFixationStrategy()
        self.fixations: List[Fixation] = []

    @property
    def last_fixation(self) -> Optional[Fixation]:
        return self.fixations[-1] if self.fixations else None

    def clear(self):
        """Forget past fixations and reset the strategy."""
        self.fixations = []
        self.strategy.reset()

    def perceive(self, scene: Scene, col: int, row: int) -> ListPattern:
        """
        Pattern seen when fixating (col, row).

        When the scene contains its creator, item locations are given
        relative to the creator.
        """
        pattern = normalise_pattern(scene.items_in_scope(col, row, self.field_of_view))
        creator = scene.location_of_creator()
        if creator is None:
            return pattern

        relative = ListPattern(modality=pattern.modality)
        for item in pattern:
            if isinstance(item, ItemSquarePattern):
                item = item.translate(-creator[0], -creator[1])
            relative.add(item)
        return relative

    def scan(self, scene: Scene, number_fixations: int, time: int,
             verbose: bool = False, log_interval: int = 10) -> List[Fixation]:
        """
        Make up to number_fixations fixations on scene at the given time.

        Args:
            scene: Scene to scan
            number_fixations: Fixation budget
            time: Simulated time of the scan
            verbose: Print progress
            log_interval: Fixations between progress lines

        Returns:
            List[Fixation]: Fixations made during this scan
        """
        made = []
        for i in range(number_fixations):
            location = self.strategy.propose(scene, self)
            if location is None:
                logger.debug("Fixation strategy ended the scan after %d fixations", i)
                break

            col, row = location
            pattern = self.perceive(scene, col, row)
            fixation = Fixation(col, row, time, pattern)
            self.fixations.append(fixation)
            made.append(fixation)
            logger.debug("Fixation %d at (%d, %d): %s", i, col, row, pattern)

            if not pattern.is_empty():
                self.model.recognise_and_learn(pattern, time)

            if verbose and (i + 1) % log_interval == 0:
                print(f"Fixation {i + 1}/{number_fixations} | LTM nodes: {self.model.ltm_size}")

        return made
