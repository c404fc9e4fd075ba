"""Scenes and the perceptual pathway that scans them."""

from chrest.perception.fixations import (
    CentralFixation,
    DefaultFixationStrategy,
    FixationStrategy,
    PeripheralFixation,
    RandomObjectFixation,
    ScriptedFixations,
)
from chrest.perception.perceiver import Fixation, Perceiver
from chrest.perception.scene import (
    BLIND_SQUARE_TOKEN,
    CREATOR_TOKEN,
    EMPTY_SQUARE_TOKEN,
    GHOST_ID_PREFIX,
    UNKNOWN_SQUARE_TOKEN,
    Scene,
    SceneObject,
    normalise_pattern,
)

__all__ = [
    "BLIND_SQUARE_TOKEN",
    "CREATOR_TOKEN",
    "EMPTY_SQUARE_TOKEN",
    "GHOST_ID_PREFIX",
    "UNKNOWN_SQUARE_TOKEN",
    "CentralFixation",
    "DefaultFixationStrategy",
    "Fixation",
    "FixationStrategy",
    "Perceiver",
    "PeripheralFixation",
    "RandomObjectFixation",
    "Scene",
    "SceneObject",
    "ScriptedFixations",
    "normalise_pattern",
]
