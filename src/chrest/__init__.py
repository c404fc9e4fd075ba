"""
chrest: a chunking cognitive architecture.

A model learns a discrimination network of chunks from perceived patterns,
keeps recently recognised chunks in short-term memory, and uses them to
build a decaying visual-spatial image of a scene whose objects can be
moved mentally.
"""

__version__ = "0.1.0"

from chrest.config import ChrestConfig
from chrest.engine import Chrest
from chrest.patterns import ItemSquarePattern, ListPattern, Modality
from chrest.perception import Scene
from chrest.spatial import VisualSpatialField

__all__ = [
    "Chrest",
    "ChrestConfig",
    "ItemSquarePattern",
    "ListPattern",
    "Modality",
    "Scene",
    "VisualSpatialField",
]
