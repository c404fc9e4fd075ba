"""Visual-spatial field: a decaying mental image of a scene."""

from chrest.spatial.field import VisualSpatialField
from chrest.spatial.field_object import VisualSpatialFieldObject
from chrest.spatial.movement import apply_moves, validate_moves

__all__ = ["VisualSpatialField", "VisualSpatialFieldObject", "apply_moves", "validate_moves"]
