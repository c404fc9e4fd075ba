"""
Object movement in a visual-spatial field.

A batch holds move sequences. Each sequence is the object's current location
followed by the locations it is moved to in turn; every waypoint names the
object's identifier. Field access is charged once per batch, then every hop
costs one pick-up and one put-down. The batch runs on a copy of the field's
log that is committed only when every sequence has been applied, so a
rejected batch leaves the field and the attention clock as they were.
"""

import logging
from typing import List, Sequence, Tuple, Union

from chrest.exceptions import IllegalMoveError
from chrest.patterns import ItemSquarePattern
from chrest.perception.scene import BLIND_SQUARE_TOKEN, EMPTY_SQUARE_TOKEN, NON_OBJECT_TOKENS

logger = logging.getLogger(__name__)

Waypoint = Union[ItemSquarePattern, Tuple[str, int, int]]


def _as_waypoint(waypoint: Waypoint) -> ItemSquarePattern:
    if isinstance(waypoint, ItemSquarePattern):
        return waypoint
    identifier, col, row = waypoint
    return ItemSquarePattern(identifier, col, row)


def validate_moves(moves: Sequence[Sequence[Waypoint]]) -> List[List[ItemSquarePattern]]:
    """
    Check the shape of a batch before anything is touched.

    Args:
        moves: Move sequences

    Returns:
        The sequences as lists of ItemSquarePatterns

    Raises:
        IllegalMoveError: If a sequence has fewer than two waypoints, moves a
            sentinel, or names more than one object
    """
    checked = []
    for index, sequence in enumerate(moves):
        waypoints = [_as_waypoint(waypoint) for waypoint in sequence]
        if len(waypoints) < 2:
            raise IllegalMoveError(
                f"Move sequence {index} needs an initial location and at least one "
                f"destination, got {len(waypoints)} waypoint(s)"
            )

        identifier = waypoints[0].item
        if identifier in NON_OBJECT_TOKENS:
            raise IllegalMoveError(f"Move sequence {index} tries to move {identifier!r}")

        for waypoint in waypoints[1:]:
            if waypoint.item != identifier:
                raise IllegalMoveError(
                    f"Move sequence {index} is not serial: {waypoint.item!r} appears "
                    f"in the moves of {identifier!r}"
                )
        checked.append(waypoints)
    return checked


def apply_moves(field, moves: Sequence[Sequence[Waypoint]], time: int) -> int:
    """
    Apply a batch of move sequences to a visual-spatial field.

    Args:
        field: VisualSpatialField to change
        moves: Move sequences
        time: Time the batch is requested

    Returns:
        int: Time the batch finished (the new attention clock)

    Raises:
        IllegalMoveError: If attention is busy at time, the batch is malformed,
            or a sequence's object is not alive at its initial location
    """
    model = field.model
    if not model.attention_free(time):
        raise IllegalMoveError(
            f"Attention is busy until {model.attention_clock}, cannot move objects at {time}"
        )

    sequences = validate_moves(moves)
    log = field.snapshot()
    time += field.access_time

    for sequence in sequences:
        source = sequence[0]
        col, row = source.column, source.row

        for hop, destination in enumerate(sequence[1:]):
            mover = None
            for obj in log.get((col, row), []):
                if obj.identifier == source.item and obj.alive(time):
                    mover = obj
                    break

            if mover is None:
                if hop == 0:
                    raise IllegalMoveError(
                        f"No live object {source.item!r} at ({col}, {row}) at time {time}"
                    )
                # Lost on an earlier hop, e.g. put down on a blind square
                break

            _pick_up(field, log, mover, col, row, time)
            time += field.object_movement_time
            _put_down(field, log, mover, destination.column, destination.row, time)
            col, row = destination.column, destination.row

    field.commit(log)
    model.attention_clock = time
    return time


def _refresh_others(entries, mover, time: int):
    for obj in entries:
        if obj is not mover and obj.alive(time) and not obj.is_creator:
            obj.refresh(time)


def _pick_up(field, log, mover, col: int, row: int, time: int):
    entries = log[(col, row)]
    mover.terminate(time)
    _refresh_others(entries, mover, time)

    occupied = any(obj.is_concrete and obj.alive(time) for obj in entries)
    if not occupied:
        if field.scene_encoded.is_square_blind(col, row):
            entries.append(field.new_object(BLIND_SQUARE_TOKEN, BLIND_SQUARE_TOKEN, time))
        else:
            entries.append(field.new_object(EMPTY_SQUARE_TOKEN, EMPTY_SQUARE_TOKEN, time))
    logger.debug("Picked up %s from (%d, %d) at %d", mover.identifier, col, row, time)


def _put_down(field, log, mover, col: int, row: int, time: int):
    if not field.in_bounds(col, row) or field.scene_encoded.is_square_blind(col, row):
        logger.debug("%s moved onto blind square (%d, %d) at %d and is lost",
                     mover.identifier, col, row, time)
        return

    entries = log[(col, row)]
    for obj in entries:
        if not obj.alive(time):
            continue
        if obj.is_empty or obj.is_blind:
            obj.terminate(time)
        elif not obj.is_creator:
            obj.refresh(time)

    entries.append(field.new_object(mover.identifier, mover.object_class, time,
                                    recognised=False, ghost=mover.ghost))
    logger.debug("Put down %s on (%d, %d) at %d", mover.identifier, col, row, time)
