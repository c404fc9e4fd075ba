"""
Visual-spatial field: a time-indexed mental copy of a scene.

The field is built by scanning a scene with a Chrest model. Objects in
recognised chunks are encoded first, then the objects nothing recognised,
then empty squares. Each coordinate keeps an append-only log of the objects
that ever occupied it. "Changing" a square means closing the current
object's life and appending a new object, so the field can be read as it
was at any time.
"""

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from chrest.exceptions import ConfigurationError, DuplicateIdentifierError
from chrest.patterns import ItemSquarePattern, Modality
from chrest.perception.scene import (
    BLIND_SQUARE_TOKEN,
    EMPTY_SQUARE_TOKEN,
    GHOST_ID_PREFIX,
    UNKNOWN_SQUARE_TOKEN,
    Scene,
)
from chrest.spatial.field_object import VisualSpatialFieldObject
from chrest.spatial.movement import apply_moves

logger = logging.getLogger(__name__)

Coordinate = Tuple[int, int]
Log = Dict[Coordinate, List[VisualSpatialFieldObject]]


class VisualSpatialField:
    """
    Temporal, per-coordinate store of the objects a model believes are in a scene.

    Attributes:
        model: Chrest model whose attention clock the field charges
        scene_encoded (Scene): Scene the field was built from
        width (int): Number of columns (0 if the scene was entirely blind)
        height (int): Number of rows (0 if the scene was entirely blind)
        creation_time (int): Time construction was requested
        object_encoding_time (int): Cost of encoding a chunk or a lone object
        empty_square_encoding_time (int): Cost of encoding an empty square
        access_time (int): Cost of accessing the field before encoding or moving
        object_movement_time (int): Cost of moving an object one hop
        recognised_object_lifespan (int): Lifespan of recognised objects
        unrecognised_object_lifespan (int): Lifespan of unrecognised objects
    """

    def __init__(self, model, scene: Scene,
                 object_encoding_time: int,
                 empty_square_encoding_time: int,
                 access_time: int,
                 object_movement_time: int,
                 recognised_object_lifespan: int,
                 unrecognised_object_lifespan: int,
                 number_fixations: int,
                 time: int,
                 encode_ghost_objects: bool = False,
                 encode_creator: bool = True):
        """
        Scan scene with model and encode what is seen.

        Args:
            model: Chrest model used for recognition
            scene: Scene to encode
            object_encoding_time: Cost per recognised chunk and per lone object
            empty_square_encoding_time: Cost per empty square
            access_time: Cost of accessing the field
            object_movement_time: Cost of moving an object one hop
            recognised_object_lifespan: Lifespan of recognised objects
            unrecognised_object_lifespan: Lifespan of unrecognised objects
            number_fixations: Fixation budget for the scan
            time: Time construction starts
            encode_ghost_objects: Encode recognised objects absent from the scene
            encode_creator: Encode the scene's creator

        Raises:
            DuplicateIdentifierError: If two live objects would share an identifier
        """
        timings = {
            "object_encoding_time": object_encoding_time,
            "empty_square_encoding_time": empty_square_encoding_time,
            "access_time": access_time,
            "object_movement_time": object_movement_time,
            "recognised_object_lifespan": recognised_object_lifespan,
            "unrecognised_object_lifespan": unrecognised_object_lifespan,
            "number_fixations": number_fixations,
        }
        for name, value in timings.items():
            if value < 0:
                raise ConfigurationError(f"{name} must be non-negative, got {value}")

        self.model = model
        self.scene_encoded = scene
        self.creation_time = time
        self.object_encoding_time = object_encoding_time
        self.empty_square_encoding_time = empty_square_encoding_time
        self.access_time = access_time
        self.object_movement_time = object_movement_time
        self.recognised_object_lifespan = recognised_object_lifespan
        self.unrecognised_object_lifespan = unrecognised_object_lifespan
        self._ghost_count = 0
        self._log: Log = {}

        if scene.is_entirely_blind():
            self.width = 0
            self.height = 0
            logger.info("Scene '%s' is entirely blind, nothing encoded", scene.name)
            return

        self.width = scene.width
        self.height = scene.height

        log, finish_time = self._encode(scene, number_fixations, time,
                                        encode_ghost_objects, encode_creator)
        self._check_identifiers(log)

        self._log = log
        model.attention_clock = finish_time
        logger.info("Encoded scene '%s' (%dx%d) from %d to %d",
                    scene.name, self.width, self.height, time, finish_time)

    # ---------------------------------------------------------------- building

    def new_object(self, identifier: str, object_class: str, time: int,
                   recognised: bool = False, ghost: bool = False) -> VisualSpatialFieldObject:
        """Create an object with this field's lifespans."""
        return VisualSpatialFieldObject(
            identifier, object_class, time,
            self.recognised_object_lifespan, self.unrecognised_object_lifespan,
            recognised=recognised, ghost=ghost,
        )

    def _next_ghost_identifier(self) -> str:
        identifier = f"{GHOST_ID_PREFIX}{self._ghost_count}"
        self._ghost_count += 1
        return identifier

    def _encode(self, scene: Scene, number_fixations: int, time: int,
                encode_ghost_objects: bool, encode_creator: bool) -> Tuple[Log, int]:
        """Build the log. Returns it with the time encoding finished."""
        time += self.access_time

        log: Log = {}
        for col, row, contents in scene.squares():
            if contents.is_creator and encode_creator:
                log[(col, row)] = [self.new_object(contents.identifier, contents.object_class, time)]
            else:
                log[(col, row)] = [self.new_object(BLIND_SQUARE_TOKEN, BLIND_SQUARE_TOKEN, time)]

        # Recognised chunks, oldest in STM first
        self.model.scan_scene(scene, number_fixations, self.creation_time)
        chunks = [
            node.image for node in reversed(self.model.get_stm(Modality.VISUAL).items())
            if not node.is_root() and not node.image.is_empty()
        ]
        creator = scene.location_of_creator()
        offset = creator if creator is not None else (0, 0)

        for chunk in chunks:
            time += self.object_encoding_time
            for item in chunk:
                if not isinstance(item, ItemSquarePattern):
                    continue
                col, row = item.column + offset[0], item.row + offset[1]
                if scene.in_bounds(col, row):
                    self._encode_recognised(log, scene, item.item, col, row, time,
                                            encode_ghost_objects)

        # Objects nothing recognised
        for col, row, contents in scene.squares():
            if not contents.is_concrete:
                continue
            latest = log[(col, row)][-1]
            if (latest.identifier == contents.identifier and not latest.ghost
                    and latest.alive(time)):
                continue
            time += self.object_encoding_time
            latest.terminate(time)
            log[(col, row)].append(self.new_object(contents.identifier, contents.object_class, time))
            logger.debug("Encoded unrecognised %s at (%d, %d), time %d",
                         contents.identifier, col, row, time)

        # Empty squares
        for col, row, contents in scene.squares():
            if not contents.is_empty:
                continue
            time += self.empty_square_encoding_time
            log[(col, row)][-1].terminate(time)
            log[(col, row)].append(self.new_object(EMPTY_SQUARE_TOKEN, EMPTY_SQUARE_TOKEN, time))

        return log, time

    def _encode_recognised(self, log: Log, scene: Scene, object_class: str,
                           col: int, row: int, time: int, encode_ghost_objects: bool):
        """Encode one object of a recognised chunk at (col, row)."""
        reality = scene.get_square_contents(col, row)
        entries = log[(col, row)]
        latest = entries[-1]

        if reality.is_concrete and reality.object_class == object_class:
            if (latest.identifier == reality.identifier and not latest.ghost
                    and latest.alive(time)):
                latest.set_recognised(time)
                return
            latest.terminate(time)
            entries.append(self.new_object(reality.identifier, reality.object_class,
                                           time, recognised=True))
            logger.debug("Encoded recognised %s at (%d, %d), time %d",
                         reality.identifier, col, row, time)
            return

        if not encode_ghost_objects or (latest.is_creator and latest.alive(time)):
            return

        if latest.alive(time) and not latest.is_blind:
            if not latest.ghost:
                # A real object already here outranks the ghost
                latest.refresh(time)
                return
            if latest.object_class == object_class:
                latest.set_recognised(time)
                return

        latest.terminate(time)
        ghost = self.new_object(self._next_ghost_identifier(), object_class, time,
                                recognised=True, ghost=True)
        entries.append(ghost)
        logger.debug("Encoded ghost %s (%s) at (%d, %d), time %d",
                     ghost.identifier, object_class, col, row, time)

    @staticmethod
    def _check_identifiers(log: Log):
        """Raise if two concrete objects with one identifier are ever alive together."""
        lives: Dict[str, List[Tuple[int, float, Coordinate]]] = {}
        for coordinate, entries in log.items():
            for obj in entries:
                end = float("inf") if obj.terminus is None else obj.terminus
                if obj.is_concrete and obj.time_created < end:
                    lives.setdefault(obj.identifier, []).append((obj.time_created, end, coordinate))

        for identifier, spans in lives.items():
            for i, (start_a, end_a, where_a) in enumerate(spans):
                for start_b, end_b, where_b in spans[i + 1:]:
                    if start_b < end_a and start_a < end_b:
                        raise DuplicateIdentifierError(
                            f"Identifier {identifier!r} is used by live objects at "
                            f"{where_a} and {where_b}"
                        )

    # ----------------------------------------------------------------- queries

    def _entries(self, col: int, row: int) -> List[VisualSpatialFieldObject]:
        try:
            return self._log[(col, row)]
        except KeyError:
            raise IndexError(f"Square ({col}, {row}) is outside the visual-spatial field") from None

    def in_bounds(self, col: int, row: int) -> bool:
        return (col, row) in self._log

    def get_square_log(self, col: int, row: int) -> List[VisualSpatialFieldObject]:
        """Every object ever placed on (col, row), oldest first."""
        return list(self._entries(col, row))

    def get_objects_on_square(self, col: int, row: int,
                              time: Optional[int] = None) -> List[VisualSpatialFieldObject]:
        """
        Objects on (col, row).

        Args:
            col: Column
            row: Row
            time: If given, only objects alive at this time

        Returns:
            List[VisualSpatialFieldObject]: Oldest first
        """
        entries = self._entries(col, row)
        if time is None:
            return list(entries)
        return [obj for obj in entries if obj.alive(time)]

    def get_creator_location(self, time: int) -> Optional[Coordinate]:
        for coordinate, entries in self._log.items():
            if any(obj.is_creator and obj.alive(time) for obj in entries):
                return coordinate
        return None

    def get_as_scene(self, time: int, include_ghosts: bool = True) -> Scene:
        """
        The field as a scene at time.

        Each square shows its latest live object. A square with nothing alive
        is blind if nothing had been placed on it yet, unknown otherwise.

        Args:
            time: Time to read the field at
            include_ghosts: If False, live ghosts are treated as absent

        Returns:
            Scene: Same dimensions as the field
        """
        scene = Scene(f"{self.scene_encoded.name} @ {time}", self.width, self.height)
        for (col, row), entries in self._log.items():
            shown = None
            for obj in reversed(entries):
                if obj.alive(time) and (include_ghosts or not obj.ghost):
                    shown = obj
                    break

            if shown is not None:
                scene.add_object(col, row, shown.identifier, shown.object_class)
            elif any(obj.time_created <= time for obj in entries):
                scene.add_object(col, row, UNKNOWN_SQUARE_TOKEN, UNKNOWN_SQUARE_TOKEN)
        return scene

    # ---------------------------------------------------------------- mutation

    def snapshot(self) -> Log:
        """Deep copy of the log."""
        return {coordinate: [obj.clone() for obj in entries]
                for coordinate, entries in self._log.items()}

    def commit(self, log: Log):
        """Replace the log, e.g. with a snapshot mutated by the move protocol."""
        self._log = log

    def move_objects(self, moves: Sequence[Sequence[ItemSquarePattern]], time: int) -> int:
        """
        Apply a batch of move sequences at time.

        Each sequence lists an object's current location followed by the
        locations it is moved to in turn. The batch is applied completely or
        not at all.

        Returns:
            int: Time the moves finished

        Raises:
            IllegalMoveError: If the batch is malformed or attention is busy
        """
        return apply_moves(self, moves, time)

    def __repr__(self):
        return (f"VisualSpatialField(scene={self.scene_encoded.name!r}, "
                f"width={self.width}, height={self.height})")
