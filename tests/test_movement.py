"""
Unit tests for moving objects in a visual-spatial field.

The field used by most tests is built from this 3x3 scene with no
fixations, so every object is unrecognised:

    row 0:  .  *  .
    row 1:  .  a  b
    row 2:  .  .  .

Encoding finishes at 150: a at 110, b at 120, empty squares from 125 to 150.
"""

import pytest
from chrest import Chrest
from chrest.exceptions import IllegalMoveError
from chrest.patterns import ItemSquarePattern, visual_pattern
from chrest.perception import Scene, ScriptedFixations
from chrest.perception.scene import CREATOR_TOKEN, EMPTY_SQUARE_TOKEN, UNKNOWN_SQUARE_TOKEN
from chrest.spatial import validate_moves

TIMINGS = dict(object_encoding_time=10, empty_square_encoding_time=5, access_time=100,
               object_movement_time=50, recognised_object_lifespan=10000,
               unrecognised_object_lifespan=5000)


def movement_field(rows=None):
    model = Chrest()
    scene = Scene.from_rows("moves", rows or [
        [".", "*", "."],
        [".", ("a", "A"), ("b", "B")],
        [".", ".", "."],
    ])
    field = model.create_visual_spatial_field(scene, number_fixations=0, time=0, **TIMINGS)
    return model, field


def field_state(field):
    """Comparable copy of every square's log."""
    return {
        (col, row): [(obj.identifier, obj.time_created, obj.terminus, obj.ghost)
                     for obj in field.get_square_log(col, row)]
        for col in range(field.width)
        for row in range(field.height)
    }


def live(field, col, row, time):
    return [obj.identifier for obj in field.get_objects_on_square(col, row, time)]


class TestValidateMoves:
    """Test batch validation."""

    def test_tuples_accepted(self):
        """Test waypoints may be plain tuples."""
        checked = validate_moves([[("a", 1, 1), ItemSquarePattern("a", 0, 1)]])

        assert checked == [[ItemSquarePattern("a", 1, 1), ItemSquarePattern("a", 0, 1)]]

    @pytest.mark.parametrize("moves", [
        [[("a", 1, 1)]],
        [[("a", 1, 1), ("b", 1, 2)]],
        [[(".", 0, 0), (".", 0, 1)]],
        [[("*", 1, 0), ("*", 0, 0)]],
    ])
    def test_malformed(self, moves):
        """Test short, non-serial and sentinel sequences."""
        with pytest.raises(IllegalMoveError):
            validate_moves(moves)


class TestMoveObjects:
    """Test applying move batches."""

    def test_field_setup(self):
        """Test the encoding times the other tests rely on."""
        model, field = movement_field()

        assert model.attention_clock == 150
        assert field.get_square_log(1, 1)[-1].time_created == 110
        assert field.get_square_log(2, 1)[-1].time_created == 120

    def test_move_onto_blind_square(self):
        """Test an object moved onto a blind square is lost."""
        model, field = movement_field()
        finished = model.move_objects_in_visual_spatial_field([[("a", 1, 1), ("a", 1, 0)]], 200)

        assert finished == 350
        assert model.attention_clock == 350

        a = field.get_square_log(1, 1)[-2]
        assert a.identifier == "a"
        assert a.terminus == 300
        placeholder = field.get_square_log(1, 1)[-1]
        assert placeholder.object_class == EMPTY_SQUARE_TOKEN
        assert placeholder.time_created == 300

        assert len(field.get_square_log(1, 0)) == 1
        assert field.get_as_scene(350).is_square_blind(1, 0)
        assert field.get_as_scene(350).get_square_contents(1, 1).object_class == EMPTY_SQUARE_TOKEN

    def test_multi_hop_sequence(self):
        """Test an object moved across an occupied square to an empty one."""
        model, field = movement_field()
        model.move_objects_in_visual_spatial_field(
            [[("b", 2, 1), ("b", 1, 1), ("b", 1, 2)]], 200)

        assert model.attention_clock == 400

        original = field.get_square_log(2, 1)[-2]
        assert original.identifier == "b"
        assert original.terminus == 300
        assert live(field, 2, 1, 400) == [EMPTY_SQUARE_TOKEN]

        # a was refreshed when b was put down next to it
        a = field.get_objects_on_square(1, 1, 400)
        assert [obj.identifier for obj in a] == ["a"]
        assert a[0].terminus == 350 + 5000

        b = field.get_objects_on_square(1, 2, 400)
        assert [obj.identifier for obj in b] == ["b"]
        assert b[0].time_created == 400
        assert b[0].terminus == 400 + 5000
        assert not b[0].recognised(400)

        scene = field.get_as_scene(400)
        assert scene.get_square_contents(1, 2).identifier == "b"
        assert scene.get_square_contents(1, 1).identifier == "a"

    def test_access_charged_once_per_batch(self):
        """Test two sequences share one access cost."""
        model, field = movement_field()
        model.move_objects_in_visual_spatial_field(
            [[("a", 1, 1), ("a", 0, 1)], [("b", 2, 1), ("b", 1, 1)]], 200)

        assert model.attention_clock == 200 + 100 + 50 + 50
        assert live(field, 0, 1, 400) == ["a"]
        assert live(field, 1, 1, 400) == ["b"]
        assert field.get_objects_on_square(1, 1, 400)[0].time_created == 400

    def test_put_down_refreshes_occupant(self):
        """Test objects already on the destination are refreshed."""
        model, field = movement_field()
        model.move_objects_in_visual_spatial_field([[("a", 1, 1), ("a", 2, 1)]], 1000)

        on_square = field.get_objects_on_square(2, 1, 1150)
        assert [obj.identifier for obj in on_square] == ["b", "a"]
        assert on_square[0].terminus == 1150 + 5000

    def test_object_lost_mid_sequence(self):
        """Test later hops of a lost object are skipped without error."""
        model, field = movement_field()
        model.move_objects_in_visual_spatial_field(
            [[("a", 1, 1), ("a", 1, 0), ("a", 0, 0)]], 200)

        assert model.attention_clock == 350
        assert live(field, 0, 0, 350) == [EMPTY_SQUARE_TOKEN]

    def test_creator_moves_stay_eternal(self):
        """Test the creator keeps no terminus after moving."""
        model, field = movement_field([
            [("me", CREATOR_TOKEN), ".", "."],
            [".", ("a", "A"), "."],
            [".", ".", "."],
        ])
        assert model.attention_clock == 145

        model.move_objects_in_visual_spatial_field([[("me", 0, 0), ("me", 0, 1)]], 200)

        creator = field.get_objects_on_square(0, 1, 350)[-1]
        assert creator.is_creator
        assert creator.terminus is None
        assert field.get_creator_location(320) is None
        assert field.get_creator_location(350) == (0, 1)
        assert live(field, 0, 0, 350) == [EMPTY_SQUARE_TOKEN]

    def test_put_down_ends_unencoded_creator_square(self):
        """Test an object put on the creator's blind square replaces the blind entry."""
        model = Chrest()
        scene = Scene.from_rows("moves", [
            [("me", CREATOR_TOKEN), ".", "."],
            [".", ("a", "A"), "."],
            [".", ".", "."],
        ])
        field = model.create_visual_spatial_field(scene, number_fixations=0, time=0,
                                                  encode_creator=False, **TIMINGS)
        assert model.attention_clock == 145

        model.move_objects_in_visual_spatial_field([[("a", 1, 1), ("a", 0, 0)]], 1000)

        placeholder = field.get_square_log(0, 0)[0]
        assert placeholder.is_blind
        assert placeholder.terminus == 1150
        assert live(field, 0, 0, 1200) == ["a"]
        # Once a decays the square is unknown rather than blind
        assert field.get_as_scene(7000).get_square_contents(0, 0).object_class == UNKNOWN_SQUARE_TOKEN

    def test_moved_objects_are_unrecognised(self):
        """Test a recognised object loses that status when moved, and ghosts stay ghosts."""
        model = Chrest.from_config(field_of_view=1, fixation_strategy=ScriptedFixations([(1, 1)]))
        chunk = visual_pattern(ItemSquarePattern("A", 1, 1), ItemSquarePattern("B", 2, 1))
        for _ in range(4):
            model.recognise_and_learn(chunk, model.learning_clock)
        scene = Scene.from_rows("ghost", [
            [".", ".", "."],
            [".", ("a1", "A"), "*"],
            [".", ".", "."],
        ])
        field = model.create_visual_spatial_field(scene, number_fixations=1, time=30000,
                                                  encode_ghost_objects=True, **TIMINGS)
        assert model.attention_clock == 30145

        model.move_objects_in_visual_spatial_field(
            [[("a1", 1, 1), ("a1", 0, 1)], [("g0", 2, 1), ("g0", 0, 0)]], 31000)

        a1 = field.get_objects_on_square(0, 1, 31200)[-1]
        assert a1.identifier == "a1"
        assert not a1.recognised(31150)
        assert a1.terminus == 31150 + 5000

        ghost = field.get_objects_on_square(0, 0, 31200)[-1]
        assert ghost.identifier == "g0"
        assert ghost.ghost
        assert not ghost.recognised(31200)

        # The ghost's old square was blind in reality
        assert field.get_as_scene(31200).is_square_blind(2, 1)


class TestIllegalMoves:
    """Test rejected batches leave the field untouched."""

    @pytest.mark.parametrize("moves, time", [
        ([[("a", 0, 0), ("a", 0, 1)]], 200),
        ([[("a", 1, 1)]], 200),
        ([[("a", 1, 1), ("b", 1, 2)]], 200),
        ([[("a", 1, 1), ("a", 0, 1)], [("b", 0, 0), ("b", 0, 1)]], 200),
        ([[("a", 1, 1), ("a", 0, 1)]], 100),
        ([[("a", 1, 1), ("a", 0, 1)]], 6000),
        ([[(".", 0, 0), (".", 0, 1)]], 200),
    ], ids=["wrong-location", "single-waypoint", "not-serial", "bad-second-sequence",
            "attention-busy", "object-decayed", "sentinel"])
    def test_batch_rejected(self, moves, time):
        """Test the log and attention clock are unchanged."""
        model, field = movement_field()
        before = field_state(field)

        with pytest.raises(IllegalMoveError):
            model.move_objects_in_visual_spatial_field(moves, time)

        assert field_state(field) == before
        assert model.attention_clock == 150

    def test_no_field(self):
        """Test moving without a field."""
        with pytest.raises(IllegalMoveError):
            Chrest().move_objects_in_visual_spatial_field([[("a", 0, 0), ("a", 0, 1)]], 0)


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
