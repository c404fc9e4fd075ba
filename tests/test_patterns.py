"""
Unit tests for patterns.

Tests ListPattern matching, removal, appending and the finished flag.
"""

import pytest
from chrest.patterns import (
    ItemSquarePattern,
    ListPattern,
    Modality,
    action_pattern,
    verbal_pattern,
    visual_pattern,
)


class TestItemSquarePattern:
    """Test ItemSquarePattern."""

    def test_string_form(self):
        """Test string representation."""
        assert str(ItemSquarePattern("A", 1, 2)) == "[A 1 2]"

    def test_translate(self):
        """Test translation returns a shifted copy."""
        item = ItemSquarePattern("A", 1, 2)
        moved = item.translate(-1, 3)

        assert moved == ItemSquarePattern("A", 0, 5)
        assert item == ItemSquarePattern("A", 1, 2)

    def test_hashable(self):
        """Test equal item-squares hash equally."""
        assert len({ItemSquarePattern("A", 1, 2), ItemSquarePattern("A", 1, 2)}) == 1


class TestListPattern:
    """Test ListPattern."""

    def test_factories_set_modality(self):
        """Test factory functions."""
        assert visual_pattern("A").modality == Modality.VISUAL
        assert verbal_pattern("A").modality == Modality.VERBAL
        assert action_pattern("A").modality == Modality.ACTION

    def test_equality_includes_finished_flag(self):
        """Test equality depends on modality, items and finished flag."""
        a = visual_pattern("A", "B")
        b = visual_pattern("A", "B")
        assert a == b

        b.set_finished()
        assert a != b
        assert visual_pattern("A") != verbal_pattern("A")

    def test_add_ignored_once_finished(self):
        """Test finished patterns cannot grow."""
        pattern = visual_pattern("A")
        pattern.set_finished()
        pattern.add("B")

        assert len(pattern) == 1

    def test_string_form(self):
        """Test string representation."""
        pattern = visual_pattern("A", 1, ItemSquarePattern("B", 0, 1))
        assert str(pattern) == "< A 1 [B 0 1] >"

        pattern.set_finished()
        assert str(pattern) == "< A 1 [B 0 1] $ >"
        assert str(ListPattern()) == "< >"

    def test_matches_prefix(self):
        """Test an unfinished pattern matches patterns it is a prefix of."""
        assert visual_pattern("A").matches(visual_pattern("A", "B"))
        assert visual_pattern().matches(visual_pattern("A"))
        assert not visual_pattern("A", "B").matches(visual_pattern("A"))
        assert not visual_pattern("B").matches(visual_pattern("A", "B"))

    def test_matches_requires_same_modality(self):
        """Test modality mismatch never matches."""
        assert not visual_pattern("A").matches(verbal_pattern("A", "B"))

    def test_finished_matches_only_identical_length(self):
        """Test finished patterns only match finished patterns of equal length."""
        finished = visual_pattern("A")
        finished.set_finished()

        other = visual_pattern("A")
        assert not finished.matches(other)

        other.set_finished()
        assert finished.matches(other)

        longer = visual_pattern("A", "B")
        longer.set_finished()
        assert not finished.matches(longer)

    def test_remove_drops_common_prefix(self):
        """Test remove keeps items after the shared prefix."""
        pattern = visual_pattern("A", "B", "C")

        assert pattern.remove(visual_pattern("A")) == visual_pattern("B", "C")
        assert pattern.remove(visual_pattern("A", "X")) == visual_pattern("B", "C")
        assert pattern.remove(visual_pattern("X")) == pattern
        assert pattern.remove(visual_pattern()) == pattern

    def test_remove_finished_flag(self):
        """Test remove keeps the finished flag unless a finished pattern consumed everything."""
        pattern = visual_pattern("A", "B")
        pattern.set_finished()

        rest = pattern.remove(visual_pattern("A", "B"))
        assert rest.is_empty()
        assert rest.is_finished

        other = visual_pattern("A", "B")
        other.set_finished()
        rest = pattern.remove(other)
        assert rest.is_empty()
        assert not rest.is_finished

    def test_append(self):
        """Test append returns a new pattern."""
        a = visual_pattern("A")
        b = visual_pattern("B")
        b.set_finished()

        joined = a.append(b)
        assert list(joined) == ["A", "B"]
        assert joined.is_finished
        assert list(a) == ["A"]

        assert list(a.append("C")) == ["A", "C"]

    def test_first_item(self):
        """Test first item is a finished one-item pattern."""
        first = visual_pattern("A", "B").first_item()
        assert list(first) == ["A"]
        assert first.is_finished

        empty = visual_pattern().first_item()
        assert empty.is_empty()
        assert empty.is_finished

    def test_without_drops_tokens_and_duplicates(self):
        """Test filtering tokens and repeated items."""
        pattern = visual_pattern(
            ItemSquarePattern("A", 0, 0),
            ItemSquarePattern(".", 1, 0),
            ItemSquarePattern("A", 0, 0),
            ItemSquarePattern("B", 2, 0),
        )
        result = pattern.without(["."])

        assert list(result) == [ItemSquarePattern("A", 0, 0), ItemSquarePattern("B", 2, 0)]

    def test_clone_is_independent(self):
        """Test cloning."""
        pattern = visual_pattern("A")
        copy = pattern.clone()
        copy.add("B")

        assert len(pattern) == 1
        assert len(copy) == 2

    def test_container_protocol(self):
        """Test len, indexing, iteration and membership."""
        pattern = visual_pattern("A", "B")

        assert len(pattern) == 2
        assert pattern[1] == "B"
        assert "A" in pattern
        assert list(pattern) == ["A", "B"]


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
