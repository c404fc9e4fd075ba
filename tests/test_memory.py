"""
Unit tests for memory classes.

Tests Node, Link and Stm classes.
"""

import pytest
from chrest.memory import Link, Node, Stm
from chrest.patterns import action_pattern, visual_pattern


def make_node(reference, *items, root=False):
    return Node(reference, visual_pattern(*items), root=root)


class TestNode:
    """Test Node class."""

    def test_initialization(self):
        """Test node initialization."""
        node = make_node(3, "A")

        assert node.reference == 3
        assert node.image.is_empty()
        assert node.children == []
        assert node.action_links == {}
        assert node.associated_node is None
        assert node.named_by is None
        assert not node.is_root()

    def test_children_most_recent_first(self):
        """Test new links are tried first."""
        parent = make_node(0, root=True)
        first = make_node(1, "A")
        second = make_node(2, "B")

        parent.add_child(visual_pattern("A"), first, 0)
        parent.add_child(visual_pattern("B"), second, 5)

        assert [link.child for link in parent.children] == [second, first]
        assert parent.children[0].creation_time == 5

    def test_has_test(self):
        """Test lookup of existing tests."""
        parent = make_node(0, root=True)
        parent.add_child(visual_pattern("A"), make_node(1, "A"), 0)

        assert parent.has_test(visual_pattern("A"))
        assert not parent.has_test(visual_pattern("B"))

    def test_size_and_depth(self):
        """Test subtree statistics."""
        root = make_node(0, root=True)
        a = make_node(1, "A")
        ab = make_node(2, "A", "B")
        c = make_node(3, "C")
        root.add_child(visual_pattern("A"), a, 0)
        root.add_child(visual_pattern("C"), c, 0)
        a.add_child(visual_pattern("B"), ab, 0)

        assert root.size() == 4
        # Leaves: ab at depth 2, c at depth 1
        assert root.average_depth() == pytest.approx(1.5)
        assert make_node(9).average_depth() == 0.0

    def test_average_image_size(self):
        """Test mean image size ignores roots."""
        root = make_node(0, root=True)
        a = make_node(1, "A")
        a.set_image(visual_pattern("A", "B"))
        root.add_child(visual_pattern("A"), a, 0)

        assert root.average_image_size() == pytest.approx(2.0)

    def test_action_links(self):
        """Test action links start at zero and only accept action nodes."""
        node = make_node(1, "A")
        action = Node(2, action_pattern("MOVE"))

        assert node.add_action_link(action)
        assert node.action_links[action] == 0.0
        assert not node.add_action_link(action)
        assert not node.add_action_link(make_node(3, "B"))

    def test_reinforce_action_link(self):
        """Test reinforcement accumulates."""
        node = make_node(1, "A")
        action = Node(2, action_pattern("MOVE"))

        assert node.reinforce_action_link(action, 0.5) == pytest.approx(0.5)
        assert node.reinforce_action_link(action, 0.25) == pytest.approx(0.75)


class TestLink:
    """Test Link class."""

    def test_passes(self):
        """Test links pass patterns their test is a prefix of."""
        link = Link(visual_pattern("A"), make_node(1, "A"))

        assert link.passes(visual_pattern("A", "B"))
        assert not link.passes(visual_pattern("B"))


class TestStm:
    """Test Stm class."""

    def test_initialization(self):
        """Test STM initialization."""
        stm = Stm(3)

        assert stm.size == 3
        assert len(stm) == 0
        assert stm.is_empty()

    def test_invalid_size(self):
        """Test STM rejects sizes below one."""
        with pytest.raises(ValueError):
            Stm(0)

    def test_most_recent_first(self):
        """Test added nodes go to the front."""
        stm = Stm(3)
        a, b = make_node(1, "A"), make_node(2, "B")
        stm.add(a)
        stm.add(b)

        assert stm.items() == [b, a]
        assert stm.item(0) is b

    def test_capacity_evicts_oldest(self):
        """Test STM never exceeds capacity."""
        stm = Stm(2)
        nodes = [make_node(i, str(i)) for i in range(1, 5)]
        for node in nodes:
            stm.add(node)

        assert len(stm) == 2
        assert stm.items() == [nodes[3], nodes[2]]

    def test_duplicate_moves_to_front(self):
        """Test re-adding a node moves it instead of growing the list."""
        stm = Stm(3)
        a, b = make_node(1, "A"), make_node(2, "B")
        stm.add(a)
        stm.add(b)
        stm.add(a)

        assert stm.items() == [a, b]
        assert len(stm) == 2

    def test_resize_truncates(self):
        """Test shrinking capacity drops the oldest nodes."""
        stm = Stm(3)
        nodes = [make_node(i, str(i)) for i in range(1, 4)]
        for node in nodes:
            stm.add(node)
        stm.size = 1

        assert stm.items() == [nodes[2]]

    def test_clear(self):
        """Test clearing STM."""
        stm = Stm(2)
        node = make_node(1, "A")
        stm.add(node)
        stm.clear()

        assert stm.is_empty()
        assert node not in stm


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
