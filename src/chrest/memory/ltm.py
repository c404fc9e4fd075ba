"""
Long-term memory: the discrimination network.

The network is a tree of nodes joined by test links. A node stores the test
path that leads to it (its contents) and a chunk (its image). Children are
tried most-recent first and the first link whose test matches wins.
"""

from typing import Dict, Iterator, List, Optional

from chrest.patterns import ListPattern, Modality


class Link:
    """
    Test link from a parent node to a child node.

    Attributes:
        test (ListPattern): Pattern an input must start with to pass
        child (Node): Node reached through this link
        creation_time (int): Time the link was learned
    """

    def __init__(self, test: ListPattern, child: "Node", creation_time: int = 0):
        self.test = test
        self.child = child
        self.creation_time = creation_time

    def passes(self, pattern: ListPattern) -> bool:
        return self.test.matches(pattern)

    def __repr__(self):
        return f"Link(test={self.test}, child={self.child.reference})"


class Node:
    """
    Node of the discrimination network.

    Attributes:
        reference (int): Unique reference number within a model
        contents (ListPattern): Concatenated tests on the path from the root
        image (ListPattern): Chunk associated with this node
        children (List[Link]): Test links, most recently created first
        action_links (Dict[Node, float]): Weighted links to action nodes
        associated_node (Optional[Node]): Node learned to follow this one
        named_by (Optional[Node]): Verbal node naming this one
        creation_time (int): Time the node was created
    """

    def __init__(self, reference: int, contents: ListPattern,
                 image: Optional[ListPattern] = None, creation_time: int = 0,
                 root: bool = False):
        """
        Create a node.

        Args:
            reference: Unique reference number
            contents: Test path leading to the node
            image: Initial image (empty when not given)
            creation_time: Time the node was created
            root: Whether the node is the root of its modality's network
        """
        self.reference = reference
        self.contents = contents
        self.image = image if image is not None else ListPattern(modality=contents.modality)
        self.creation_time = creation_time
        self.children: List[Link] = []
        self.action_links: Dict["Node", float] = {}
        self.associated_node: Optional["Node"] = None
        self.named_by: Optional["Node"] = None
        self._root = root

    @property
    def modality(self) -> Modality:
        return self.contents.modality

    def is_root(self) -> bool:
        return self._root

    # ---------------------------------------------------------------- children

    def add_child(self, test: ListPattern, child: "Node", time: int) -> Link:
        """Add a test link in front of the existing ones."""
        link = Link(test, child, time)
        self.children.insert(0, link)
        return link

    def has_test(self, test: ListPattern) -> bool:
        return any(link.test == test for link in self.children)

    def set_image(self, image: ListPattern):
        self.image = image

    # ------------------------------------------------------------ action links

    def add_action_link(self, action_node: "Node") -> bool:
        """
        Link this node to an action node with a starting weight of 0.0.

        Returns:
            bool: False if action_node is not an action node or is already linked
        """
        if action_node.modality != Modality.ACTION or action_node in self.action_links:
            return False
        self.action_links[action_node] = 0.0
        return True

    def reinforce_action_link(self, action_node: "Node", value: float) -> float:
        """Add value to the link weight and return the new weight."""
        weight = self.action_links.get(action_node, 0.0) + value
        self.action_links[action_node] = weight
        return weight

    # -------------------------------------------------------------- statistics

    def iter_subtree(self) -> Iterator["Node"]:
        """Yield this node and every descendant, depth first."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(link.child for link in reversed(node.children))

    def size(self) -> int:
        """Number of nodes in the subtree, this node included."""
        return sum(1 for _ in self.iter_subtree())

    def average_depth(self) -> float:
        """Mean depth of the leaves below this node (0.0 for a leaf)."""
        depths = []
        stack = [(self, 0)]
        while stack:
            node, depth = stack.pop()
            if not node.children:
                depths.append(depth)
            stack.extend((link.child, depth + 1) for link in node.children)
        return sum(depths) / len(depths)

    def average_image_size(self) -> float:
        """Mean image length over the subtree, roots excluded."""
        sizes = [len(node.image) for node in self.iter_subtree() if not node.is_root()]
        return sum(sizes) / len(sizes) if sizes else 0.0

    def __repr__(self):
        return (f"Node(ref={self.reference}, contents={self.contents}, "
                f"image={self.image}, children={len(self.children)})")
