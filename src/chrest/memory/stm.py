"""
Short-term memory: a bounded recency list of recognised nodes.

The most recently added node sits at the front. Adding a node that is
already present moves it to the front instead of duplicating it, and the
oldest entries fall off once capacity is exceeded.
"""

from typing import Iterator, List

from chrest.memory.ltm import Node


class Stm:
    """
    Short-term memory for one modality.

    Attributes:
        size (int): Maximum number of nodes held
    """

    def __init__(self, size: int):
        """
        Initialize empty STM.

        Args:
            size: Capacity (at least 1)
        """
        if size < 1:
            raise ValueError(f"STM size must be at least 1, got {size}")
        self._size = size
        self._items: List[Node] = []

    @property
    def size(self) -> int:
        return self._size

    @size.setter
    def size(self, size: int):
        if size < 1:
            raise ValueError(f"STM size must be at least 1, got {size}")
        self._size = size
        del self._items[size:]

    def add(self, node: Node):
        """
        Put node at the front, evicting the oldest entry when full.

        Args:
            node: Node just recognised or learned
        """
        if node in self._items:
            self._items.remove(node)
        self._items.insert(0, node)
        del self._items[self._size:]

    def item(self, index: int) -> Node:
        return self._items[index]

    def items(self) -> List[Node]:
        """Return a copy of the contents, most recent first."""
        return list(self._items)

    def clear(self):
        """Remove every node."""
        self._items = []

    def is_empty(self) -> bool:
        return len(self._items) == 0

    def __contains__(self, node) -> bool:
        return node in self._items

    def __iter__(self) -> Iterator[Node]:
        return iter(list(self._items))

    def __len__(self):
        return len(self._items)

    def __repr__(self):
        return f"Stm(size={self._size}, items={[n.reference for n in self._items]})"
