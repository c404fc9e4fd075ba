"""Long- and short-term memory for the Chrest model."""

from chrest.memory.ltm import Link, Node
from chrest.memory.stm import Stm

__all__ = ["Link", "Node", "Stm"]
