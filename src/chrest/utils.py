"""
Utility functions for inspecting a Chrest model.

Includes network statistics, graph export and STM summaries.
"""

from typing import Dict, List

import networkx as nx
import numpy as np

from chrest.memory.ltm import Node
from chrest.patterns import Modality


def compute_ltm_metrics(root: Node) -> Dict[str, float]:
    """
    Compute statistics of a discrimination network.

    Metrics include:
    - size: learned nodes (root excluded)
    - average_depth: mean depth of the leaves
    - max_depth: depth of the deepest node
    - leaves: nodes without children
    - average_image_size: mean image length of learned nodes

    Args:
        root: Root of the network

    Returns:
        dict: Computed metrics
    """
    max_depth = 0
    stack = [(root, 0)]
    while stack:
        node, depth = stack.pop()
        max_depth = max(max_depth, depth)
        stack.extend((link.child, depth + 1) for link in node.children)

    leaves = sum(1 for node in root.iter_subtree() if not node.children and node is not root)

    return {
        'size': root.size() - 1,
        'average_depth': root.average_depth(),
        'max_depth': max_depth,
        'leaves': leaves,
        'average_image_size': root.average_image_size(),
    }


def ltm_to_networkx(root: Node) -> nx.DiGraph:
    """
    Export a discrimination network as a directed graph.

    Graph nodes are node references carrying 'contents', 'image' and
    'modality' attributes. Edges carry the link 'test', 'order' (0 for the
    first child tried) and 'creation_time'.

    Args:
        root: Root of the network

    Returns:
        nx.DiGraph: The network
    """
    graph = nx.DiGraph()
    for node in root.iter_subtree():
        graph.add_node(node.reference,
                       contents=str(node.contents),
                       image=str(node.image),
                       modality=node.modality.name,
                       root=node.is_root())
        for order, link in enumerate(node.children):
            graph.add_edge(node.reference, link.child.reference,
                           test=str(link.test), order=order,
                           creation_time=link.creation_time)
    return graph


def image_size_distribution(root: Node, num_bins: int = 10) -> Dict:
    """
    Analyze the distribution of image sizes.

    Args:
        root: Root of the network
        num_bins: Number of histogram bins

    Returns:
        dict: Distribution statistics and histogram
    """
    sizes = np.array([len(node.image) for node in root.iter_subtree() if not node.is_root()],
                     dtype=float)
    if len(sizes) == 0:
        return {'mean': 0.0, 'std': 0.0, 'max': 0.0, 'histogram': None, 'bin_edges': None}

    hist, bin_edges = np.histogram(sizes, bins=num_bins)
    return {
        'mean': float(np.mean(sizes)),
        'std': float(np.std(sizes)),
        'max': float(np.max(sizes)),
        'histogram': hist,
        'bin_edges': bin_edges,
    }


def stm_summary(model) -> Dict[str, List[str]]:
    """Images held in each STM, most recent first, keyed by modality name."""
    return {modality.name: [str(node.image) for node in model.get_stm(modality)]
            for modality in Modality}
