"""
Discrimination network visualization.

Draws a model's long-term memory as a tree, showing node images, link tests
and how the image sizes are distributed.
"""

import matplotlib.pyplot as plt
import networkx as nx
from typing import Optional, Tuple

from chrest.patterns import Modality
from chrest.utils import image_size_distribution, ltm_to_networkx


def _tree_layout(G: nx.DiGraph, root: int) -> dict:
    """Place nodes in rows by depth, root at the top."""
    depths = nx.single_source_shortest_path_length(G, root)
    nx.set_node_attributes(G, depths, 'depth')
    pos = nx.multipartite_layout(G, subset_key='depth', align='horizontal')
    return {n: (x, -y) for n, (x, y) in pos.items()}


def plot_discrimination_network(model,
                                modality: Modality = Modality.VISUAL,
                                title: Optional[str] = None,
                                figsize: Tuple[int, int] = (12, 8),
                                show_tests: bool = True,
                                max_nodes: int = 200,
                                save_path: Optional[str] = None):
    """
    Plot the discrimination network of one modality.

    Args:
        model: Chrest model
        modality: Which network to draw
        title: Plot title (defaults to the modality name)
        figsize: Figure size
        show_tests: Label links with their tests
        max_nodes: Draw only the first nodes found depth-first beyond this
        save_path: Optional path to save figure

    Returns:
        matplotlib Figure
    """
    root = model.get_ltm(modality)
    G = ltm_to_networkx(root)
    if G.number_of_nodes() > max_nodes:
        keep = list(nx.dfs_preorder_nodes(G, root.reference))[:max_nodes]
        G = G.subgraph(keep).copy()

    fig, ax = plt.subplots(figsize=figsize)
    title = title or f"{modality.name.title()} LTM"

    if G.number_of_nodes() == 1:
        ax.text(0.5, 0.5, "Nothing learned yet", ha='center', va='center', fontsize=14)
        ax.set_title(title, fontsize=14, fontweight='bold')
        ax.axis('off')
        return fig

    pos = _tree_layout(G, root.reference)

    node_colors = ['#C73E1D' if G.nodes[n]['root'] else '#2E86AB' for n in G.nodes()]
    nx.draw_networkx_nodes(G, pos, node_size=300, node_color=node_colors, alpha=0.8, ax=ax)
    nx.draw_networkx_edges(G, pos, arrows=True, alpha=0.5, ax=ax)

    labels = {n: G.nodes[n]['image'] if not G.nodes[n]['root'] else 'root' for n in G.nodes()}
    nx.draw_networkx_labels(G, pos, labels=labels, font_size=7, ax=ax)

    if show_tests:
        edge_labels = {(u, v): d['test'] for u, v, d in G.edges(data=True)}
        nx.draw_networkx_edge_labels(G, pos, edge_labels=edge_labels, font_size=6, ax=ax)

    ax.set_title(title, fontsize=14, fontweight='bold')
    ax.axis('off')

    stats_text = f"Nodes: {G.number_of_nodes() - 1}\nLinks: {G.number_of_edges()}"
    ax.text(0.02, 0.98, stats_text, transform=ax.transAxes,
            fontsize=10, verticalalignment='top',
            bbox=dict(boxstyle='round', facecolor='white', alpha=0.8))

    plt.tight_layout()

    if save_path:
        plt.savefig(save_path, dpi=300, bbox_inches='tight')

    return fig


def plot_image_size_distribution(model,
                                 modality: Modality = Modality.VISUAL,
                                 num_bins: int = 10,
                                 title: str = "Image Size Distribution",
                                 figsize: Tuple[int, int] = (8, 5),
                                 save_path: Optional[str] = None):
    """
    Plot a histogram of node image sizes.

    Args:
        model: Chrest model
        modality: Which network to summarise
        num_bins: Number of histogram bins
        title: Plot title
        figsize: Figure size
        save_path: Optional path to save figure

    Returns:
        matplotlib Figure
    """
    stats = image_size_distribution(model.get_ltm(modality), num_bins=num_bins)

    fig, ax = plt.subplots(figsize=figsize)
    if stats['histogram'] is not None:
        edges = stats['bin_edges']
        ax.bar(edges[:-1], stats['histogram'], width=edges[1:] - edges[:-1],
               align='edge', color='#2E86AB', alpha=0.7, edgecolor='black')
        ax.axvline(x=stats['mean'], color='red', linestyle='--', linewidth=1.5,
                   label=f"Mean: {stats['mean']:.2f}")
        ax.legend()

    ax.set_xlabel('Image size (items)', fontsize=12)
    ax.set_ylabel('Nodes', fontsize=12)
    ax.set_title(title, fontsize=12, fontweight='bold')
    ax.grid(True, alpha=0.3)

    plt.tight_layout()

    if save_path:
        plt.savefig(save_path, dpi=300, bbox_inches='tight')

    return fig
