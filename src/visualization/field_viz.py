"""
Scene and visual-spatial field visualization.

Draws scenes as grids, and a visual-spatial field as the scene it amounts to
at a given time, so decay and moved objects can be followed over time.
"""

import numpy as np
import matplotlib.pyplot as plt
from matplotlib.colors import ListedColormap
from typing import List, Optional, Tuple

from chrest.perception.scene import (
    BLIND_SQUARE_TOKEN,
    CREATOR_TOKEN,
    EMPTY_SQUARE_TOKEN,
    UNKNOWN_SQUARE_TOKEN,
    Scene,
)

# Cell categories: blind, empty, unknown, creator, object, ghost
_CATEGORY_COLORS = ['#333333', '#FFFFFF', '#BBBBBB', '#F18F01', '#2E86AB', '#A23B72']


def _categories(scene: Scene, ghosts: Optional[set] = None) -> np.ndarray:
    ghosts = ghosts or set()
    grid = np.zeros((scene.height, scene.width), dtype=int)
    for col, row, obj in scene.squares():
        if obj.object_class == BLIND_SQUARE_TOKEN:
            category = 0
        elif obj.object_class == EMPTY_SQUARE_TOKEN:
            category = 1
        elif obj.object_class == UNKNOWN_SQUARE_TOKEN:
            category = 2
        elif obj.object_class == CREATOR_TOKEN:
            category = 3
        elif obj.identifier in ghosts:
            category = 5
        else:
            category = 4
        grid[row, col] = category
    return grid


def plot_scene(scene: Scene,
               title: Optional[str] = None,
               figsize: Tuple[int, int] = (6, 6),
               ghosts: Optional[set] = None,
               ax=None,
               save_path: Optional[str] = None):
    """
    Plot a scene as a grid, row 0 at the bottom.

    Args:
        scene: Scene to draw
        title: Plot title (defaults to the scene name)
        figsize: Figure size
        ghosts: Identifiers to draw as ghosts
        ax: Optional axes to draw into
        save_path: Optional path to save figure

    Returns:
        matplotlib Figure
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)
    else:
        fig = ax.figure

    grid = _categories(scene, ghosts)
    ax.imshow(grid, cmap=ListedColormap(_CATEGORY_COLORS), vmin=0,
              vmax=len(_CATEGORY_COLORS) - 1, origin='lower')

    for col, row, obj in scene.squares():
        if obj.object_class in (BLIND_SQUARE_TOKEN, EMPTY_SQUARE_TOKEN):
            continue
        color = 'black' if grid[row, col] in (1, 2) else 'white'
        ax.text(col, row, obj.identifier, ha='center', va='center', fontsize=9, color=color)

    ax.set_xticks(range(scene.width))
    ax.set_yticks(range(scene.height))
    ax.set_xticks(np.arange(-0.5, scene.width, 1), minor=True)
    ax.set_yticks(np.arange(-0.5, scene.height, 1), minor=True)
    ax.grid(which='minor', color='black', linewidth=0.5)
    ax.set_title(title or scene.name, fontsize=12, fontweight='bold')

    if save_path:
        plt.savefig(save_path, dpi=300, bbox_inches='tight')

    return fig


def plot_visual_spatial_field(field,
                              time: int,
                              include_ghosts: bool = True,
                              title: Optional[str] = None,
                              figsize: Tuple[int, int] = (6, 6),
                              save_path: Optional[str] = None):
    """
    Plot a visual-spatial field as it stands at time.

    Args:
        field: VisualSpatialField to draw
        time: Time to read the field at
        include_ghosts: Whether to show ghost objects
        title: Plot title
        figsize: Figure size
        save_path: Optional path to save figure

    Returns:
        matplotlib Figure
    """
    scene = field.get_as_scene(time, include_ghosts)
    ghosts = set()
    for row in range(field.height):
        for col in range(field.width):
            ghosts.update(obj.identifier for obj in field.get_objects_on_square(col, row, time)
                          if obj.ghost)

    return plot_scene(scene, title=title or f"Visual-spatial field @ {time}",
                      figsize=figsize, ghosts=ghosts, save_path=save_path)


def plot_field_evolution(field,
                         times: List[int],
                         include_ghosts: bool = True,
                         figsize: Tuple[int, int] = (15, 4),
                         save_path: Optional[str] = None):
    """
    Plot a visual-spatial field at several times side by side.

    Args:
        field: VisualSpatialField to draw
        times: Times to show
        include_ghosts: Whether to show ghost objects
        figsize: Figure size
        save_path: Optional path to save figure

    Returns:
        matplotlib Figure
    """
    fig, axes = plt.subplots(1, len(times), figsize=figsize, squeeze=False)
    for ax, time in zip(axes[0], times):
        plot_scene(field.get_as_scene(time, include_ghosts), title=f"t = {time}", ax=ax)

    plt.tight_layout()

    if save_path:
        plt.savefig(save_path, dpi=300, bbox_inches='tight')

    return fig
