"""
Visualization tools for Chrest models.

Draws discrimination networks, scenes and visual-spatial fields with
matplotlib and networkx.
"""

# Network visualizations
from visualization.network_viz import (
    plot_discrimination_network,
    plot_image_size_distribution,
)

# Scene and field visualizations
from visualization.field_viz import (
    plot_scene,
    plot_visual_spatial_field,
    plot_field_evolution,
)

__all__ = [
    # Network
    'plot_discrimination_network',
    'plot_image_size_distribution',
    # Scene and field
    'plot_scene',
    'plot_visual_spatial_field',
    'plot_field_evolution',
]
