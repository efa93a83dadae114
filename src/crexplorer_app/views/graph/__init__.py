"""
Graph presentation package.

Rendering itself is done by the force-graph renderer; this package
holds the styling policy it is fed with.
"""

from .style_manager import StyleManager, GraphStyle

__all__ = ["StyleManager", "GraphStyle"]
