"""
Services for crexplorer.

Graph derivation, neighbourhood indexing, hover focus and camera framing.
"""

from .flattener import TreeFlattener, FlattenResult
from .selectors import EndpointSelector, SelectorKind
from .graph_builder import GraphBuilder, BuildResult
from .components import connected_components, largest_component
from .adjacency import AdjacencyIndex
from .focus import NeighborhoodFocus
from .camera import CameraFramer, CameraSettings, CameraFrame, CameraPose

__all__ = [
    "TreeFlattener",
    "FlattenResult",
    "EndpointSelector",
    "SelectorKind",
    "GraphBuilder",
    "BuildResult",
    "connected_components",
    "largest_component",
    "AdjacencyIndex",
    "NeighborhoodFocus",
    "CameraFramer",
    "CameraSettings",
    "CameraFrame",
    "CameraPose",
]
