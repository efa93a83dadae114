"""
crexplorer Core - Headless library for the explorer force graph.

Derives a deduplicated, grouped graph from a linked document tree,
indexes neighbourhoods for hover spotlighting, and frames the camera
once the force simulation settles. It has no UI dependencies and can
be embedded in other applications.
"""

__version__ = "0.1.0"

# Lazy imports to avoid loading everything at once
def __getattr__(name):
    if name == "InMemoryTreeSource":
        from .adapters.memory_tree import InMemoryTreeSource
        return InMemoryTreeSource
    elif name == "ForceSimulation":
        from .adapters.force_simulation import ForceSimulation
        return ForceSimulation
    elif name == "GraphBuilder":
        from .services.graph_builder import GraphBuilder
        return GraphBuilder
    elif name == "CameraFramer":
        from .services.camera import CameraFramer
        return CameraFramer
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

__all__ = [
    "__version__",
    "InMemoryTreeSource",
    "ForceSimulation",
    "GraphBuilder",
    "CameraFramer",
]
