"""
Adapters for crexplorer.

Implementations of the port interfaces.
"""

from .memory_tree import InMemoryTreeSource, TreeLoadError, default_store_key
from .force_simulation import ForceSimulation, SimulationSettings

__all__ = [
    "InMemoryTreeSource",
    "TreeLoadError",
    "default_store_key",
    "ForceSimulation",
    "SimulationSettings",
]
