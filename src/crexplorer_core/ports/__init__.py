"""
Ports (interfaces) for crexplorer.

These define the contracts that adapters must implement.
This enables dependency injection and testing with fakes.
"""

from .tree_port import TreeSourcePort
from .simulation_port import SimulationPort, OrbitControls, Vector3
from .scheduler_port import SchedulerPort, TimerHandle

__all__ = [
    "TreeSourcePort",
    "SimulationPort",
    "OrbitControls",
    "Vector3",
    "SchedulerPort",
    "TimerHandle",
]
