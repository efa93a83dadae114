"""
crexplorer App - PyQt6 presentation layer for the explorer force graph.

ViewModels, QTimer-backed workers, and the styling policy fed to the
force-graph renderer.
"""

__version__ = "0.1.0"
