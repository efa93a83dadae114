"""
ViewModels for the crexplorer app.

MVVM architecture separating graph logic from rendering:
- ViewModels handle state and business logic
- The renderer draws what the ViewModels expose
- Core services handle graph derivation and framing
"""

from .base import BaseViewModel
from .explorer_vm import ExplorerGraphVM, ExplorerSettings, SettingsError

__all__ = [
    # Base
    "BaseViewModel",

    # ViewModels
    "ExplorerGraphVM",

    # Data classes
    "ExplorerSettings",

    # Errors
    "SettingsError",
]
