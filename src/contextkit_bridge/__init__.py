"""Orchestration layer between editor hosts and the contextkit code-indexing CLI."""

from .bridge import Bridge
from .config import BridgeConfig

__version__ = "0.3.0"

__all__ = ["Bridge", "BridgeConfig", "__version__"]
