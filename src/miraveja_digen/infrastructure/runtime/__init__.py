"""
Runtime container - Executes generated registration tables.

Generated registration units import ``ServiceCollection`` from here, and
generated initializers import ``ContextLogger``.
"""

from .collection import ServiceCollection
from .context_logger import ContextLogger
from .descriptors import ServiceDescriptor
from .lifetime_manager import LifetimeManager
from .provider import ServiceProvider
from .resolution_path import ResolutionPath
from .resolver import DependencyResolver

__all__ = [
    # Registration
    "ServiceCollection",
    "ServiceDescriptor",
    # Resolution
    "ServiceProvider",
    "DependencyResolver",
    "LifetimeManager",
    "ResolutionPath",
    # Logging
    "ContextLogger",
]
