"""Base class for all services."""

from abc import ABC


class ServiceBase(ABC):
    """Abstract base for services registered in the ServiceRegistry.

    Services provide horizontal capabilities (config, events, workspace
    lookups, bookmarks) that modules consume.

    Attributes:
        name: Unique service identifier (e.g. "config", "bookmarks").
    """

    name: str = None

    def initialize(self, services):
        """Called once after every module has registered its services.

        Override to resolve references to sibling services.

        Args:
            services: the ServiceRegistry holding all registered services.
        """

    def shutdown(self):
        """Called on unload. Override to clean up."""
