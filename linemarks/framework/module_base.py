"""Base class for all modules."""

from abc import ABC


class ModuleBase(ABC):
    """Base class for linemarks modules.

    Modules declare their manifest in module.yaml (config, requires,
    provides_services). This class handles the runtime behavior:
    initialization, event wiring, and shutdown.

    The ``name`` attribute is set from the manifest at load time; it does
    NOT need to be set in the subclass.
    """

    name: str = None

    def initialize(self, services):
        """Phase 1: called in dependency order during bootstrap.

        Register services, wire event subscriptions, create internal
        objects. Services of earlier modules are available.

        Args:
            services: ServiceRegistry with attribute access to all
                      registered services (services.config, services.events ...).
        """

    def start(self, services):
        """Phase 2: called after ALL modules have initialized and config
        defaults are loaded. Called in dependency order.
        """

    def shutdown(self):
        """Flush state and drop subscriptions.

        Called in reverse dependency order on unload."""

