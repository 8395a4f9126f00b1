"""Dependency injection container for services."""

import logging

log = logging.getLogger("linemarks.services")


class ServiceRegistry:
    """Registry that holds all services and provides attribute access.

    Usage::

        services = ServiceRegistry()
        services.register(config_service)
        services.register_instance("workspace", my_workspace)

        services.bookmarks.add_bookmark(12)
        services.get("config").get("bookmarks.wrap_navigation")
    """

    def __init__(self):
        self._services = {}

    def register(self, service):
        """Register a ServiceBase instance by its ``name`` attribute."""
        if service.name is None:
            raise ValueError(f"Service {type(service).__name__} has no name")
        if service.name in self._services:
            raise ValueError(f"Service already registered: {service.name}")
        self._services[service.name] = service

    def register_instance(self, name, instance):
        """Register an arbitrary object (e.g. an editor adapter) by name."""
        if name in self._services:
            raise ValueError(f"Service already registered: {name}")
        self._services[name] = instance

    def get(self, name):
        """Get a service by name, or None if not registered."""
        return self._services.get(name)

    def __getattr__(self, name):
        if name.startswith("_"):
            raise AttributeError(name)
        svc = self._services.get(name)
        if svc is not None:
            return svc
        raise AttributeError(f"No service registered: {name}")

    def __contains__(self, name):
        return name in self._services

    def initialize_all(self):
        """Call ``initialize(self)`` on every service that supports it."""
        for svc in self._services.values():
            init = getattr(svc, "initialize", None)
            if callable(init):
                init(self)

    def shutdown_all(self):
        """Call ``shutdown()`` on every service; failures are logged."""
        for name, svc in self._services.items():
            shutdown = getattr(svc, "shutdown", None)
            if callable(shutdown):
                try:
                    shutdown()
                except Exception:
                    log.exception("Error shutting down service: %s", name)

    @property
    def service_names(self):
        return list(self._services.keys())
