"""linemarks entry point — bootstraps the module framework.

Responsibilities:
1. Discover modules from their module.yaml manifests
2. Resolve load order from the dependency graph (core first)
3. Initialize core services, load config defaults, then all other modules
4. Shut everything down in reverse order

Host editors pass their own adapters for the workspace, document buffers
and file system; the core module fills in defaults for whatever is missing.
"""

import importlib
import logging
import os
import threading

import yaml

from linemarks.framework.logging import setup_logging

log = logging.getLogger("linemarks.main")

MODULES_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "modules")

# ── Singleton registries ──────────────────────────────────────────────

_services = None
_modules = []
_init_lock = threading.Lock()
_initialized = False


def discover_modules(modules_dir=MODULES_DIR):
    """Load every ``<module>/module.yaml`` below *modules_dir*, sorted."""
    if not os.path.isdir(modules_dir):
        return []

    result = []
    for entry in sorted(os.listdir(modules_dir)):
        yaml_path = os.path.join(modules_dir, entry, "module.yaml")
        if not os.path.isfile(yaml_path):
            continue
        with open(yaml_path, encoding="utf-8") as f:
            manifest = yaml.safe_load(f) or {}
        manifest.setdefault("name", entry)
        result.append(manifest)

    return topo_sort(result)


def topo_sort(modules):
    """Topological sort of modules by 'requires' dependencies.

    Ensures core is always first. Returns sorted list.
    """
    by_name = {m["name"]: m for m in modules}
    # Services provided by each module
    provides = {}
    for m in modules:
        for svc in m.get("provides_services") or []:
            provides[svc] = m["name"]

    visited = set()
    order = []

    def visit(name):
        if name in visited:
            return
        visited.add(name)
        m = by_name.get(name)
        if m is None:
            return
        for req in m.get("requires") or []:
            provider = provides.get(req, req)
            if provider in by_name:
                visit(provider)
        order.append(m)

    if "core" in by_name:
        visit("core")
    for name in by_name:
        visit(name)

    return order


def _import_module_class(module_manifest):
    """Import and return the ModuleBase subclass for a module."""
    from linemarks.framework.module_base import ModuleBase

    name = module_manifest["name"]
    mod = importlib.import_module("linemarks.modules.%s" % name)
    for attr in dir(mod):
        obj = getattr(mod, attr)
        if (isinstance(obj, type) and issubclass(obj, ModuleBase)
                and obj is not ModuleBase):
            return obj
    return None


def get_services():
    """Return the global ServiceRegistry (lazy-init)."""
    if _services is None:
        bootstrap()
    return _services


def bootstrap(workspace=None, documents=None, filesystem=None,
              config_path=None, log_path=None, modules_dir=MODULES_DIR):
    """Initialize the entire framework and return the ServiceRegistry.

    With *log_path*, the linemarks logger also writes to that file.
    Idempotent — a second call returns the existing registry.
    """
    global _services, _initialized

    with _init_lock:
        if _initialized:
            return _services

        from linemarks.framework.service_registry import ServiceRegistry
        from linemarks.modules.core.services.config import ConfigService

        services = ServiceRegistry()
        if config_path:
            services.register(ConfigService(config_path))
        for name, adapter in (("workspace", workspace),
                              ("documents", documents),
                              ("filesystem", filesystem)):
            if adapter is not None:
                services.register_instance(name, adapter)

        manifests = discover_modules(modules_dir)
        manifest_dict = {m["name"]: m for m in manifests}

        for manifest in manifests:
            name = manifest["name"]
            cls = _import_module_class(manifest)
            if cls is None:
                log.warning("Skipping module with no class: %s", name)
                continue

            instance = cls()
            instance.name = name
            instance.initialize(services)
            _modules.append(instance)
            log.info("Module initialized: %s", name)

            # Config defaults must be in place before later modules read them
            if name == "core":
                config_svc = services.config
                config_svc.set_manifest(manifest_dict)
                config_svc.set_events(services.events)
                log.info("Config defaults loaded for %d modules",
                         len(manifest_dict))

        if log_path:
            setup_logging(services.config.get("core.log_level") or "WARN",
                          path=log_path)

        services.initialize_all()
        for mod in _modules:
            mod.start(services)

        _services = services
        _initialized = True
        log.info("Framework bootstrap complete: %d modules, %d services",
                 len(_modules), len(services.service_names))
        return services


def shutdown():
    """Shut down all modules and services."""
    global _services, _initialized

    for mod in reversed(_modules):
        try:
            mod.shutdown()
        except Exception:
            log.exception("Error shutting down module: %s", mod.name)

    if _services:
        _services.shutdown_all()

    del _modules[:]
    _services = None
    _initialized = False
