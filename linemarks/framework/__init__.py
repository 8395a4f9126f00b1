"""linemarks framework — base classes, registry, event bus."""

from linemarks.framework.module_base import ModuleBase
from linemarks.framework.service_base import ServiceBase
from linemarks.framework.service_registry import ServiceRegistry
from linemarks.framework.event_bus import EventBus

__all__ = [
    "ModuleBase",
    "ServiceBase",
    "ServiceRegistry",
    "EventBus",
]
