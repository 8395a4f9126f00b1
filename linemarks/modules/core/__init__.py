"""Core module — provides fundamental services."""

import logging

from linemarks.framework.logging import set_log_level
from linemarks.framework.module_base import ModuleBase

log = logging.getLogger("linemarks.core")


class Module(ModuleBase):

    def initialize(self, services):
        from linemarks.modules.core.services.config import ConfigService
        from linemarks.modules.core.services.document import DocumentService
        from linemarks.modules.core.services.events import EventBusService
        from linemarks.modules.core.services.filesystem import FileSystemService
        from linemarks.modules.core.services.workspace import WorkspaceService

        if "config" not in services:
            services.register(ConfigService())
        services.register(EventBusService())

        # Editor adapters registered by the host win over the defaults
        if "workspace" not in services:
            services.register(WorkspaceService())
        if "documents" not in services:
            services.register(DocumentService())
        if "filesystem" not in services:
            services.register(FileSystemService())

        self._events = services.events
        self._events.subscribe("config:changed", self._on_config_changed)

    def start(self, services):
        set_log_level(services.config.get("core.log_level") or "WARN")

    def shutdown(self):
        self._events.unsubscribe("config:changed", self._on_config_changed)

    def _on_config_changed(self, key=None, value=None, **_kw):
        if key == "core.log_level" and value:
            log.info("Log level changed to %s", value)
            set_log_level(value)
