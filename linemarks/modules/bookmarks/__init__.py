"""Bookmarks module — line bookmarks and navigation across files."""

import logging

from linemarks.framework.module_base import ModuleBase

log = logging.getLogger("linemarks.bookmarks.module")


class BookmarksModule(ModuleBase):
    """Registers the ``bookmarks`` service and follows the active document.

    The host announces focus changes with ``document:activated`` (path=...)
    and receives the snapshot to write on ``bookmarks:persist`` at shutdown.
    """

    def initialize(self, services):
        from .controller import BookmarkController

        self._events = services.events
        self._config = services.config.proxy_for(self.name)
        self._controller = BookmarkController(
            events=self._events,
            workspace=services.workspace,
            documents=services.documents,
            filesystem=services.filesystem,
            config=self._config,
        )
        services.register(self._controller)
        self._events.subscribe("document:activated", self._on_document_activated)

    def _on_document_activated(self, path=None, **_kw):
        if path:
            self._controller.activate(path)

    def shutdown(self):
        self._events.unsubscribe("document:activated", self._on_document_activated)
        relative = bool(self._config.get("save_bookmarks_in_project", False))
        if relative:
            snapshot = self._controller.zip(relative_path=True)
        else:
            snapshot = self._controller.dispose()
        log.info("Persisting bookmarks for %d file(s)", len(snapshot.entries))
        self._events.emit("bookmarks:persist", data=snapshot.to_dict(),
                          relative_path=relative)
