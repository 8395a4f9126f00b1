"""Shared fixtures: stub editor collaborators and a wired controller."""

import pytest

from linemarks.framework.event_bus import EventBus
from linemarks.modules.bookmarks.controller import BookmarkController
from linemarks.modules.core.services.workspace import WorkspaceService


class FakeFileSystem:
    """Every path exists unless listed in ``missing``."""

    def __init__(self):
        self.missing = set()

    def exists(self, path):
        return path not in self.missing


class FakeDocuments:
    def __init__(self):
        self.texts = {}  # path -> list of lines

    def line_text(self, path, line):
        lines = self.texts.get(path, [])
        return lines[line] if 0 <= line < len(lines) else ""


class Recorder:
    """Collects (event, kwargs) pairs from an EventBus."""

    EVENTS = (
        "bookmark:added",
        "bookmark:removed",
        "bookmark:updated",
        "bookmark:cleared",
        "bookmarks:cleared_all",
    )

    def __init__(self, bus):
        self.calls = []
        for event in self.EVENTS:
            bus.subscribe(event, self._recorder(event))

    def _recorder(self, event):
        def record(**kw):
            self.calls.append((event, kw))
        return record

    def names(self):
        return [name for name, _ in self.calls]


@pytest.fixture
def events():
    return EventBus()


@pytest.fixture
def recorder(events):
    return Recorder(events)


@pytest.fixture
def filesystem():
    return FakeFileSystem()


@pytest.fixture
def documents():
    return FakeDocuments()


@pytest.fixture
def workspace():
    return WorkspaceService(["/home/dev/project"])


@pytest.fixture
def controller(events, workspace, documents, filesystem):
    return BookmarkController(events=events, workspace=workspace,
                              documents=documents, filesystem=filesystem)
