"""BookmarkController — bookmarks of every file in the session.

Holds one BookmarkedFile per path (in first-bookmarked order) plus the
active entry, navigates between bookmarks inside and across files, and
converts to and from the persisted form::

    {"bookmarks": [{"path": "/abs/or/$ROOTPATH$/rel", "lines": [3, 7]}]}

Changes are announced on the event bus:

    bookmark:added        bookmark, line (1-based), preview
    bookmark:removed      bookmark, line (1-based)
    bookmark:updated      bookmark, index, line (1-based), preview
    bookmark:cleared      bookmark
    bookmarks:cleared_all
"""

import json
import logging
import os
import re
from collections import namedtuple

from linemarks.framework.service_base import ServiceBase
from linemarks.modules.bookmarks.bookmarked_file import (
    JUMP_BACKWARD,
    JUMP_FORWARD,
    NO_MORE_BOOKMARKS,
    BookmarkedFile,
)

log = logging.getLogger("linemarks.bookmarks")

ROOT_TOKEN = "$ROOTPATH$"

_LEADING_SLASHES = re.compile(r"^/{3,}")

BookmarkJump = namedtuple("BookmarkJump", ["path", "line"])


class BookmarkError(Exception):
    """Base class for bookmark precondition failures."""


class NoActiveBookmarkError(BookmarkError):
    """A mutation needed a target entry and none was active."""


class BookmarkIndexError(BookmarkError, IndexError):
    """Index outside the entry's bookmark lines."""


def _strip_sep(path):
    return path.rstrip("/\\")


def _relativize(path, root, token):
    """Replace a leading *root* with *token*, only at a separator boundary."""
    base = _strip_sep(root)
    if path == root or path == base:
        return token
    for sep in ("/", os.sep):
        if path.startswith(base + sep):
            return token + path[len(base):]
    return path


def _absolutize(path, root, token):
    """Expand a leading *token* into *root*, only at a separator boundary."""
    base = _strip_sep(root)
    if path == token:
        return base
    for sep in ("/", os.sep):
        if path.startswith(token + sep):
            return base + path[len(token):]
    return path


class BookmarkController(ServiceBase):
    """Registry and navigation engine for bookmarks across files.

    Collaborators are injected rather than looked up:

    events:     EventBus receiving change notifications (optional).
    workspace:  ``active_root()`` for relative paths.
    documents:  ``line_text(path, line)`` for previews.
    filesystem: ``exists(path)``; files that vanished are skipped while
                navigating. Defaults to ``os.path.exists``.
    config:     ModuleConfigProxy for the bookmarks options.
    """

    name = "bookmarks"

    def __init__(self, events=None, workspace=None, documents=None,
                 filesystem=None, config=None):
        self.entries = []
        self.active = None
        self._events = events
        self._workspace = workspace
        self._documents = documents
        self._filesystem = filesystem
        self._config = config

    @staticmethod
    def normalize(path):
        """Collapse a leading ``///`` into ``/``.

        Some hosts report the same document as ``///foo/x.py`` and
        ``/foo/x.py``.
        """
        return _LEADING_SLASHES.sub("/", path)

    # ── Registry ──────────────────────────────────────────────────────

    def from_path(self, path):
        """Entry for *path*, or None."""
        path = self.normalize(path)
        for entry in self.entries:
            if entry.path == path:
                return entry
        return None

    def add(self, path):
        """Entry for *path*, created (empty) on first use."""
        path = self.normalize(path)
        existing = self.from_path(path)
        if existing is not None:
            return existing
        entry = BookmarkedFile(path)
        self.entries.append(entry)
        log.debug("Tracking file: %s", path)
        return entry

    def activate(self, path):
        """Make *path* the active entry, tracking it if needed."""
        self.active = self.add(path)
        return self.active

    def has_any_bookmark(self):
        return sum(len(entry.lines) for entry in self.entries) > 0

    def list_bookmarks(self, entry=None):
        """Bookmarks of *entry* (or every file) with 1-based lines and previews."""
        entries = [entry] if entry is not None else self.entries
        result = []
        for item in entries:
            for line in sorted(item.lines):
                result.append({
                    "path": item.path,
                    "line": line + 1,
                    "preview": self._preview(item, line),
                })
        return result

    # ── Mutation ──────────────────────────────────────────────────────

    def add_bookmark(self, line, preview=None):
        """Bookmark zero-based *line* in the active file."""
        entry = self._target(None)
        preview = self._preview(entry, line, preview)
        entry.lines.append(line)
        self._emit("bookmark:added", bookmark=entry, line=line + 1,
                   preview=preview)

    def remove_bookmark(self, index, line, entry=None):
        """Drop ``lines[index]`` of *entry* (default: active)."""
        entry = self._target(entry)
        self._check_index(entry, index)
        del entry.lines[index]
        self._emit("bookmark:removed", bookmark=entry, line=line + 1)

    def update_bookmark(self, index, old_line, new_line, entry=None,
                        preview=None):
        """Move ``lines[index]`` to *new_line*.

        *old_line* is passed through to listeners only; the bookmark is
        located by *index*.
        """
        entry = self._target(entry)
        self._check_index(entry, index)
        preview = self._preview(entry, new_line, preview)
        entry.lines[index] = new_line
        log.debug("Bookmark moved in %s: %d -> %d", entry.path,
                  old_line, new_line)
        self._emit("bookmark:updated", bookmark=entry, index=index,
                   line=new_line + 1, preview=preview)

    def toggle_bookmark(self, line, preview=None):
        """Add or remove the bookmark at *line* of the active file.

        Returns True when a bookmark was added.
        """
        entry = self._target(None)
        index = entry.index_of(line)
        if index >= 0:
            self.remove_bookmark(index, line, entry)
            return False
        self.add_bookmark(line, preview)
        return True

    def clear(self, entry=None):
        entry = self._target(entry)
        entry.clear()
        self._emit("bookmark:cleared", bookmark=entry)

    def clear_all(self):
        for entry in self.entries:
            entry.clear()
        self._emit("bookmarks:cleared_all")

    # ── Navigation ────────────────────────────────────────────────────

    def next_document_with_bookmarks(self, active, direction=JUMP_FORWARD):
        """Path of the next file, in *direction*, that has bookmarks and exists.

        Wraps around the collection and may come back to *active* itself.
        Returns NO_MORE_BOOKMARKS when no file qualifies.
        """
        index = self._next_document_index(active, direction)
        if index < 0:
            return NO_MORE_BOOKMARKS
        return self.entries[index].path

    def next_bookmark(self, active, current_line, direction=JUMP_FORWARD):
        """Where to jump from *current_line* of *active*.

        Returns a BookmarkJump(path, line) or NO_MORE_BOOKMARKS.
        """
        active = self._target(active)
        through_all = self._option("navigate_through_all_files", True)
        wrap = self._option("wrap_navigation", True)

        if not through_all:
            line = active.next_bookmark(current_line, direction, wrap=wrap)
            if line == NO_MORE_BOOKMARKS:
                return NO_MORE_BOOKMARKS
            return BookmarkJump(active.path, line)

        line = active.next_bookmark(current_line, direction, wrap=False)
        if line != NO_MORE_BOOKMARKS:
            return BookmarkJump(active.path, line)

        index = self._next_document_index(active, direction)
        if index < 0:
            if wrap:
                # Active file may be an unsaved buffer the walk skipped
                line = active.next_bookmark(current_line, direction, wrap=True)
                if line != NO_MORE_BOOKMARKS:
                    return BookmarkJump(active.path, line)
            log.debug("No more bookmarks after %s:%d", active.path, current_line)
            return NO_MORE_BOOKMARKS

        start = self._index_of(active)
        if not wrap and start >= 0:
            passed_end = (index <= start if direction == JUMP_FORWARD
                          else index >= start)
            if passed_end:
                return NO_MORE_BOOKMARKS

        target = self.entries[index]
        return BookmarkJump(target.path, target.first_bookmark(direction))

    def _next_document_index(self, active, direction):
        if direction not in (JUMP_FORWARD, JUMP_BACKWARD):
            raise ValueError("Unknown jump direction: %r" % (direction,))
        count = len(self.entries)
        if not count:
            return -1

        start = self._index_of(active)
        if start < 0:
            # Not tracked: visit every entry once from the near end
            start = -1 if direction == JUMP_FORWARD else count

        # At most one full lap; the last step lands back on the start entry
        for step in range(1, count + 1):
            index = (start + step * direction) % count
            candidate = self.entries[index]
            if not candidate.lines:
                continue
            if not self._exists(candidate.path):
                log.debug("Skipping missing file: %s", candidate.path)
                continue
            return index
        return -1

    def _index_of(self, entry):
        if entry is None:
            return -1
        for index, item in enumerate(self.entries):
            if item is entry:
                return index
        path = self.normalize(entry.path)
        for index, item in enumerate(self.entries):
            if item.path == path:
                return index
        return -1

    # ── Serialization ─────────────────────────────────────────────────

    def zip(self, relative_path=False):
        """Independent copy holding only files that have bookmarks.

        With *relative_path*, paths under the active workspace root get the
        root token in its place so the result can move between machines.
        Paths under any other folder stay absolute, since load_from only
        restores the active root.
        """
        snapshot = BookmarkController(
            workspace=self._workspace, documents=self._documents,
            filesystem=self._filesystem, config=self._config)
        snapshot.entries = [e.copy() for e in self.entries if e.lines]

        root = self._workspace.active_root() if self._workspace else None
        if relative_path and root:
            token = self._root_token()
            for entry in snapshot.entries:
                entry.path = _relativize(entry.path, root, token)
        return snapshot

    def to_dict(self):
        return {"bookmarks": [entry.to_dict() for entry in self.entries]}

    def load_from(self, data, relative_path=False):
        """Merge a persisted form into the collection.

        *data* may be a dict, a JSON string, or a snapshot returned by zip.
        """
        if isinstance(data, BookmarkController):
            data = data.to_dict()
        if not data:
            return
        if isinstance(data, str):
            data = json.loads(data)

        root = None
        token = self._root_token()
        if relative_path:
            root = self._workspace.active_root() if self._workspace else None
            if root is None:
                log.warning("No workspace root; keeping %s in loaded paths", token)

        loaded = 0
        for record in data.get("bookmarks") or ():
            path = record.get("path", record.get("fsPath"))
            if not path:
                log.warning("Skipping bookmark record without a path: %r", record)
                continue
            if root is not None:
                path = _absolutize(path, root, token)
            entry = self.add(path)
            entry.lines.extend(int(line) for line in
                               record.get("lines", record.get("bookmarks", ())))
            loaded += 1
        log.info("Loaded bookmarks for %d file(s)", loaded)

    def dispose(self):
        """Pruned snapshot for the caller to persist. Performs no I/O."""
        snapshot = self.zip()
        log.debug("Disposed: %d file(s) with bookmarks", len(snapshot.entries))
        return snapshot

    # ── Helpers ───────────────────────────────────────────────────────

    def _target(self, entry):
        target = entry if entry is not None else self.active
        if target is None:
            raise NoActiveBookmarkError("No active file for bookmark operation")
        return target

    def _check_index(self, entry, index):
        if not 0 <= index < len(entry.lines):
            raise BookmarkIndexError(
                "Bookmark index %r out of range for %s (%d bookmarks)"
                % (index, entry.path, len(entry.lines)))

    def _preview(self, entry, line, preview=None):
        if preview is not None:
            return preview
        if self._documents is None:
            return ""
        return self._documents.line_text(entry.path, line)

    def _exists(self, path):
        if self._filesystem is None:
            return os.path.exists(path)
        return self._filesystem.exists(path)

    def _option(self, key, default):
        if self._config is None:
            return default
        return self._config.get(key, default)

    def _root_token(self):
        return self._option("root_token", ROOT_TOKEN) or ROOT_TOKEN

    def _emit(self, event, **data):
        if self._events is not None:
            self._events.emit(event, **data)
