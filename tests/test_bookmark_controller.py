"""Tests for BookmarkController registry, mutation and notifications."""

import pytest

from linemarks.modules.bookmarks.controller import (
    BookmarkController,
    BookmarkError,
    BookmarkIndexError,
    NoActiveBookmarkError,
)


A = "/home/dev/project/a.py"
B = "/home/dev/project/b.py"


class TestNormalize:
    @pytest.mark.parametrize("raw, expected", [
        ("///foo/x.cpp", "/foo/x.cpp"),
        ("/foo/x.cpp", "/foo/x.cpp"),
        ("//////foo", "/foo"),
        ("/foo///bar", "/foo///bar"),
        ("relative/path", "relative/path"),
        ("", ""),
    ])
    def test_normalize(self, raw, expected):
        assert BookmarkController.normalize(raw) == expected

    @pytest.mark.parametrize("raw", ["///a", "////a", "/a", "a///b", "//x"])
    def test_idempotent(self, raw):
        once = BookmarkController.normalize(raw)
        assert BookmarkController.normalize(once) == once


class TestRegistry:
    def test_add_creates_empty_entry(self, controller):
        entry = controller.add(A)
        assert entry.path == A
        assert entry.lines == []
        assert controller.entries == [entry]

    def test_add_is_idempotent(self, controller):
        first = controller.add(A)
        second = controller.add(A)
        assert first is second
        assert len(controller.entries) == 1

    def test_add_dedups_triple_slash_variant(self, controller):
        controller.add("//" + A)
        controller.add(A)
        assert [e.path for e in controller.entries] == [A]

    def test_entries_keep_first_bookmarked_order(self, controller):
        controller.add(B)
        controller.add(A)
        controller.add(B)
        assert [e.path for e in controller.entries] == [B, A]

    def test_from_path(self, controller):
        entry = controller.add(A)
        assert controller.from_path(A) is entry
        assert controller.from_path("//" + A) is entry

    def test_from_path_not_found(self, controller):
        assert controller.from_path(B) is None

    def test_activate(self, controller):
        entry = controller.activate(A)
        assert controller.active is entry
        assert controller.activate(A) is entry
        assert len(controller.entries) == 1

    def test_has_any_bookmark(self, controller):
        assert controller.has_any_bookmark() is False
        controller.activate(A)
        assert controller.has_any_bookmark() is False
        controller.add_bookmark(3)
        assert controller.has_any_bookmark() is True

    def test_empty_entry_survives(self, controller):
        entry = controller.activate(A)
        controller.add_bookmark(3)
        controller.remove_bookmark(0, 3)
        controller.activate(B)
        controller.activate(A)
        assert controller.entries[0] is entry
        assert len(controller.entries) == 2


class TestAddBookmark:
    def test_appends_and_notifies(self, controller, recorder, documents):
        documents.texts[A] = ["l0", "l1", "l2", "l3", "def main():"]
        entry = controller.activate(A)
        entry.lines.extend([3, 7])

        controller.add_bookmark(4)

        assert entry.lines == [3, 7, 4]
        assert recorder.calls == [("bookmark:added", {
            "bookmark": entry, "line": 5, "preview": "def main():"})]

    def test_explicit_preview_wins(self, controller, recorder, documents):
        documents.texts[A] = ["from disk"]
        controller.activate(A)
        controller.add_bookmark(0, preview="from buffer")
        assert recorder.calls[0][1]["preview"] == "from buffer"

    def test_no_documents_collaborator(self, events, recorder):
        ctrl = BookmarkController(events=events)
        ctrl.activate(A)
        ctrl.add_bookmark(1)
        assert recorder.calls[0][1]["preview"] == ""

    def test_requires_active(self, controller, recorder):
        with pytest.raises(NoActiveBookmarkError):
            controller.add_bookmark(1)
        assert recorder.calls == []

    def test_works_without_event_bus(self):
        ctrl = BookmarkController()
        ctrl.activate(A)
        ctrl.add_bookmark(2)
        assert ctrl.active.lines == [2]


class TestRemoveBookmark:
    def test_removes_by_index(self, controller, recorder):
        entry = controller.activate(A)
        entry.lines.extend([3, 7])

        controller.remove_bookmark(0, 3)

        assert entry.lines == [7]
        assert recorder.calls == [("bookmark:removed", {"bookmark": entry, "line": 4})]

    def test_explicit_entry(self, controller, recorder):
        controller.activate(A).lines.append(1)
        other = controller.add(B)
        other.lines.extend([5, 6])

        controller.remove_bookmark(1, 6, other)

        assert other.lines == [5]
        assert controller.active.lines == [1]
        assert recorder.calls[0][1]["bookmark"] is other

    @pytest.mark.parametrize("index", [-1, 2, 10])
    def test_out_of_range(self, controller, recorder, index):
        entry = controller.activate(A)
        entry.lines.extend([3, 7])
        with pytest.raises(BookmarkIndexError):
            controller.remove_bookmark(index, 3)
        assert entry.lines == [3, 7]
        assert recorder.calls == []

    def test_index_error_is_an_index_error(self):
        assert issubclass(BookmarkIndexError, IndexError)
        assert issubclass(BookmarkIndexError, BookmarkError)

    def test_requires_target(self, controller):
        with pytest.raises(NoActiveBookmarkError):
            controller.remove_bookmark(0, 3)


class TestUpdateBookmark:
    def test_overwrites_by_index(self, controller, recorder, documents):
        documents.texts[A] = ["x"] * 9 + ["moved here"]
        entry = controller.activate(A)
        entry.lines.extend([3, 7])

        # old_line is informational only
        controller.update_bookmark(1, 99, 9)

        assert entry.lines == [3, 9]
        assert recorder.calls == [("bookmark:updated", {
            "bookmark": entry, "index": 1, "line": 10, "preview": "moved here"})]

    def test_explicit_entry(self, controller):
        controller.activate(A)
        other = controller.add(B)
        other.lines.append(2)
        controller.update_bookmark(0, 2, 4, other, preview="")
        assert other.lines == [4]

    def test_out_of_range(self, controller):
        controller.activate(A)
        with pytest.raises(BookmarkIndexError):
            controller.update_bookmark(0, 1, 2)


class TestToggle:
    def test_toggle_adds_then_removes(self, controller, recorder):
        entry = controller.activate(A)
        assert controller.toggle_bookmark(4) is True
        assert entry.lines == [4]
        assert controller.toggle_bookmark(4) is False
        assert entry.lines == []
        assert recorder.names() == ["bookmark:added", "bookmark:removed"]
        assert recorder.calls[1][1]["line"] == 5


class TestClear:
    def test_clear_active(self, controller, recorder):
        entry = controller.activate(A)
        entry.lines.extend([1, 2])
        controller.clear()
        assert entry.lines == []
        assert recorder.calls == [("bookmark:cleared", {"bookmark": entry})]
        assert controller.entries == [entry]

    def test_clear_explicit_entry(self, controller):
        controller.activate(A).lines.append(1)
        other = controller.add(B)
        other.lines.append(2)
        controller.clear(other)
        assert other.lines == []
        assert controller.active.lines == [1]

    def test_clear_requires_target(self, controller):
        with pytest.raises(NoActiveBookmarkError):
            controller.clear()

    def test_clear_all_emits_once(self, controller, recorder):
        controller.add(A).lines.append(1)
        controller.add(B).lines.extend([2, 3])
        controller.clear_all()
        assert not controller.has_any_bookmark()
        assert recorder.calls == [("bookmarks:cleared_all", {})]
        assert len(controller.entries) == 2


class TestListBookmarks:
    def test_lists_all_files_sorted_within_file(self, controller, documents):
        documents.texts[A] = ["zero", "one", "two"]
        controller.add(A).lines.extend([2, 0])
        controller.add(B).lines.append(1)
        assert controller.list_bookmarks() == [
            {"path": A, "line": 1, "preview": "zero"},
            {"path": A, "line": 3, "preview": "two"},
            {"path": B, "line": 2, "preview": ""},
        ]

    def test_single_entry(self, controller):
        controller.add(A).lines.append(1)
        other = controller.add(B)
        other.lines.append(4)
        assert [b["path"] for b in controller.list_bookmarks(other)] == [B]


class TestObservers:
    def test_failing_observer_does_not_break_mutation(self, controller, events):
        def explode(**kw):
            raise RuntimeError("decoration update failed")

        events.subscribe("bookmark:added", explode)
        controller.activate(A)
        controller.add_bookmark(1)
        assert controller.active.lines == [1]
