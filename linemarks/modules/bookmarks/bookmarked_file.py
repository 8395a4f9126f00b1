"""Bookmarks of a single file."""

JUMP_FORWARD = 1
JUMP_BACKWARD = -1

# Navigation result when there is nowhere to go. Not an error.
NO_MORE_BOOKMARKS = -1


class BookmarkedFile:
    """A file path and the zero-based lines bookmarked in it.

    ``lines`` keeps insertion order; navigation never relies on it being
    sorted. The owning controller normalizes ``path`` before creating the
    entry.
    """

    __slots__ = ("path", "lines")

    def __init__(self, path, lines=None):
        self.path = path
        self.lines = list(lines) if lines else []

    def __repr__(self):
        return "BookmarkedFile(%r, %r)" % (self.path, self.lines)

    def has_bookmark(self, line):
        return line in self.lines

    def index_of(self, line):
        """Index of *line* in ``lines``, or -1."""
        try:
            return self.lines.index(line)
        except ValueError:
            return -1

    def next_bookmark(self, current_line, direction=JUMP_FORWARD, wrap=True):
        """Closest bookmark after (or before, going backward) *current_line*.

        With *wrap*, running off the end restarts from the first bookmark in
        the direction of travel; without it the result is
        NO_MORE_BOOKMARKS.
        """
        if not self.lines:
            return NO_MORE_BOOKMARKS

        if direction == JUMP_FORWARD:
            candidates = [line for line in self.lines if line > current_line]
            if candidates:
                return min(candidates)
        else:
            candidates = [line for line in self.lines if line < current_line]
            if candidates:
                return max(candidates)

        if not wrap:
            return NO_MORE_BOOKMARKS
        return self.first_bookmark(direction)

    def first_bookmark(self, direction=JUMP_FORWARD):
        """Where a jump into this file lands: top for forward, bottom for backward."""
        if not self.lines:
            return NO_MORE_BOOKMARKS
        if direction == JUMP_FORWARD:
            return min(self.lines)
        return max(self.lines)

    def clear(self):
        self.lines = []

    def copy(self):
        return BookmarkedFile(self.path, self.lines)

    def to_dict(self):
        return {"path": self.path, "lines": list(self.lines)}
