"""DocumentService — line text lookup for bookmark previews.

Open editor buffers registered with ``update_buffer`` take precedence over
the file on disk, so previews show unsaved text.
"""

import logging

from linemarks.framework.service_base import ServiceBase

log = logging.getLogger("linemarks.document")


class DocumentService(ServiceBase):
    name = "documents"

    def __init__(self):
        self._buffers = {}  # path -> list of lines

    def update_buffer(self, path, text):
        self._buffers[path] = text.splitlines()

    def close_buffer(self, path):
        self._buffers.pop(path, None)

    def line_text(self, path, line):
        """Text of zero-based *line* in *path*, or "" when unavailable."""
        if line < 0:
            return ""
        lines = self._buffers.get(path)
        if lines is not None:
            return lines[line] if line < len(lines) else ""
        try:
            with open(path, encoding="utf-8", errors="replace") as f:
                for i, text in enumerate(f):
                    if i == line:
                        return text.rstrip("\r\n")
        except OSError as e:
            log.debug("Cannot read %s for preview: %s", path, e)
        return ""
