"""WorkspaceService — maps file paths to the workspace folder containing them."""

import logging
import os

from linemarks.framework.service_base import ServiceBase

log = logging.getLogger("linemarks.workspace")


def _is_under(path, root):
    if path == root:
        return True
    base = root.rstrip("/\\")
    return path.startswith(base + "/") or path.startswith(base + os.sep)


class WorkspaceService(ServiceBase):
    """Ordered list of workspace folders.

    The first folder is the active root, matching how editors treat the
    first folder of a multi-root workspace.
    """

    name = "workspace"

    def __init__(self, folders=None):
        self._folders = []
        for folder in folders or ():
            self.add_folder(folder)

    @property
    def folders(self):
        return list(self._folders)

    def add_folder(self, folder):
        folder = folder.rstrip("/\\") or folder
        if folder not in self._folders:
            self._folders.append(folder)
            log.debug("Workspace folder added: %s", folder)

    def remove_folder(self, folder):
        folder = folder.rstrip("/\\") or folder
        if folder in self._folders:
            self._folders.remove(folder)

    def root_for(self, path):
        """Deepest workspace folder containing *path*, or None."""
        best = None
        for folder in self._folders:
            if _is_under(path, folder) and (best is None or len(folder) > len(best)):
                best = folder
        return best

    def active_root(self):
        return self._folders[0] if self._folders else None
