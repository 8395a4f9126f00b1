"""FileSystemService — file existence checks for navigation."""

import os

from linemarks.framework.service_base import ServiceBase


class FileSystemService(ServiceBase):
    name = "filesystem"

    def exists(self, path):
        return bool(path) and os.path.exists(path)
