from __future__ import annotations

import logging
import os
from typing import List, Optional

from stencil.constants import ENV_KEEP_TEMP_DIRS
from stencil.core.interfaces.fs import FileSystemProtocol
from stencil.logging.helpers import get_logger


def keep_temp_dirs_from_env() -> bool:
    return os.getenv(ENV_KEEP_TEMP_DIRS) == '1'


class DirTracker:
    """Remember temporary directories and remove them at the end of a render."""

    def __init__(
        self,
        fs: FileSystemProtocol,
        *,
        keep_temp_dirs: bool = False,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._fs = fs
        self._keep = keep_temp_dirs
        self._log = logger or get_logger('io.tempdirs')
        self.dirs: List[str] = []

    def track(self, path: Optional[str]) -> None:
        if path:
            self.dirs.append(path)

    def mkdir_temp_tracked(self, base: Optional[str], prefix: str) -> str:
        path = self._fs.mkdir_temp(base, prefix)
        self.track(path)
        return path

    def remove_all(self) -> List[BaseException]:
        """Remove every tracked directory, returning the failures.

        Every directory is attempted even when an earlier one fails.
        """
        if self._keep:
            self._log.warning('⚠  keeping temporary directories: %s', ', '.join(self.dirs))
            return []
        self._log.debug('removing all temporary directories (disable with keep_temp_dirs)')
        errors: List[BaseException] = []
        for path in self.dirs:
            try:
                self._fs.remove_all(path)
            except OSError as exc:
                errors.append(exc)
        return errors
