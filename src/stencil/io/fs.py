from __future__ import annotations

"""
fs – Filesystem capability used by the copier, the walker and the renderer.

Provides:
  • RealFS   – thin delegation to os / shutil / tempfile
  • ErrorFS  – wraps another FS and forces chosen calls to fail (tests)
  • is_not_exist(exc) – classify "does not exist" failures
"""

import errno
import os
import shutil
import tempfile
from collections import Counter
from typing import BinaryIO, Iterator, Optional

from stencil.core.interfaces.fs import FileSystemProtocol


class RealFS(FileSystemProtocol):
    """OS-backed filesystem."""

    def stat(self, path: str) -> os.stat_result:
        return os.stat(path)

    def lstat(self, path: str) -> os.stat_result:
        return os.lstat(path)

    def scandir(self, path: str) -> Iterator[os.DirEntry]:
        with os.scandir(path) as it:
            entries = list(it)
        return iter(entries)

    def open(self, path: str) -> BinaryIO:
        return open(path, 'rb')

    def open_file(self, path: str, flags: int, mode: int) -> BinaryIO:
        fd = os.open(path, flags, mode)
        return os.fdopen(fd, 'wb' if flags & (os.O_WRONLY | os.O_RDWR) else 'rb')

    def read_file(self, path: str) -> bytes:
        with open(path, 'rb') as fh:
            return fh.read()

    def write_file(self, path: str, data: bytes, mode: int) -> None:
        # The mode applies only when the file is created.
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode)
        with os.fdopen(fd, 'wb') as fh:
            fh.write(data)

    def mkdir_all(self, path: str, mode: int) -> None:
        os.makedirs(path, mode=mode, exist_ok=True)

    def mkdir_temp(self, base: Optional[str], prefix: str) -> str:
        return tempfile.mkdtemp(prefix=prefix, dir=base or None)

    def remove(self, path: str) -> None:
        os.remove(path)

    def remove_all(self, path: str) -> None:
        # Missing paths are not an error, like os.RemoveAll.
        if not os.path.lexists(path):
            return
        if os.path.isdir(path) and not os.path.islink(path):
            shutil.rmtree(path)
        else:
            os.remove(path)

    def rename(self, src: str, dst: str) -> None:
        os.replace(src, dst)


class ErrorFS(FileSystemProtocol):
    """Delegating FS that raises a configured error for selected calls.

    Every call is counted in ``calls`` (method name → count), which lets tests
    assert that a given call never happened.
    """

    def __init__(
        self,
        fs: Optional[FileSystemProtocol] = None,
        *,
        stat_err: Optional[BaseException] = None,
        lstat_err: Optional[BaseException] = None,
        scandir_err: Optional[BaseException] = None,
        open_err: Optional[BaseException] = None,
        open_file_err: Optional[BaseException] = None,
        read_file_err: Optional[BaseException] = None,
        write_file_err: Optional[BaseException] = None,
        mkdir_all_err: Optional[BaseException] = None,
        mkdir_temp_err: Optional[BaseException] = None,
        remove_all_err: Optional[BaseException] = None,
        rename_err: Optional[BaseException] = None,
    ) -> None:
        self._fs = fs or RealFS()
        self.stat_err = stat_err
        self.lstat_err = lstat_err
        self.scandir_err = scandir_err
        self.open_err = open_err
        self.open_file_err = open_file_err
        self.read_file_err = read_file_err
        self.write_file_err = write_file_err
        self.mkdir_all_err = mkdir_all_err
        self.mkdir_temp_err = mkdir_temp_err
        self.remove_all_err = remove_all_err
        self.rename_err = rename_err
        self.calls: Counter[str] = Counter()

    def _hit(self, name: str, err: Optional[BaseException]) -> None:
        self.calls[name] += 1
        if err is not None:
            raise err

    def stat(self, path: str) -> os.stat_result:
        self._hit('stat', self.stat_err)
        return self._fs.stat(path)

    def lstat(self, path: str) -> os.stat_result:
        self._hit('lstat', self.lstat_err)
        return self._fs.lstat(path)

    def scandir(self, path: str) -> Iterator[os.DirEntry]:
        self._hit('scandir', self.scandir_err)
        return self._fs.scandir(path)

    def open(self, path: str) -> BinaryIO:
        self._hit('open', self.open_err)
        return self._fs.open(path)

    def open_file(self, path: str, flags: int, mode: int) -> BinaryIO:
        self._hit('open_file', self.open_file_err)
        return self._fs.open_file(path, flags, mode)

    def read_file(self, path: str) -> bytes:
        self._hit('read_file', self.read_file_err)
        return self._fs.read_file(path)

    def write_file(self, path: str, data: bytes, mode: int) -> None:
        self._hit('write_file', self.write_file_err)
        self._fs.write_file(path, data, mode)

    def mkdir_all(self, path: str, mode: int) -> None:
        self._hit('mkdir_all', self.mkdir_all_err)
        self._fs.mkdir_all(path, mode)

    def mkdir_temp(self, base: Optional[str], prefix: str) -> str:
        self._hit('mkdir_temp', self.mkdir_temp_err)
        return self._fs.mkdir_temp(base, prefix)

    def remove(self, path: str) -> None:
        self._hit('remove', None)
        self._fs.remove(path)

    def remove_all(self, path: str) -> None:
        self._hit('remove_all', self.remove_all_err)
        self._fs.remove_all(path)

    def rename(self, src: str, dst: str) -> None:
        self._hit('rename', self.rename_err)
        self._fs.rename(src, dst)


def is_not_exist(exc: BaseException) -> bool:
    """Return True when *exc* means the path does not exist."""
    if isinstance(exc, FileNotFoundError):
        return True
    return isinstance(exc, OSError) and exc.errno == errno.ENOENT


def fs_error(op: str, path: str, exc: OSError, *, prefix: str = '') -> OSError:
    """Return an OSError naming *op* and *path*, keeping the errno subclass.

    ``OSError(errno, ...)`` maps back to FileNotFoundError, PermissionError and
    friends, so callers can keep matching on the concrete type.
    """
    reason = exc.strerror or str(exc) or exc.__class__.__name__
    message = f'{prefix}{op}({path}): {reason}'
    if exc.errno is None:
        return OSError(message)
    return OSError(exc.errno, message, path)
