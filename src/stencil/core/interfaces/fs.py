from __future__ import annotations

import os
from typing import BinaryIO, Iterator, Protocol, runtime_checkable


@runtime_checkable
class FileSystemProtocol(Protocol):
    """The fixed set of filesystem calls stencil makes.

    Every path is a host path string. Errors are raised as ``OSError``.
    """

    def stat(self, path: str) -> os.stat_result:
        ...

    def lstat(self, path: str) -> os.stat_result:
        ...

    def scandir(self, path: str) -> Iterator[os.DirEntry]:
        ...

    def open(self, path: str) -> BinaryIO:
        ...

    def open_file(self, path: str, flags: int, mode: int) -> BinaryIO:
        ...

    def read_file(self, path: str) -> bytes:
        ...

    def write_file(self, path: str, data: bytes, mode: int) -> None:
        ...

    def mkdir_all(self, path: str, mode: int) -> None:
        ...

    def mkdir_temp(self, base: str | None, prefix: str) -> str:
        ...

    def remove(self, path: str) -> None:
        ...

    def remove_all(self, path: str) -> None:
        ...

    def rename(self, src: str, dst: str) -> None:
        ...
