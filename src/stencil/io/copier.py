from __future__ import annotations

"""
copier – Recursive copy of a file tree with overwrite, backup and hashing policy.

The walk is depth-first and pre-order; directory entries are visited in
sorted name order so that output and errors are reproducible. Directories are
never created eagerly: the parent of each file is created when the file is
written, hence empty source directories are not materialised.
"""

import logging
import os
import stat
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from stencil.constants import OWNER_RWX
from stencil.core.cancel import CancelToken, check_cancelled
from stencil.core.interfaces.fs import FileSystemProtocol
from stencil.core.models import ConfigPos, CopyHint
from stencil.errors import OverwriteConflictError, StencilError, SymlinkForbiddenError
from stencil.io.fs import fs_error, is_not_exist
from stencil.logging.helpers import get_logger, trace_io

_CHUNK = 64 * 1024


@dataclass(frozen=True)
class CopyEntry:
    """What a copy visitor sees for each walked entry."""
    path: str
    rel_path: str
    is_dir: bool


CopyVisitor = Callable[[str, CopyEntry], CopyHint]
BackupDirMaker = Callable[[FileSystemProtocol], str]


@dataclass
class CopyParams:
    """Inputs of :func:`copy_recursive`.

    ``out_hashes`` is filled with ``rel_path -> digest`` (forward slashes)
    when ``hasher`` is set. ``hasher`` is any zero-argument constructor of an
    object with ``update`` and ``digest``, e.g. ``hashlib.sha256``.
    """
    src_root: str
    dst_root: str
    fs: FileSystemProtocol
    visitor: Optional[CopyVisitor] = None
    dry_run: bool = False
    backup_dir_maker: Optional[BackupDirMaker] = None
    hasher: Optional[Callable[[], Any]] = None
    out_hashes: Optional[Dict[str, bytes]] = None
    cancel: Optional[CancelToken] = None
    logger: Optional[logging.Logger] = None
    backup_dir: Optional[str] = field(default=None, init=False)


def copy_recursive(params: CopyParams, pos: Optional[ConfigPos] = None) -> None:
    """Copy ``params.src_root`` (a file or a directory) onto ``params.dst_root``.

    Raises:
        SymlinkForbiddenError: the root or any entry below it is a symlink.
        OverwriteConflictError: a destination exists and may not be replaced,
            or a file and a directory collide.
        OSError: filesystem failures. Those coming from the walk itself are
            left untouched.
    """
    log = params.logger or get_logger('io.copier')
    root_st = params.fs.lstat(params.src_root)
    if stat.S_ISLNK(root_st.st_mode):
        raise SymlinkForbiddenError(params.src_root)
    _visit(params, log, pos, params.src_root, os.curdir, stat.S_ISDIR(root_st.st_mode))


def _visit(
    params: CopyParams,
    log: logging.Logger,
    pos: Optional[ConfigPos],
    path: str,
    rel: str,
    is_dir: bool,
) -> None:
    check_cancelled(params.cancel)
    log.debug('handling directory entry %s', path)

    entry = CopyEntry(path=path, rel_path=rel, is_dir=is_dir)
    hint = params.visitor(rel, entry) if params.visitor is not None else CopyHint()
    if hint.skip:
        log.debug('visitor skipped %s', rel)
        return

    if not is_dir:
        _copy_one(params, log, pos, path, rel, hint)
        return

    children = sorted(params.fs.scandir(path), key=lambda e: e.name)
    for child in children:
        child_rel = child.name if rel == os.curdir else os.path.join(rel, child.name)
        if child.is_symlink():
            raise SymlinkForbiddenError(child_rel)
        _visit(params, log, pos, child.path, child_rel, child.is_dir(follow_symlinks=False))


def _copy_one(
    params: CopyParams,
    log: logging.Logger,
    pos: Optional[ConfigPos],
    src: str,
    rel: str,
    hint: CopyHint,
) -> None:
    fs = params.fs
    dst = params.dst_root if rel == os.curdir else os.path.join(params.dst_root, rel)
    prefix = pos.prefix() if pos is not None else ''

    mkdir_all_checked(fs, os.path.dirname(dst), dry_run=params.dry_run, pos=pos)

    try:
        dst_st = fs.stat(dst)
    except NotADirectoryError:
        raise OverwriteConflictError(
            f'cannot overwrite a file with a directory of the same name, "{os.path.dirname(dst)}"',
            dst,
            pos=pos,
        )
    except OSError as exc:
        if not is_not_exist(exc):
            raise fs_error('stat', dst, exc, prefix=prefix) from exc
        dst_st = None

    if dst_st is not None:
        if stat.S_ISDIR(dst_st.st_mode):
            raise OverwriteConflictError(
                'cannot overwrite a directory with a file of the same name; '
                f'destination is "{dst}", source is "{src}"',
                dst,
                pos=pos,
            )
        if not hint.allow_preexisting:
            raise OverwriteConflictError(
                f'destination file {rel} already exists and overwriting was not enabled '
                'with --force-overwrite',
                dst,
                pos=pos,
            )
        if hint.backup_if_exists and not params.dry_run:
            if params.backup_dir is None:
                if params.backup_dir_maker is None:
                    raise StencilError('a backup was requested but no backup directory maker was given')
                params.backup_dir = params.backup_dir_maker(fs)
            backup_file(fs, params.backup_dir, params.dst_root, rel, logger=log)

    digest = params.hasher() if params.hasher is not None else None
    copy_file(fs, src, dst, dry_run=params.dry_run, tee=digest, pos=pos, logger=log)
    if digest is not None and params.out_hashes is not None:
        params.out_hashes[rel.replace(os.sep, '/')] = digest.digest()


def copy_file(
    fs: FileSystemProtocol,
    src: str,
    dst: str,
    *,
    dry_run: bool = False,
    tee: Any = None,
    pos: Optional[ConfigPos] = None,
    logger: Optional[logging.Logger] = None,
) -> None:
    """Copy one file keeping the source permission bits.

    In dry run the source is still read (and fed to *tee*, anything with an
    ``update(bytes)`` method) but nothing is written.
    """
    log = logger or get_logger('io.copier')
    prefix = pos.prefix() if pos is not None else ''

    try:
        mode = stat.S_IMODE(fs.stat(src).st_mode)
    except OSError as exc:
        raise fs_error('stat', src, exc, prefix=prefix) from exc
    try:
        reader = fs.open(src)
    except OSError as exc:
        raise fs_error('open', src, exc, prefix=prefix) from exc

    with reader:
        writer = None
        if not dry_run:
            parent = os.path.dirname(dst)
            try:
                fs.mkdir_all(parent, OWNER_RWX)
            except OSError as exc:
                raise fs_error('mkdir_all', parent, exc, prefix=prefix) from exc
            try:
                writer = fs.open_file(dst, os.O_CREAT | os.O_TRUNC | os.O_WRONLY, mode)
            except OSError as exc:
                raise fs_error('open_file', dst, exc, prefix=prefix) from exc
        try:
            while True:
                chunk = reader.read(_CHUNK)
                if not chunk:
                    break
                if tee is not None:
                    tee.update(chunk)
                if writer is not None:
                    writer.write(chunk)
        finally:
            if writer is not None:
                writer.close()

    trace_io(log, 'copied file', source=src, destination=dst, dry_run=dry_run)


def backup_file(
    fs: FileSystemProtocol,
    backup_dir: str,
    root: str,
    rel_path: str,
    *,
    logger: Optional[logging.Logger] = None,
) -> str:
    """Copy ``root/rel_path`` to ``backup_dir/rel_path`` and return the copy's path."""
    log = logger or get_logger('io.copier')
    target = os.path.join(backup_dir, rel_path)
    source = os.path.join(root, rel_path)
    try:
        copy_file(fs, source, target, logger=log)
    except OSError as exc:
        raise fs_error(
            'backup', source, exc, prefix=f'failed backing up file "{source}" at "{target}" before overwriting: '
        ) from exc
    log.debug('completed backup %s -> %s', source, target)
    return target


def mkdir_all_checked(
    fs: FileSystemProtocol, path: str, *, dry_run: bool = False, pos: Optional[ConfigPos] = None
) -> None:
    """Create *path* unless it exists; refuse when a file sits in the way."""
    prefix = pos.prefix() if pos is not None else ''
    try:
        st = fs.stat(path)
    except NotADirectoryError:
        raise OverwriteConflictError(
            f'cannot overwrite a file with a directory of the same name, "{path}"', path, pos=pos
        )
    except OSError as exc:
        if not is_not_exist(exc):
            raise fs_error('stat', path, exc, prefix=prefix) from exc
        st = None

    if st is not None:
        if not stat.S_ISDIR(st.st_mode):
            raise OverwriteConflictError(
                f'cannot overwrite a file with a directory of the same name, "{path}"', path, pos=pos
            )
        return

    if dry_run:
        return
    try:
        fs.mkdir_all(path, OWNER_RWX)
    except OSError as exc:
        raise fs_error('mkdir_all', path, exc, prefix=prefix) from exc
