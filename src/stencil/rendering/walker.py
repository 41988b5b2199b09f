from __future__ import annotations

"""
walker – Read, transform and conditionally rewrite a deduplicated set of files.

``walk_and_modify`` is the engine behind every in-place action (append,
string/regex replace, regex name lookup, go_template). Path expressions are
template-expanded, sandboxed and glob-expanded relative to the scratch dir;
directories are walked recursively. Each physical file is transformed at
most once per call and written back only when its bytes changed.
"""

import os
import stat
from typing import Callable, Iterator, List, Sequence

from stencil.constants import OWNER_RWX
from stencil.core.models import PosString, StrLike, pos_of
from stencil.errors import NoGlobMatchError, StencilError
from stencil.io.fs import fs_error, is_not_exist
from stencil.logging.helpers import trace_io
from stencil.rendering.context import StepParams
from stencil.rendering.scope import Scope
from stencil.rendering.template_engine import parse_exec
from stencil.utils.globs import expand_globs
from stencil.utils.paths import reject_backslash, safe_rel_path, to_host, to_posix

Transform = Callable[[bytes], bytes]


def process_paths(paths: Sequence[StrLike], scope: Scope, *, engine=None) -> List[PosString]:
    """Template-expand and sandbox *paths*; the inputs are left untouched."""
    out: List[PosString] = []
    for p in paths:
        pos = pos_of(p)
        expanded = parse_exec(p, scope, engine=engine)
        reject_backslash(expanded, pos)
        out.append(PosString(safe_rel_path(to_host(expanded), pos), pos))
    return out


def _files_under(sp: StepParams, path: str) -> Iterator[str]:
    """Yield *path* if it is a file, else every file below it in sorted order."""
    if not stat.S_ISDIR(sp.fs.stat(path).st_mode):
        yield path
        return
    for entry in sorted(sp.fs.scandir(path), key=lambda e: e.name):
        if entry.is_dir(follow_symlinks=False):
            yield from _files_under(sp, entry.path)
        else:
            yield entry.path


def _check_exists(sp: StepParams, abs_path: PosString, prefix: str) -> None:
    # Literal paths are not resolved by the glob expander.
    try:
        sp.fs.stat(abs_path.value)
    except OSError as exc:
        if is_not_exist(exc):
            rel = to_posix(os.path.relpath(abs_path.value, sp.scratch_dir))
            raise NoGlobMatchError(rel, pos=abs_path.pos) from exc
        raise fs_error('stat', abs_path.value, exc, prefix=prefix) from exc


def walk_and_modify(sp: StepParams, raw_paths: Sequence[StrLike], transform: Transform) -> None:
    """Apply *transform* to every file matched by *raw_paths* under the scratch dir.

    Raises:
        NoGlobMatchError: a path matched nothing.
        StencilError: the transform failed; the message names the file.
        OSError: read or write failures, with the operation and path.
    """
    log = sp.logger
    paths = process_paths(raw_paths, sp.scope, engine=sp.engine)
    globbed = expand_globs(paths, sp.scratch_dir, skip_globs=sp.features.skip_globs, logger=log)
    seen: set[str] = set()

    for abs_path in globbed:
        prefix = abs_path.pos.prefix() if abs_path.pos is not None else ''
        if sp.features.skip_globs:
            _check_exists(sp, abs_path, prefix)
        for path in _files_under(sp, abs_path.value):
            if path in seen:
                log.debug('skipping file as already seen: %s', path)
                continue
            sp.check_cancelled()

            try:
                old = sp.fs.read_file(path)
            except OSError as exc:
                raise fs_error('read_file', path, exc, prefix=prefix) from exc

            rel = os.path.relpath(path, sp.scratch_dir)
            try:
                new = transform(old)
            except StencilError as exc:
                exc.prefixed(f'when processing template file "{rel}": ')
                raise
            seen.add(path)

            if new == old:
                continue
            try:
                sp.fs.write_file(path, new, OWNER_RWX)
            except OSError as exc:
                raise fs_error('write_file', path, exc, prefix=prefix) from exc
            sp.report.files_modified += 1
            trace_io(log, 'wrote modification', path=rel)
