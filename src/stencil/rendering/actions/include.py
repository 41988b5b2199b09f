from __future__ import annotations

"""
include – Copy files from the template or the destination into the scratch dir.

Provides:
  • action_include(params, sp)        – run every IncludePath of the step
  • is_ignored(patterns, rel_path)    – the ignore-list matching rule

Included files may overwrite files already in the scratch dir. Files taken
from the destination are remembered in ``sp.included_from_dest`` so that the
commit phase lets them replace their own originals.
"""

import os
from typing import List, Sequence

from stencil.constants import GOLDEN_TEST_DIR, INCLUDE_FROM_DESTINATION, TEMPLATE_SPEC_FILE
from stencil.core.models import CopyHint, PosString, StrLike, pos_of, value_of
from stencil.core.steps import Include, IncludePath
from stencil.errors import StencilError
from stencil.io.copier import CopyEntry, CopyParams, copy_recursive
from stencil.io.fs import fs_error, is_not_exist
from stencil.rendering.context import StepParams
from stencil.rendering.walker import process_paths
from stencil.utils.globs import expand_globs, match_pattern
from stencil.utils.paths import join_under, to_posix


def is_ignored(patterns: Sequence[StrLike], rel_path: str) -> bool:
    """Return True when *rel_path* (relative to the include source) is ignored.

    A pattern without '/' matches the basename, a leading '/' anchors the
    pattern at the source root, anything else matches the whole path.
    """
    rel = to_posix(rel_path)
    for raw in patterns:
        pattern = value_of(raw)
        if not pattern:
            continue
        if '/' not in pattern:
            if match_pattern(pattern, rel.rsplit('/', 1)[-1]):
                return True
        elif pattern.startswith('/'):
            if match_pattern(pattern[1:], rel):
                return True
        elif match_pattern(pattern, rel):
            return True
    return False


def _is_glob(matches: List[PosString], from_dir: str, path: str) -> bool:
    if len(matches) != 1:
        return True
    return os.path.normpath(os.path.join(from_dir, path)) != matches[0].value


def _copy_to_scratch(
    sp: StepParams,
    src: PosString,
    rel_src: str,
    rel_dst: str,
    from_dir: str,
    from_dest: bool,
    skip: List[PosString],
) -> None:
    log = sp.logger
    prefix = src.pos.prefix() if src.pos is not None else ''
    try:
        sp.fs.stat(src.value)
    except OSError as exc:
        if is_not_exist(exc):
            raise StencilError(f'include path doesn\'t exist: "{src.value}"', pos=src.pos) from exc
        raise fs_error('stat', src.value, exc, prefix=prefix) from exc

    def visitor(rel: str, entry: CopyEntry) -> CopyHint:
        rel_to_include = os.path.normpath(os.path.join(rel_src, rel))
        for s in skip:
            if sp.features.skip_globs:
                matched = os.path.normpath(s.value) == rel_to_include
            else:
                matched = match_pattern(s.value, rel_to_include)
            if matched:
                log.debug('include skipped %s', rel_to_include)
                return CopyHint(skip=True)

        rel_to_from_dir = os.path.relpath(entry.path, from_dir)
        if is_ignored(sp.ignore_patterns, rel_to_from_dir):
            log.debug('path ignored: %s', rel_to_from_dir)
            return CopyHint(skip=True)

        if not entry.is_dir:
            in_scratch = os.path.normpath(os.path.join(rel_dst, rel))
            if from_dest:
                sp.included_from_dest[in_scratch] = sp.dest_dir
            else:
                sp.included_from_dest.pop(in_scratch, None)
            sp.report.files_included += 1
        return CopyHint(allow_preexisting=True)

    params = CopyParams(
        src_root=src.value,
        dst_root=join_under(sp.scratch_dir, rel_dst, src.pos),
        fs=sp.fs,
        visitor=visitor,
        cancel=sp.cancel,
        logger=log,
    )
    try:
        copy_recursive(params, pos=src.pos)
    except StencilError as exc:
        exc.prefixed('copying failed: ')
        raise


def _include_path(inc: IncludePath, sp: StepParams) -> None:
    from_dest = value_of(inc.from_) == INCLUDE_FROM_DESTINATION
    from_dir = sp.dest_dir if from_dest else sp.template_dir

    skip = process_paths(inc.skip, sp.scope, engine=sp.engine)
    if not from_dest:
        skip += [PosString(TEMPLATE_SPEC_FILE), PosString(GOLDEN_TEST_DIR)]
    as_paths = process_paths(inc.as_, sp.scope, engine=sp.engine)
    inc_paths = process_paths(inc.paths, sp.scope, engine=sp.engine)
    if as_paths and len(as_paths) != len(inc_paths):
        raise StencilError(
            f'the number of "as" paths ({len(as_paths)}) must match the number of '
            f'"paths" ({len(inc_paths)})',
            pos=pos_of(inc.as_[0]),
        )

    for i, p in enumerate(inc_paths):
        matches = expand_globs([p], from_dir, skip_globs=sp.features.skip_globs, logger=sp.logger)
        for src in matches:
            rel_src = os.path.relpath(src.value, from_dir)
            rel_dst = rel_src
            if as_paths:
                if _is_glob(matches, from_dir, p.value):
                    rel_dst = os.path.join(as_paths[i].value, rel_src)
                else:
                    rel_dst = as_paths[i].value
            _copy_to_scratch(sp, src, rel_src, rel_dst, from_dir, from_dest, skip)


def action_include(params: Include, sp: StepParams) -> None:
    for inc in params.paths:
        sp.check_cancelled()
        _include_path(inc, sp)
