"""
globs – POSIX style glob expansion relative to a root directory.

Patterns always use forward slashes; they are translated to host separators
only when touching the filesystem. Matching is done one path segment at a
time with :func:`fnmatch.fnmatchcase`, so ``*`` never crosses a '/', it does
match dot-files, and ``[a-c]`` / ``[!a-c]`` / ``[^a-c]`` ranges are
case-sensitive on every platform.
"""

from __future__ import annotations

import fnmatch
import logging
import os
import re
from typing import Iterable, List, Optional

from stencil.core.models import PosString
from stencil.errors import NoGlobMatchError
from stencil.logging.helpers import get_logger
from stencil.utils.paths import join_under, to_host, to_posix

_MAGIC_RX = re.compile(r'[*?\[]')


def has_magic(segment: str) -> bool:
    return _MAGIC_RX.search(segment) is not None


def _fnmatch_pattern(segment: str) -> str:
    # '[^...]' is accepted as a synonym of '[!...]'.
    return segment.replace('[^', '[!')


def _segments(pattern: str) -> List[str]:
    return [s for s in to_posix(pattern).split('/') if s]


def match_pattern(pattern: str, rel_path: str) -> bool:
    """Return True when *rel_path* matches *pattern* segment by segment."""
    pat = _segments(pattern)
    parts = _segments(rel_path)
    if len(pat) != len(parts):
        return False
    return all(fnmatch.fnmatchcase(p, _fnmatch_pattern(s)) for s, p in zip(pat, parts))


def glob_one(root: str, pattern: str) -> List[str]:
    """Return the sorted existing paths under *root* matched by *pattern*."""
    candidates = [root]
    for seg in _segments(pattern):
        nxt: List[str] = []
        for base in candidates:
            if not has_magic(seg):
                path = os.path.join(base, seg)
                if os.path.lexists(path):
                    nxt.append(path)
                continue
            if not os.path.isdir(base):
                continue
            rx = _fnmatch_pattern(seg)
            for name in sorted(os.listdir(base)):
                if fnmatch.fnmatchcase(name, rx):
                    nxt.append(os.path.join(base, name))
        candidates = nxt
        if not candidates:
            break
    if candidates == [root] and not os.path.lexists(root):
        return []
    return sorted({os.path.normpath(c) for c in candidates})


def expand_globs(
    patterns: Iterable[PosString],
    root: str,
    *,
    skip_globs: bool = False,
    logger: Optional[logging.Logger] = None,
) -> List[PosString]:
    """Expand relative *patterns* into absolute paths under *root*.

    The result keeps the order of *patterns* and drops paths already produced
    by an earlier pattern. With ``skip_globs`` the patterns are joined to
    *root* without looking at the filesystem.

    Raises:
        NoGlobMatchError: a pattern matched nothing.
    """
    log = logger or get_logger('globs')
    seen: set[str] = set()
    out: List[PosString] = []

    for p in patterns:
        if skip_globs:
            out.append(PosString(join_under(root, to_host(p.value), p.pos), p.pos))
            continue

        matches = glob_one(root, p.value)
        if not matches:
            raise NoGlobMatchError(p.value, pos=p.pos)
        log.debug('glob path expanded: %s -> %s', p.value, matches)
        for m in matches:
            if m in seen:
                continue
            seen.add(m)
            out.append(PosString(m, p.pos))
    return out
