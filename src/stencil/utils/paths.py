# src/stencil/utils/paths.py
"""
paths – Path sandboxing helpers.

Provides:
  • safe_rel_path(path)        – reject '..' segments, drop leading separators
  • join_under(root, rel)      – join and check the result stays below root
  • reject_backslash(path)     – backslashes are never given OS meaning
  • to_posix / to_host         – separator translation at the FS boundary
  • is_reserved_in_dest(rel)   – '.stencil/...' belongs to stencil itself
"""

from __future__ import annotations

import os
import re
from typing import Optional

from stencil.constants import RESERVED_DEST_DIR
from stencil.core.models import ConfigPos
from stencil.errors import BackslashInGlobError, PathTraversalError

_SEP_RX = re.compile(r'[/\\]' if os.sep == '\\' else r'/')


def safe_rel_path(path: str, pos: Optional[ConfigPos] = None) -> str:
    """Return *path* as a path relative to an arbitrary root.

    Leading separators mean "relative to the root", not "absolute", so all of
    them are removed.
    A trailing separator is preserved. Any '..' segment is rejected, wherever
    it appears; names that merely contain dots (``..foo``) are fine.
    """
    if any(seg == '..' for seg in _SEP_RX.split(path)):
        raise PathTraversalError(path, pos=pos)
    return path.lstrip('/' + os.sep)


def join_under(root: str, rel: str, pos: Optional[ConfigPos] = None) -> str:
    """Join *rel* onto *root*, refusing any result that is not below *root*."""
    joined = os.path.normpath(os.path.join(root, rel))
    base = os.path.normpath(root)
    try:
        inside = not os.path.isabs(rel) and os.path.commonpath([base, joined]) == base
    except ValueError:
        inside = False
    if not inside:
        raise PathTraversalError(rel, root=root, pos=pos)
    return joined


def reject_backslash(path: str, pos: Optional[ConfigPos] = None) -> str:
    if '\\' in path:
        raise BackslashInGlobError(path, pos=pos)
    return path


def to_host(path: str) -> str:
    return path.replace('/', os.sep) if os.sep != '/' else path


def to_posix(path: str) -> str:
    return path.replace(os.sep, '/') if os.sep != '/' else path


def is_reserved_in_dest(rel_path: str) -> bool:
    """Return True when *rel_path* lives under the reserved destination directory."""
    first = to_posix(rel_path).lstrip('/').split('/', 1)[0]
    return first == RESERVED_DEST_DIR
