from .globs import expand_globs, has_magic, match_pattern
from .paths import is_reserved_in_dest, reject_backslash, safe_rel_path, to_host, to_posix

__all__ = [
    'expand_globs',
    'has_magic',
    'match_pattern',
    'is_reserved_in_dest',
    'reject_backslash',
    'safe_rel_path',
    'to_host',
    'to_posix',
]
