"""
funcs – Functions callable from templates.

The names and argument orders follow the Go template function map that
template authors already know (``replace s old new n``, ``split s sep``...).
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

from stencil.core.models import Features

_SNAKE_OR_HYPHEN_KEEP = re.compile(r'[^a-zA-Z0-9\-_ ]+')
_SNAKE_REPLACE = re.compile(r'[- ]+')
_HYPHEN_REPLACE = re.compile(r'[_ ]+')


def contains(s: str, substr: str) -> bool:
    return substr in s


def replace(s: str, old: str, new: str, n: int) -> str:
    """Replace the first *n* occurrences; a negative *n* means all."""
    if n < 0:
        return s.replace(old, new)
    return s.replace(old, new, n)


def replace_all(s: str, old: str, new: str) -> str:
    return s.replace(old, new)


def sort_strings(values: List[str]) -> List[str]:
    return sorted(values)


def split(s: str, sep: str) -> List[str]:
    if sep == '':
        return list(s)
    return s.split(sep)


def trim_prefix(s: str, prefix: str) -> str:
    return s[len(prefix):] if prefix and s.startswith(prefix) else s


def trim_suffix(s: str, suffix: str) -> str:
    return s[:-len(suffix)] if suffix and s.endswith(suffix) else s


def trim_space(s: str) -> str:
    return s.strip()


def to_snake_case(v: str) -> str:
    return _SNAKE_REPLACE.sub('_', _SNAKE_OR_HYPHEN_KEEP.sub('', v))


def to_lower_snake_case(v: str) -> str:
    return to_snake_case(v).lower()


def to_upper_snake_case(v: str) -> str:
    return to_snake_case(v).upper()


def to_hyphen_case(v: str) -> str:
    return _HYPHEN_REPLACE.sub('-', _SNAKE_OR_HYPHEN_KEEP.sub('', v))


def to_lower_hyphen_case(v: str) -> str:
    return to_hyphen_case(v).lower()


def to_upper_hyphen_case(v: str) -> str:
    return to_hyphen_case(v).upper()


def _pad(n: int, width: int = 2) -> str:
    return str(n).rjust(width, '0')


# Go reference-time layout elements, longest first so that e.g. "January"
# wins over "Jan" and "2006" over "2".
_LAYOUT: List[tuple] = [
    ('January', lambda t: t.strftime('%B')),
    ('Monday', lambda t: t.strftime('%A')),
    ('Z07:00', lambda t: 'Z'),
    ('-07:00', lambda t: '+00:00'),
    ('-0700', lambda t: '+0000'),
    ('2006', lambda t: _pad(t.year, 4)),
    ('.000', lambda t: '.' + _pad(t.microsecond // 1000, 3)),
    ('Jan', lambda t: t.strftime('%b')),
    ('Mon', lambda t: t.strftime('%a')),
    ('MST', lambda t: 'UTC'),
    ('002', lambda t: _pad(t.timetuple().tm_yday, 3)),
    ('01', lambda t: _pad(t.month)),
    ('02', lambda t: _pad(t.day)),
    ('_2', lambda t: str(t.day).rjust(2)),
    ('15', lambda t: _pad(t.hour)),
    ('03', lambda t: _pad(t.hour % 12 or 12)),
    ('04', lambda t: _pad(t.minute)),
    ('05', lambda t: _pad(t.second)),
    ('06', lambda t: _pad(t.year % 100)),
    ('PM', lambda t: 'PM' if t.hour >= 12 else 'AM'),
    ('pm', lambda t: 'pm' if t.hour >= 12 else 'am'),
    ('1', lambda t: str(t.month)),
    ('2', lambda t: str(t.day)),
    ('3', lambda t: str(t.hour % 12 or 12)),
    ('4', lambda t: str(t.minute)),
    ('5', lambda t: str(t.second)),
]


def go_time_format(t: datetime, layout: str) -> str:
    """Format *t* with a Go reference-time layout such as ``2006-01-02``."""
    out: List[str] = []
    i = 0
    while i < len(layout):
        for token, render in _LAYOUT:
            if layout.startswith(token, i):
                out.append(render(t))
                i += len(token)
                break
        else:
            out.append(layout[i])
            i += 1
    return ''.join(out)


def format_time(millis: str, layout: str) -> str:
    """Format a Unix time in milliseconds (as a string) in UTC."""
    if millis == '':
        return ''
    try:
        ms = int(millis)
    except ValueError as exc:
        raise ValueError(f'time is not an integer: {exc}') from exc
    t = datetime.fromtimestamp(ms // 1000, tz=timezone.utc) + timedelta(milliseconds=ms % 1000)
    return go_time_format(t, layout)


def template_funcs(features: Optional[Features] = None) -> Dict[str, Callable[..., Any]]:
    """Return the function map for templates, honouring *features*."""
    features = features or Features()
    out: Dict[str, Callable[..., Any]] = {
        'contains': contains,
        'replace': replace,
        'replaceAll': replace_all,
        'sortStrings': sort_strings,
        'split': split,
        'toLower': str.lower,
        'toUpper': str.upper,
        'trimPrefix': trim_prefix,
        'trimSuffix': trim_suffix,
        'trimSpace': trim_space,
        'toSnakeCase': to_snake_case,
        'toLowerSnakeCase': to_lower_snake_case,
        'toUpperSnakeCase': to_upper_snake_case,
        'toHyphenCase': to_hyphen_case,
        'toLowerHyphenCase': to_lower_hyphen_case,
        'toUpperHyphenCase': to_upper_hyphen_case,
    }
    if not features.skip_time:
        out['formatTime'] = format_time
    return out
