from __future__ import annotations

"""
regexes – Regex compilation and ``$name`` expansion shared by the regex actions.

Step regexes may declare the same group name more than once, which Python's
``re`` refuses. Before compiling, every named group is renamed to a unique
internal name and the original name is remembered per group number.
``(?<name>...)`` is accepted as a synonym of ``(?P<name>...)``.
"""

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from stencil.core.models import StrLike, pos_of, value_of
from stencil.errors import RegexConfigError
from stencil.rendering.context import StepParams

_PREFIX = '_stencil_g'
_NUMBERED_REF_RX = re.compile(r'\$+\{?([0-9]+)')
_NAME_RX = re.compile(r'[A-Za-z0-9_]+')


@dataclass(frozen=True)
class CompiledRegex:
    """A compiled pattern plus the declared name of each group number."""
    pattern: re.Pattern[str]
    names: Tuple[str, ...]

    def group_name(self, index: int) -> str:
        return self.names[index]

    def first_index(self, name: str) -> Optional[int]:
        for i, n in enumerate(self.names):
            if i and n == name:
                return i
        return None

    def reversed_matches(self, text: str) -> List[re.Match[str]]:
        return list(self.pattern.finditer(text))[::-1]


def _rename_groups(regex: str) -> Tuple[str, List[str]]:
    """Give every named group a unique name; return the new text and originals.

    Character classes and escapes are copied verbatim. Backreferences
    ``(?P=name)`` point to the first group that carried *name*.
    """
    out: List[str] = []
    originals: List[str] = []
    first_internal: Dict[str, str] = {}
    i, n = 0, len(regex)
    in_class = False

    while i < n:
        c = regex[i]
        if c == '\\':
            out.append(regex[i:i + 2])
            i += 2
            continue
        if in_class:
            if c == ']':
                in_class = False
            out.append(c)
            i += 1
            continue
        if c == '[':
            in_class = True
            out.append(c)
            i += 1
            # a leading ']' (or '^]') is a literal member
            if regex.startswith('^', i):
                out.append('^')
                i += 1
            if regex.startswith(']', i):
                out.append(']')
                i += 1
            continue

        opener = None
        if regex.startswith('(?P<', i):
            opener = '(?P<'
        elif regex.startswith('(?<', i) and not regex.startswith(('(?<=', '(?<!'), i):
            opener = '(?<'
        if opener is not None:
            end = regex.find('>', i + len(opener))
            if end < 0:
                out.append(regex[i:])
                break
            name = regex[i + len(opener):end]
            internal = f'{_PREFIX}{len(originals)}'
            originals.append(name)
            first_internal.setdefault(name, internal)
            out.append(f'(?P<{internal}>')
            i = end + 1
            continue

        if regex.startswith('(?P=', i):
            end = regex.find(')', i)
            if end > 0:
                name = regex[i + 4:end]
                out.append(f'(?P={first_internal.get(name, name)})')
                i = end + 1
                continue

        out.append(c)
        i += 1
    return ''.join(out), originals


def compile_regex(regex: str, pos=None) -> CompiledRegex:
    """Compile *regex*, tolerating duplicate group names.

    Raises:
        RegexConfigError: the pattern does not compile.
    """
    rewritten, originals = _rename_groups(regex)
    try:
        pattern = re.compile(rewritten)
    except re.error as exc:
        raise RegexConfigError(f'failed compiling regex: {exc}', pos=pos) from exc

    names = [''] * (pattern.groups + 1)
    for internal, index in pattern.groupindex.items():
        names[index] = originals[int(internal[len(_PREFIX):])]
    return CompiledRegex(pattern=pattern, names=tuple(names))


def template_and_compile(sp: StepParams, regexes: Sequence[StrLike]) -> List[CompiledRegex]:
    """Template-expand then compile each regex, attaching its spec position."""
    compiled = []
    for rx in regexes:
        compiled.append(compile_regex(sp.expand(rx), pos=pos_of(rx)))
    return compiled


def reject_numbered_refs(with_: StrLike) -> None:
    """Refuse ``$1`` / ``${1}`` style references in a replacement template.

    A run of dollars is a reference only when its length is odd, since
    ``$$`` stands for a literal dollar.
    """
    text = value_of(with_)
    for m in _NUMBERED_REF_RX.finditer(text):
        dollars = len(m.group(0)) - len(m.group(0).lstrip('$'))
        if dollars % 2 == 0:
            continue
        raise RegexConfigError(
            'regex expansions must reference the subgroup by name, like ${mygroup}, '
            f'rather than by number, like ${{1}}; we saw ${m.group(1)}',
            pos=pos_of(with_),
        )


def expand_refs(compiled: CompiledRegex, template: str, match: re.Match[str]) -> str:
    """Substitute ``$name`` / ``${name}`` with the text of that group in *match*.

    The first participating group carrying the name wins; a name with no such
    group expands to nothing. ``$`` not followed by a name is kept as is.
    """
    out: List[str] = []
    i, n = 0, len(template)
    while i < n:
        c = template[i]
        if c != '$':
            out.append(c)
            i += 1
            continue
        if template.startswith('$$', i):
            out.append('$')
            i += 2
            continue

        name: Optional[str] = None
        if template.startswith('${', i):
            end = template.find('}', i + 2)
            if end > 0 and _NAME_RX.fullmatch(template, i + 2, end):
                name = template[i + 2:end]
                i = end + 1
        else:
            m = _NAME_RX.match(template, i + 1)
            if m is not None:
                name = m.group(0)
                i = m.end()

        if name is None:
            out.append('$')
            i += 1
            continue
        out.append(_group_text(compiled, match, name))
    return ''.join(out)


def _group_text(compiled: CompiledRegex, match: re.Match[str], name: str) -> str:
    for index, n in enumerate(compiled.names):
        if index and n == name and match.start(index) >= 0:
            return match.group(index)
    return ''


__all__ = [
    'CompiledRegex',
    'compile_regex',
    'expand_refs',
    'reject_numbered_refs',
    'template_and_compile',
]
