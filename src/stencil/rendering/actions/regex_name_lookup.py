from __future__ import annotations

"""
regex_name_lookup – Replace each named group with the variable of the same name.
"""

from typing import List

from stencil.core.models import pos_of
from stencil.core.steps import RegexNameLookup, RegexNameLookupEntry
from stencil.errors import RegexConfigError, UnknownVariableError
from stencil.rendering.actions.regexes import CompiledRegex, template_and_compile
from stencil.rendering.context import StepParams
from stencil.rendering.walker import walk_and_modify


def _check_all_named(entry: RegexNameLookupEntry, compiled: CompiledRegex) -> None:
    if any(not name for name in compiled.names[1:]):
        raise RegexConfigError(
            'all capturing groups in a regex_name_lookup must be named, '
            'like (?P<myinputvar>myregex), not like (myregex)',
            pos=pos_of(entry.regex),
        )


def _lookup_all(sp: StepParams, text: str, entry: RegexNameLookupEntry, compiled: CompiledRegex) -> str:
    for match in compiled.reversed_matches(text):
        for index in range(len(compiled.names) - 1, 0, -1):
            start, end = match.span(index)
            if start < 0:
                continue
            name = compiled.group_name(index)
            value, ok = sp.scope.lookup(name)
            if not ok:
                available = sorted(sp.scope.all_vars())
                raise UnknownVariableError(
                    name,
                    available,
                    message=(
                        'there was no template input variable matching the subgroup name '
                        f'"{name}"; available variables are [{" ".join(available)}]'
                    ),
                    pos=pos_of(entry.regex),
                )
            text = text[:start] + value + text[end:]
    return text


def action_regex_name_lookup(params: RegexNameLookup, sp: StepParams) -> None:
    compiled: List[CompiledRegex] = template_and_compile(sp, [r.regex for r in params.replacements])
    for entry, cr in zip(params.replacements, compiled):
        _check_all_named(entry, cr)

    def transform(buf: bytes) -> bytes:
        text = buf.decode('utf-8', 'surrogateescape')
        for entry, cr in zip(params.replacements, compiled):
            text = _lookup_all(sp, text, entry, cr)
        return text.encode('utf-8', 'surrogateescape')

    walk_and_modify(sp, params.paths, transform)
