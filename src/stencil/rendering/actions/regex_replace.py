from __future__ import annotations

"""
regex_replace – Replace regex matches, or one named group of each match.

The ``with`` text first has its ``$name`` / ``${name}`` group references
expanded for the match at hand, then is rendered as a template. Matches are
spliced from the end of the buffer so earlier offsets stay valid.
"""

from typing import List

from stencil.core.models import PosString, pos_of, value_of
from stencil.core.steps import RegexReplace, RegexReplaceEntry
from stencil.errors import RegexConfigError
from stencil.rendering.actions.regexes import (
    CompiledRegex,
    expand_refs,
    reject_numbered_refs,
    template_and_compile,
)
from stencil.rendering.context import StepParams
from stencil.rendering.walker import walk_and_modify


def _subgroup_index(entry: RegexReplaceEntry, compiled: CompiledRegex) -> int:
    name = value_of(entry.subgroup_to_replace)
    if not name:
        return 0
    index = compiled.first_index(name)
    if index is None:
        raise RegexConfigError(
            f'subgroup name "{name}" is not a named subgroup of the regex '
            f'"{compiled.pattern.pattern}"',
            pos=pos_of(entry.subgroup_to_replace),
        )
    return index


def _replace_all(
    sp: StepParams,
    text: str,
    entry: RegexReplaceEntry,
    compiled: CompiledRegex,
    group: int,
) -> str:
    matches = list(compiled.pattern.finditer(text))
    if entry.count is not None:
        matches = matches[:entry.count]

    with_pos = pos_of(entry.with_)
    for match in reversed(matches):
        start, end = match.span(group)
        if start < 0:
            continue
        expanded = expand_refs(compiled, value_of(entry.with_), match)
        replacement = sp.expand(PosString(expanded, with_pos))
        text = text[:start] + replacement + text[end:]
    return text


def action_regex_replace(params: RegexReplace, sp: StepParams) -> None:
    compiled = template_and_compile(sp, [r.regex for r in params.replacements])
    groups: List[int] = []
    for entry, cr in zip(params.replacements, compiled):
        reject_numbered_refs(entry.with_)
        groups.append(_subgroup_index(entry, cr))

    def transform(buf: bytes) -> bytes:
        text = buf.decode('utf-8', 'surrogateescape')
        for entry, cr, group in zip(params.replacements, compiled, groups):
            text = _replace_all(sp, text, entry, cr, group)
        return text.encode('utf-8', 'surrogateescape')

    walk_and_modify(sp, params.paths, transform)
