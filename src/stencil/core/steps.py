from __future__ import annotations

"""
Typed parameter bundles for render steps.

These arrive already parsed and schema-validated from the spec loader; the
renderer only checks runtime semantics (existence, sandboxing, variables).
Every string field accepts a plain ``str`` or a :class:`PosString`.
"""

from dataclasses import dataclass
from typing import ClassVar, List, Optional, Sequence, Union

from stencil.core.models import ConfigPos, StrLike


@dataclass(frozen=True)
class Append:
    ACTION: ClassVar[str] = 'append'
    paths: Sequence[StrLike]
    with_: StrLike
    skip_ensure_newline: bool = False


@dataclass(frozen=True)
class StringReplacement:
    to_replace: StrLike
    with_: StrLike
    count: Optional[int] = None


@dataclass(frozen=True)
class StringReplace:
    ACTION: ClassVar[str] = 'string_replace'
    paths: Sequence[StrLike]
    replacements: Sequence[StringReplacement]


@dataclass(frozen=True)
class RegexReplaceEntry:
    regex: StrLike
    with_: StrLike
    subgroup_to_replace: StrLike = ''
    count: Optional[int] = None


@dataclass(frozen=True)
class RegexReplace:
    ACTION: ClassVar[str] = 'regex_replace'
    paths: Sequence[StrLike]
    replacements: Sequence[RegexReplaceEntry]


@dataclass(frozen=True)
class RegexNameLookupEntry:
    regex: StrLike


@dataclass(frozen=True)
class RegexNameLookup:
    ACTION: ClassVar[str] = 'regex_name_lookup'
    paths: Sequence[StrLike]
    replacements: Sequence[RegexNameLookupEntry]


@dataclass(frozen=True)
class GoTemplate:
    ACTION: ClassVar[str] = 'go_template'
    paths: Sequence[StrLike]


@dataclass(frozen=True)
class IncludePath:
    paths: Sequence[StrLike]
    as_: Sequence[StrLike] = ()
    skip: Sequence[StrLike] = ()
    from_: StrLike = ''


@dataclass(frozen=True)
class Include:
    ACTION: ClassVar[str] = 'include'
    paths: Sequence[IncludePath]


@dataclass(frozen=True)
class ForEach:
    ACTION: ClassVar[str] = 'for_each'
    key: StrLike
    steps: Sequence['Step']
    values: Sequence[StrLike] = ()
    values_from: Optional[StrLike] = None


@dataclass(frozen=True)
class Print:
    ACTION: ClassVar[str] = 'print'
    message: StrLike


ActionParams = Union[
    Append, StringReplace, RegexReplace, RegexNameLookup, GoTemplate, Include, ForEach, Print
]


@dataclass(frozen=True)
class Step:
    """One step of a spec: an action, an optional condition and a description."""
    action: ActionParams
    if_: Optional[StrLike] = None
    desc: str = ''
    pos: Optional[ConfigPos] = None

    @property
    def action_name(self) -> str:
        return self.action.ACTION


def steps(*actions: ActionParams) -> List[Step]:
    """Wrap bare action bundles into unconditional steps."""
    return [a if isinstance(a, Step) else Step(action=a) for a in actions]
