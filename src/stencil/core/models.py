from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class ConfigPos:
    """Location of a value inside the declarative spec file (1-based)."""
    line: int = 0
    column: int = 0

    def is_zero(self) -> bool:
        return self.line == 0 and self.column == 0

    def prefix(self) -> str:
        if self.is_zero():
            return ''
        return f'at line {self.line} column {self.column}: '

    def format(self, message: str) -> str:
        return f'{self.prefix()}{message}'


@dataclass(frozen=True)
class PosString:
    """A string authored in the spec file, paired with its location.

    Path expressions, replacement texts and regexes all travel as PosString so
    that errors raised while expanding them can point back at the spec file.
    """
    value: str
    pos: Optional[ConfigPos] = None

    def __str__(self) -> str:
        return self.value


StrLike = Union[str, PosString]


def value_of(s: StrLike) -> str:
    return s.value if isinstance(s, PosString) else str(s)


def pos_of(s: StrLike) -> Optional[ConfigPos]:
    return s.pos if isinstance(s, PosString) else None


@dataclass(frozen=True)
class CopyHint:
    """Per-entry decision returned by a copy visitor."""
    backup_if_exists: bool = False
    allow_preexisting: bool = False
    skip: bool = False


@dataclass(frozen=True)
class Features:
    """Feature switches derived from the spec api_version."""
    skip_globs: bool = False
    skip_time: bool = False
