from __future__ import annotations

"""
scope – Chained variable environment for template and path expansion.

A Scope is a frame of ``name -> value`` plus an optional parent. Frames are
copied on construction and never modified afterwards, so a child created with
:meth:`Scope.with_` can be dropped without touching its ancestors.
"""

from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Optional, Tuple


class Scope:
    """Immutable, parent-chained variable frame."""

    __slots__ = ('_vars', '_funcs', '_parent')

    def __init__(
        self,
        variables: Optional[Mapping[str, str]] = None,
        funcs: Optional[Mapping[str, Callable[..., Any]]] = None,
        *,
        parent: Optional['Scope'] = None,
    ) -> None:
        self._vars: Mapping[str, str] = MappingProxyType(dict(variables or {}))
        self._funcs: Mapping[str, Callable[..., Any]] = MappingProxyType(dict(funcs or {}))
        self._parent = parent

    def with_(self, variables: Mapping[str, str]) -> 'Scope':
        """Return a child scope whose *variables* shadow this one's."""
        return Scope(variables, parent=self)

    def lookup(self, name: str) -> Tuple[str, bool]:
        scope: Optional[Scope] = self
        while scope is not None:
            if name in scope._vars:
                return scope._vars[name], True
            scope = scope._parent
        return '', False

    def all_vars(self) -> Dict[str, str]:
        """Flatten the chain; inner frames win. The dict belongs to the caller."""
        chain = []
        scope: Optional[Scope] = self
        while scope is not None:
            chain.append(scope._vars)
            scope = scope._parent
        out: Dict[str, str] = {}
        for frame in reversed(chain):
            out.update(frame)
        return out

    def funcs(self) -> Dict[str, Callable[..., Any]]:
        """Template functions, taken from the outermost frame that has any."""
        scope: Optional[Scope] = self
        found: Mapping[str, Callable[..., Any]] = {}
        while scope is not None:
            if scope._funcs:
                found = scope._funcs
            scope = scope._parent
        return dict(found)

    def __repr__(self) -> str:
        return f'Scope({self.all_vars()!r})'


def new_scope(
    initial_vars: Optional[Mapping[str, str]] = None,
    funcs: Optional[Mapping[str, Callable[..., Any]]] = None,
) -> Scope:
    return Scope(initial_vars, funcs)
