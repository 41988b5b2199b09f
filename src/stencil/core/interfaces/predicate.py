from __future__ import annotations
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from stencil.rendering.scope import Scope


@runtime_checkable
class PredicateEvaluatorProtocol(Protocol):
    """Evaluator for step ``if`` conditions and ``for_each`` value lists."""

    def evaluate_bool(self, expr: str, scope: 'Scope') -> bool:
        ...

    def evaluate_list(self, expr: str, scope: 'Scope') -> list[str]:
        ...
