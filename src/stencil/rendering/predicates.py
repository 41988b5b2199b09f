from __future__ import annotations

import json
import logging
from typing import List, Optional

from stencil.core.interfaces.predicate import PredicateEvaluatorProtocol
from stencil.errors import ExpressionError
from stencil.logging.helpers import get_logger
from stencil.rendering.scope import Scope


class LiteralPredicateEvaluator(PredicateEvaluatorProtocol):
    """Evaluator that only understands literals.

    ``true``/``false`` for conditions and a JSON array of strings for value
    lists. Real expression languages (CEL) are plugged in by the caller.
    """

    def __init__(self, *, logger: Optional[logging.Logger] = None) -> None:
        self._log = logger or get_logger('predicates')

    def evaluate_bool(self, expr: str, scope: Scope) -> bool:
        text = expr.strip()
        if text == 'true':
            return True
        if text == 'false':
            return False
        raise ExpressionError(
            f'expression "{expr}" is not a boolean literal; configure a predicate evaluator to use expressions'
        )

    def evaluate_list(self, expr: str, scope: Scope) -> List[str]:
        try:
            value = json.loads(expr)
        except ValueError as exc:
            raise ExpressionError(
                f'expression "{expr}" is not a list literal; configure a predicate evaluator to use expressions'
            ) from exc
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise ExpressionError(f'expression "{expr}" must evaluate to a list of strings')
        return value
