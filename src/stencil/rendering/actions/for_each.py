from __future__ import annotations

from typing import List

from stencil.core.models import pos_of, value_of
from stencil.core.steps import ForEach
from stencil.errors import StencilError
from stencil.rendering.context import StepParams


def _values(params: ForEach, sp: StepParams) -> List[str]:
    if params.values_from is None:
        return sp.expand_all(params.values)
    try:
        return sp.evaluator.evaluate_list(value_of(params.values_from), sp.scope)
    except StencilError as exc:
        exc.locate(pos_of(params.values_from))
        raise


def action_for_each(params: ForEach, sp: StepParams) -> None:
    """Run the nested steps once per value, binding the key in a child scope."""
    from stencil.rendering.execution import execute_steps

    key = sp.expand(params.key)
    values = _values(params, sp)
    sp.logger.debug('for_each iterating %s over %d values', key, len(values))
    for value in values:
        sp.check_cancelled()
        execute_steps(params.steps, sp.with_scope({key: value}))
