from __future__ import annotations

"""
execution – Run a sequence of render steps against the scratch dir.

Provides:
  • execute_steps(steps, sp)             – run steps in order, stop at first failure
  • execute_one_step(index, step, sp)    – evaluate ``if`` and dispatch one action
  • scratch_contents(index, step, sp)    – one-line listing used for debugging

Each failure is re-raised as :class:`ActionError` naming the step index and
action, with the original error chained and kept in ``cause``. Cancellation
is never wrapped.
"""

import os
from typing import Callable, Dict, Sequence, Type

from stencil.core.models import value_of
from stencil.core.steps import (
    Append,
    ForEach,
    GoTemplate,
    Include,
    Print,
    RegexNameLookup,
    RegexReplace,
    Step,
    StringReplace,
)
from stencil.errors import ActionError, ExpressionError, RenderCancelledError, StencilError
from stencil.rendering.actions.append import action_append
from stencil.rendering.actions.for_each import action_for_each
from stencil.rendering.actions.go_template import action_go_template
from stencil.rendering.actions.include import action_include
from stencil.rendering.actions.print import action_print
from stencil.rendering.actions.regex_name_lookup import action_regex_name_lookup
from stencil.rendering.actions.regex_replace import action_regex_replace
from stencil.rendering.actions.string_replace import action_string_replace
from stencil.rendering.context import StepParams

_ACTIONS: Dict[Type, Callable[..., None]] = {
    Append: action_append,
    ForEach: action_for_each,
    GoTemplate: action_go_template,
    Include: action_include,
    Print: action_print,
    RegexNameLookup: action_regex_name_lookup,
    RegexReplace: action_regex_replace,
    StringReplace: action_string_replace,
}


def execute_steps(steps: Sequence[Step], sp: StepParams) -> None:
    log = sp.logger
    for index, step in enumerate(steps):
        sp.check_cancelled()
        execute_one_step(index, step, sp)
        log.debug('completed template action %s', step.action_name)
        if sp.debug_scratch_contents:
            log.warning(scratch_contents(index, step, sp))


def _should_run(index: int, step: Step, sp: StepParams) -> bool:
    if step.if_ is None or not value_of(step.if_):
        return True
    expr = value_of(step.if_)
    try:
        result = sp.evaluator.evaluate_bool(expr, sp.scope)
    except StencilError as exc:
        raise ExpressionError(
            f'"if" expression "{expr}" failed at step index {index} action '
            f'"{step.action_name}": {exc}',
            pos=step.pos,
        ) from exc
    sp.logger.debug(
        '%s step %d (%s) because "if" expression evaluated to %s',
        'proceeding to execute' if result else 'skipping',
        index,
        step.action_name,
        str(result).lower(),
    )
    return result


def execute_one_step(index: int, step: Step, sp: StepParams) -> None:
    """Run *step* unless its ``if`` expression is false.

    Raises:
        ActionError: the step failed; ``cause`` holds the original error.
        RenderCancelledError: the render was cancelled.
    """
    fn = _ACTIONS.get(type(step.action))
    if fn is None:
        raise StencilError(f'internal error: unknown step action type {type(step.action).__name__}')

    try:
        if not _should_run(index, step, sp):
            sp.report.mark_step(step.action_name, skipped=True)
            return
        fn(step.action, sp)
    except RenderCancelledError:
        raise
    except (StencilError, OSError) as exc:
        sp.report.add_error(str(exc))
        raise ActionError(index, step.action_name, exc) from exc
    sp.report.mark_step(step.action_name)


def scratch_contents(index: int, step: Step, sp: StepParams) -> str:
    """List every file of the scratch dir after step *index* on one line."""
    line = step.pos.line if step.pos is not None else 0
    parts = [
        f'Scratch dir contents after step {index} (starting from 0), which is action '
        f'type "{step.action_name}", defined at spec file line {line}:'
    ]
    for dirpath, dirnames, filenames in os.walk(sp.scratch_dir):
        dirnames.sort()
        for name in sorted(filenames):
            parts.append(os.path.relpath(os.path.join(dirpath, name), sp.scratch_dir))
    return ' '.join(parts)
