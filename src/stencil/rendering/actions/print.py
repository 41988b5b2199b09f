from __future__ import annotations

import sys

from stencil.core.steps import Print
from stencil.rendering.context import StepParams


def action_print(params: Print, sp: StepParams) -> None:
    """Write the expanded message to the configured stdout.

    Print-only variables (e.g. ``_flag_dest``) are visible here and nowhere
    else.
    """
    scope = sp.scope.with_(sp.extra_print_vars) if sp.extra_print_vars else sp.scope
    message = sp.expand(params.message, scope)
    if not message.endswith('\n'):
        message += '\n'
    out = sp.stdout if sp.stdout is not None else sys.stdout
    out.write(message)
