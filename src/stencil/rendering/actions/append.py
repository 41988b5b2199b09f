from __future__ import annotations

from stencil.core.steps import Append
from stencil.rendering.context import StepParams
from stencil.rendering.walker import walk_and_modify


def action_append(params: Append, sp: StepParams) -> None:
    """Append the expanded ``with`` text to every matched file."""
    text = sp.expand(params.with_)
    if not params.skip_ensure_newline and not text.endswith('\n'):
        text += '\n'
    suffix = text.encode('utf-8')
    walk_and_modify(sp, params.paths, lambda buf: buf + suffix)
