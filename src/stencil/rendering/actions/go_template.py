from __future__ import annotations

from stencil.core.models import PosString
from stencil.core.steps import GoTemplate
from stencil.rendering.context import StepParams
from stencil.rendering.walker import walk_and_modify


def action_go_template(params: GoTemplate, sp: StepParams) -> None:
    """Render the whole contents of every matched file as a template."""

    def transform(buf: bytes) -> bytes:
        text = buf.decode('utf-8', 'surrogateescape')
        return sp.expand(PosString(text)).encode('utf-8', 'surrogateescape')

    walk_and_modify(sp, params.paths, transform)
