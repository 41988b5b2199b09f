from __future__ import annotations

from typing import List, Optional, Tuple

from stencil.core.steps import StringReplace
from stencil.rendering.context import StepParams
from stencil.rendering.walker import walk_and_modify


def action_string_replace(params: StringReplace, sp: StepParams) -> None:
    """Literal search and replace; replacements run one after another."""
    pairs: List[Tuple[bytes, bytes, Optional[int]]] = []
    for r in params.replacements:
        old = sp.expand(r.to_replace).encode('utf-8')
        new = sp.expand(r.with_).encode('utf-8')
        pairs.append((old, new, r.count))

    def transform(buf: bytes) -> bytes:
        for old, new, count in pairs:
            if not old:
                continue
            buf = buf.replace(old, new) if count is None else buf.replace(old, new, count)
        return buf

    walk_and_modify(sp, params.paths, transform)
