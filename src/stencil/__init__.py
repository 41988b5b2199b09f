from __future__ import annotations

import logging
from typing import Mapping, Optional, Sequence

from stencil.constants import DEFAULT_IGNORE_PATTERNS
from stencil.core.interfaces.logging import LoggerFactoryProtocol
from stencil.core.models import Features
from stencil.core.steps import Step
from stencil.errors import (
    ActionError,
    CycleError,
    NoGlobMatchError,
    OverwriteConflictError,
    PathTraversalError,
    RenderCancelledError,
    StencilError,
    UnknownVariableError,
)
from stencil.graph import topo_sort
from stencil.io.fs import ErrorFS, RealFS
from stencil.rendering.render import RenderParams, RenderResult, render
from stencil.rendering.scope import Scope, new_scope
from stencil.rendering.template_engine import GoTemplateEngine

__version__ = '0.4.0'


def render_dir(
    template_dir: str,
    dest_dir: str,
    steps: Sequence[Step],
    *,
    inputs: Optional[Mapping[str, str]] = None,
    force_overwrite: bool = False,
    features: Optional[Features] = None,
    logger: Optional[logging.Logger] = None,
    logger_factory: Optional[LoggerFactoryProtocol] = None,
) -> RenderResult:
    """Factory helper that renders with the real filesystem and default engines."""
    params = RenderParams(
        template_dir=template_dir,
        dest_dir=dest_dir,
        steps=steps,
        inputs=dict(inputs or {}),
        fs=RealFS(),
        force_overwrite=force_overwrite,
        features=features or Features(),
        logger=logger,
        logger_factory=logger_factory,
    )
    return render(params)


__all__ = [
    'DEFAULT_IGNORE_PATTERNS',
    'ActionError',
    'CycleError',
    'ErrorFS',
    'GoTemplateEngine',
    'NoGlobMatchError',
    'OverwriteConflictError',
    'PathTraversalError',
    'RealFS',
    'RenderCancelledError',
    'RenderParams',
    'RenderResult',
    'Scope',
    'StencilError',
    'UnknownVariableError',
    'new_scope',
    'render',
    'render_dir',
    'topo_sort',
]
