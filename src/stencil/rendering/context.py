from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, TextIO

from stencil.constants import DEFAULT_IGNORE_PATTERNS
from stencil.core.cancel import CancelToken, check_cancelled
from stencil.core.interfaces.fs import FileSystemProtocol
from stencil.core.interfaces.predicate import PredicateEvaluatorProtocol
from stencil.core.interfaces.templating import TemplateEngineProtocol
from stencil.core.models import Features, StrLike
from stencil.core.report import RenderReport
from stencil.logging.helpers import get_logger
from stencil.rendering.predicates import LiteralPredicateEvaluator
from stencil.rendering.scope import Scope
from stencil.rendering.template_engine import GoTemplateEngine, parse_exec


@dataclass
class StepParams:
    """Everything a step action may read or update.

    ``included_from_dest`` maps each file copied from the destination into the
    scratch dir (path relative to both) to the destination dir it came from.
    The commit phase always allows those paths to be overwritten. The dict is
    shared by every copy made with :meth:`with_scope`.
    """
    scope: Scope
    scratch_dir: str
    template_dir: str
    dest_dir: str
    fs: FileSystemProtocol
    features: Features = Features()
    ignore_patterns: Sequence[StrLike] = DEFAULT_IGNORE_PATTERNS
    included_from_dest: Dict[str, str] = field(default_factory=dict)
    extra_print_vars: Mapping[str, str] = field(default_factory=dict)
    stdout: Optional[TextIO] = None
    engine: TemplateEngineProtocol = field(default_factory=GoTemplateEngine)
    evaluator: PredicateEvaluatorProtocol = field(default_factory=LiteralPredicateEvaluator)
    cancel: Optional[CancelToken] = None
    debug_scratch_contents: bool = False
    report: RenderReport = field(default_factory=RenderReport)
    logger: logging.Logger = field(default_factory=lambda: get_logger('render'))

    def with_scope(self, variables: Mapping[str, str]) -> 'StepParams':
        return dataclasses.replace(self, scope=self.scope.with_(variables))

    def expand(self, text: StrLike, scope: Optional[Scope] = None) -> str:
        """Template-expand one spec value against the current scope."""
        return parse_exec(text, scope or self.scope, engine=self.engine)

    def expand_all(self, texts: Sequence[StrLike]) -> List[str]:
        return [self.expand(t) for t in texts]

    def check_cancelled(self) -> None:
        check_cancelled(self.cancel)
