from __future__ import annotations
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from stencil.rendering.scope import Scope


@runtime_checkable
class TemplateEngineProtocol(Protocol):
    """Text-template engine used for every templated value and file.

    Implementations raise ``UnknownVariableError`` when the template references
    a variable missing from *scope* and ``TemplateSyntaxError`` for anything
    else that prevents rendering.
    """

    def render(self, template: str, scope: 'Scope') -> str:
        ...
