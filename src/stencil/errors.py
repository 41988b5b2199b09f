from __future__ import annotations

"""Exception taxonomy for stencil.

Every user-facing failure derives from :class:`StencilError`, itself a
``ValueError``. Errors may carry the :class:`ConfigPos` of the spec value
that caused them; when they do, the message is prefixed with
``at line L column C:``.

Raw filesystem failures are not wrapped here: they stay ``OSError`` so the
caller sees the original OS error text.
"""

from typing import Iterable, Optional, Sequence

from stencil.core.models import ConfigPos


class StencilError(ValueError):
    """Base class for every error raised by stencil itself."""

    def __init__(self, message: str, *, pos: Optional[ConfigPos] = None) -> None:
        super().__init__(message)
        self.message = message
        self.pos = pos

    def locate(self, pos: Optional[ConfigPos]) -> 'StencilError':
        """Attach *pos* unless the error already points somewhere."""
        if self.pos is None or self.pos.is_zero():
            self.pos = pos
        return self

    def prefixed(self, context: str) -> 'StencilError':
        """Prepend *context* to the message, keeping the error's type."""
        self.message = f'{context}{self.message}'
        self.args = (self.message,)
        return self

    def __str__(self) -> str:
        if self.pos is None:
            return self.message
        return self.pos.format(self.message)


class PathTraversalError(StencilError):
    """A path would escape its sandbox root."""

    def __init__(self, path: str, *, root: Optional[str] = None, pos: Optional[ConfigPos] = None) -> None:
        if root is None:
            message = f'path "{path}" must not contain ".."'
        else:
            message = f'path "{path}" escapes its root directory "{root}"'
        super().__init__(message, pos=pos)
        self.root = root
        self.path = path


class BackslashInGlobError(StencilError):
    """A path or glob expression contains a backslash."""

    def __init__(self, path: str, *, pos: Optional[ConfigPos] = None) -> None:
        super().__init__(f'backslashes in glob paths are not permitted: "{path}"', pos=pos)
        self.path = path


class NoGlobMatchError(StencilError):
    """A path pattern matched nothing."""

    def __init__(self, pattern: str, *, pos: Optional[ConfigPos] = None) -> None:
        super().__init__(f'glob "{pattern}" did not match any files', pos=pos)
        self.pattern = pattern


class UnknownVariableError(StencilError):
    """A template referenced a variable that is not in scope."""

    def __init__(
        self,
        var_name: str,
        available_vars: Iterable[str],
        *,
        message: Optional[str] = None,
        pos: Optional[ConfigPos] = None,
    ) -> None:
        self.var_name = var_name
        self.available_vars = sorted(available_vars)
        if message is None:
            message = (
                f'the template referenced a nonexistent variable name "{var_name}"; '
                f'available variable names are [{" ".join(self.available_vars)}]'
            )
        super().__init__(message, pos=pos)


class TemplateSyntaxError(StencilError):
    """A template could not be compiled or executed."""


class SymlinkForbiddenError(StencilError):
    """A symlink was met while copying a tree."""

    def __init__(self, path: str) -> None:
        super().__init__(f'a symlink was found at "{path}", but symlinks are forbidden here')
        self.path = path


class OverwriteConflictError(StencilError):
    """Destination exists and may not be replaced, or has the wrong type."""

    def __init__(self, message: str, path: str, *, pos: Optional[ConfigPos] = None) -> None:
        super().__init__(message, pos=pos)
        self.path = path


class RegexConfigError(StencilError):
    """A regex or its replacement text is not usable."""


class ExpressionError(StencilError):
    """A predicate expression could not be evaluated."""


class ActionError(StencilError):
    """A render step failed; the original error is kept as ``cause``."""

    def __init__(self, index: int, action: str, cause: BaseException) -> None:
        super().__init__(f'action "{action}" (step index {index}) failed: {cause}')
        self.index = index
        self.action = action
        self.cause = cause


class CycleError(StencilError):
    """A directed graph that must be acyclic has a cycle."""

    def __init__(self, members: Sequence[object]) -> None:
        self.members = list(members)
        path = ' -> '.join(str(m) for m in self.members)
        super().__init__(f'this directed graph has a cycle: {path}')


class RenderCancelledError(StencilError):
    """The render was cancelled from outside; written files stay in place."""

    def __init__(self, message: str = 'render cancelled') -> None:
        super().__init__(message)
