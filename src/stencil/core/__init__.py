from __future__ import annotations

"""Public surface for stencil.core.

Protocol types, step parameter bundles and the default factory entry-points
live behind one stable import location:

    from stencil.core import FileSystemProtocol, Step, Append, DefaultLoggerFactory
"""

# Protocols re-export
from stencil.core.interfaces import (
    FileSystemProtocol,
    LoggerFactoryProtocol,
    PredicateEvaluatorProtocol,
    TemplateEngineProtocol,
)

# Value types
from stencil.core.cancel import CancelToken
from stencil.core.models import ConfigPos, CopyHint, Features, PosString
from stencil.core.report import RenderReport
from stencil.core.steps import (
    Append,
    ForEach,
    GoTemplate,
    Include,
    IncludePath,
    Print,
    RegexNameLookup,
    RegexNameLookupEntry,
    RegexReplace,
    RegexReplaceEntry,
    Step,
    StringReplace,
    StringReplacement,
    steps,
)

# Default factories
from stencil.logging.factory import DefaultLoggerFactory  # noqa: F401

__all__ = [
    # Protocols
    "FileSystemProtocol",
    "LoggerFactoryProtocol",
    "PredicateEvaluatorProtocol",
    "TemplateEngineProtocol",
    # Value types
    "CancelToken",
    "ConfigPos",
    "CopyHint",
    "Features",
    "PosString",
    "RenderReport",
    # Steps
    "Append",
    "ForEach",
    "GoTemplate",
    "Include",
    "IncludePath",
    "Print",
    "RegexNameLookup",
    "RegexNameLookupEntry",
    "RegexReplace",
    "RegexReplaceEntry",
    "Step",
    "StringReplace",
    "StringReplacement",
    "steps",
    # Default factories
    "DefaultLoggerFactory",
]
