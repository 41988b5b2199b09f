from .fs import FileSystemProtocol
from .logging import LoggerFactoryProtocol
from .predicate import PredicateEvaluatorProtocol
from .templating import TemplateEngineProtocol

__all__ = [
    'FileSystemProtocol',
    'LoggerFactoryProtocol',
    'PredicateEvaluatorProtocol',
    'TemplateEngineProtocol',
]
