from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable


@runtime_checkable
class LoggerFactoryProtocol(Protocol):
    """Source of the named loggers a render writes to.

    ``render`` asks for its logger by short name ('render'); implementations
    decide how the ``stencil.`` hierarchy is configured before handing it out.
    """

    def get_logger(self, name: str) -> logging.Logger: ...
