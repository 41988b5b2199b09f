from __future__ import annotations

import logging
from typing import Optional, TextIO

from stencil.logging.helpers import get_logger, json_logs_from_env, level_from_env, setup_base_logger


class DefaultLoggerFactory:
    """Factory that configures and returns project-scoped loggers.

    Base configuration is delegated to `setup_base_logger`; values left as
    None are read from STENCIL_JSON_LOGS and STENCIL_LOG_LEVEL.
    """

    def __init__(
        self,
        *,
        json_logs: Optional[bool] = None,
        level: Optional[int] = None,
        stream: Optional[TextIO] = None,
    ) -> None:
        self._json = json_logs_from_env() if json_logs is None else bool(json_logs)
        self._level = level_from_env() if level is None else int(level)
        self._stream: Optional[TextIO] = stream
        self._configured = False

    def _ensure_config(self) -> None:
        if self._configured:
            return
        setup_base_logger(json_logs=self._json, level=self._level, stream=self._stream)
        self._configured = True

    def get_logger(self, name: str) -> logging.Logger:
        self._ensure_config()
        return get_logger(name)
