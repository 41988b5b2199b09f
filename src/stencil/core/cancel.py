from __future__ import annotations

import threading
from typing import Optional

from stencil.errors import RenderCancelledError


class CancelToken:
    """Cooperative cancellation flag checked between steps and files."""

    def __init__(self) -> None:
        self._event = threading.Event()
        self._reason: str = 'render cancelled'

    def cancel(self, reason: Optional[str] = None) -> None:
        if reason:
            self._reason = reason
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise RenderCancelledError(self._reason)


def check_cancelled(token: Optional[CancelToken]) -> None:
    """No-op when *token* is None."""
    if token is not None:
        token.raise_if_cancelled()
