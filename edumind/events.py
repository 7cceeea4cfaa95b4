"""In-process event bus connecting the timer to goal bookkeeping."""

from __future__ import annotations

import contextlib
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

EventHandler = Callable[[Any], Any]


@dataclass(frozen=True)
class SessionCompleted:
    """A timer cycle finished (naturally or by skip)."""

    duration_minutes: int
    mode: str
    subject: str | None = None


class EventBus:
    """Synchronous pub/sub keyed by event class."""

    def __init__(self) -> None:
        self._handlers: dict[type, list[EventHandler]] = {}

    def subscribe(self, event_type: type, handler: EventHandler) -> Callable[[], None]:
        self._handlers.setdefault(event_type, []).append(handler)

        def _unsubscribe() -> None:
            with contextlib.suppress(ValueError):
                self._handlers[event_type].remove(handler)

        return _unsubscribe

    def publish(self, event: Any) -> None:
        for handler in list(self._handlers.get(type(event), [])):
            try:
                handler(event)
            except Exception:
                logger.exception("Handler %r failed for %s", handler, type(event).__name__)
