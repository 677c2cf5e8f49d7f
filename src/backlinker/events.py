"""Minimal synchronous event emitter for backlink updates."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from backlinker.log import get_logger

BACKLINKS_UPDATED = "backlinks-updated"

Handler = Callable[[Any], None]


@dataclass(frozen=True)
class BacklinksUpdated:
    """Payload of the ``backlinks-updated`` event."""

    path: str
    files: tuple[str, ...]
    count: int
    origin_id: str | None = None
    from_cache: bool = False


class EventEmitter:
    """Dispatch named events to registered handlers, in registration order.

    A handler that raises is logged and skipped; the remaining handlers still
    run.
    """

    def __init__(self, *, logger: logging.Logger | None = None) -> None:
        self._handlers: dict[str, list[Handler]] = {}
        self._logger = logger or get_logger("events")

    def on(self, event: str, handler: Handler) -> None:
        self._handlers.setdefault(event, []).append(handler)

    def off(self, event: str, handler: Handler) -> None:
        handlers = self._handlers.get(event, [])
        if handler in handlers:
            handlers.remove(handler)

    def emit(self, event: str, payload: Any) -> None:
        for handler in list(self._handlers.get(event, [])):
            try:
                handler(payload)
            except Exception:  # noqa: BLE001
                self._logger.exception("Handler %r for %s failed", handler, event)

    def listener_count(self, event: str) -> int:
        return len(self._handlers.get(event, []))

    def clear(self) -> None:
        self._handlers.clear()
