"""Per-document backlink state held by the coordinator."""

from __future__ import annotations

from enum import Enum


class DocumentStatus(str, Enum):
    UNDISCOVERED = "undiscovered"
    SERVED_FROM_CACHE = "served-from-cache"
    FRESHLY_DISCOVERED = "freshly-discovered"
    SKIPPED = "skipped"


class BacklinksState:
    """Last known backlinks per target document, copied in and out."""

    def __init__(self) -> None:
        self._backlinks: dict[str, list[str]] = {}
        self._status: dict[str, DocumentStatus] = {}

    def set_backlinks(
        self,
        path: str,
        backlinks: list[str],
        status: DocumentStatus = DocumentStatus.FRESHLY_DISCOVERED,
    ) -> None:
        self._backlinks[path] = list(backlinks)
        self._status[path] = status

    def get_backlinks(self, path: str) -> list[str]:
        return list(self._backlinks.get(path, []))

    def status(self, path: str) -> DocumentStatus:
        return self._status.get(path, DocumentStatus.UNDISCOVERED)

    def clear_backlinks(self, path: str | None = None) -> None:
        if path is None:
            self._backlinks.clear()
            self._status.clear()
        else:
            self._backlinks.pop(path, None)
            self._status.pop(path, None)

    def tracked_paths(self) -> list[str]:
        return list(self._backlinks)
