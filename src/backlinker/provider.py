"""Read-only note index protocol consumed by the discovery engine."""

from __future__ import annotations

from typing import Mapping, Protocol, runtime_checkable

from backlinker.note import DocumentInfo


@runtime_checkable
class NoteIndexProvider(Protocol):
    """Everything the engine needs to know about the host's documents.

    Implementations (the filesystem :class:`~backlinker.index.VaultIndex`, an
    editor's own metadata cache, a test double, ...) must satisfy this
    protocol.  The engine never writes through it.
    """

    # ------------------------------------------------------------ link index

    @property
    def resolved_links(self) -> Mapping[str, set[str]]:
        """``source path -> {target path}`` for links the host resolved."""
        ...

    @property
    def unresolved_links(self) -> Mapping[str, set[str]]:
        """``source path -> {raw link text}`` for links it could not resolve."""
        ...

    # ------------------------------------------------------------- documents

    def list_documents(self) -> list[DocumentInfo]:
        """Return every known markdown document."""
        ...

    def stat_modified_time(self, path: str) -> int | None:
        """Modification time of *path* in epoch milliseconds, or ``None``."""
        ...

    def front_matter_aliases(self, path: str) -> list[str]:
        """Aliases declared in *path*'s front matter (possibly empty)."""
        ...

    def read_content(self, path: str) -> str:
        """Return the raw markdown text of *path*."""
        ...

    def classify_daily_note(self, path: str) -> bool:
        """Return ``True`` when *path* is a daily note."""
        ...
