"""Link resolution: map a raw link string to a document path.

Resolution is a cascade where the first success wins:

1. **direct** -- the normalized link names a document path (with or without
   the ``.md`` extension);
2. **name** -- the normalized link equals a document's base name or file name,
   exactly first and then case-insensitively;
3. **alias** -- the normalized link equals (case-insensitively) one of a
   document's front-matter aliases.

Results, including failures, are memoized per ``(raw_link, source_path)`` for
the lifetime of the resolver.  Nothing invalidates the memo implicitly; call
:meth:`LinkResolver.clear_cache` when the document set changes.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, Literal

from backlinker.log import get_logger
from backlinker.note import DocumentInfo
from backlinker.provider import NoteIndexProvider

ResolutionMethod = Literal["direct", "name", "alias", "failed"]

_LEADING_ROOT_RE = re.compile(r"^\.?/")
_HEADING_FRAGMENT_RE = re.compile(r"#.*$", re.DOTALL)


def normalize_link_path(raw: str) -> str:
    """Strip path prefix, heading markers, and ``.md`` from a raw link.

    >>> normalize_link_path("./Folder/Note.md#Heading")
    'Folder/Note'
    """
    normalized = _LEADING_ROOT_RE.sub("", raw, count=1)
    normalized = normalized.removeprefix("#")
    normalized = _HEADING_FRAGMENT_RE.sub("", normalized, count=1)
    normalized = normalized.removesuffix(".md")
    return normalized.strip()


@dataclass(frozen=True)
class Resolution:
    raw_link: str
    resolved_path: str | None
    method: ResolutionMethod

    @property
    def is_resolved(self) -> bool:
        return self.resolved_path is not None


class LinkResolver:
    """Resolve raw links against a :class:`NoteIndexProvider`."""

    def __init__(
        self,
        provider: NoteIndexProvider,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self._provider = provider
        self._logger = logger or get_logger("resolver")
        self._memo: dict[tuple[str, str], str | None] = {}

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @staticmethod
    def normalize_link_path(raw: str) -> str:
        return normalize_link_path(raw)

    def resolve(self, raw_link: str, source_path: str = "") -> str | None:
        """Return the document path *raw_link* refers to, or ``None``."""
        key = (raw_link, source_path)
        if key in self._memo:
            return self._memo[key]
        resolution = self.resolve_with_method(raw_link)
        self._memo[key] = resolution.resolved_path
        return resolution.resolved_path

    def resolve_with_method(self, raw_link: str) -> Resolution:
        """Run the cascade without touching the memo."""
        normalized = normalize_link_path(raw_link)
        for method, step in self._cascade():
            resolved = self._run_step(method, step, normalized)
            if resolved is not None:
                self._logger.debug("Resolved %r -> %s via %s", raw_link, resolved, method)
                return Resolution(raw_link, resolved, method)
        self._logger.debug("Could not resolve %r", raw_link)
        return Resolution(raw_link, None, "failed")

    def is_resolved(self, raw_link: str, source_path: str = "") -> bool:
        return self.resolve(raw_link, source_path) is not None

    def possible_resolutions(self, raw_link: str) -> list[str]:
        """Every path any cascade step produces, in priority order, de-duped."""
        normalized = normalize_link_path(raw_link)
        results: list[str] = []
        for method, step in self._cascade():
            resolved = self._run_step(method, step, normalized)
            if resolved is not None and resolved not in results:
                results.append(resolved)
        return results

    def clear_cache(self) -> None:
        self._memo.clear()

    @property
    def cache_size(self) -> int:
        return len(self._memo)

    # ------------------------------------------------------------------
    # Cascade steps
    # ------------------------------------------------------------------

    def _cascade(self) -> list[tuple[ResolutionMethod, Callable[[str], str | None]]]:
        return [
            ("direct", self._try_direct),
            ("name", self._try_name),
            ("alias", self._try_alias),
        ]

    def _run_step(
        self,
        method: ResolutionMethod,
        step: Callable[[str], str | None],
        normalized: str,
    ) -> str | None:
        if not normalized:
            return None
        try:
            return step(normalized)
        except Exception:  # noqa: BLE001
            # Index failures count as "no match" for this step.
            self._logger.exception("%s resolution failed for %r", method, normalized)
            return None

    def _documents(self) -> list[DocumentInfo]:
        return list(self._provider.list_documents())

    def _try_direct(self, normalized: str) -> str | None:
        known = {doc.path for doc in self._documents()}
        for candidate in (f"{normalized}.md", normalized):
            if candidate in known:
                return candidate
        return None

    def _try_name(self, normalized: str) -> str | None:
        documents = self._documents()
        for doc in documents:
            if normalized in (doc.base_name, doc.full_name):
                return doc.path
        lowered = normalized.lower()
        for doc in documents:
            if lowered in (doc.base_name.lower(), doc.full_name.lower()):
                return doc.path
        return None

    def _try_alias(self, normalized: str) -> str | None:
        lowered = normalized.lower()
        for doc in self._documents():
            for alias in self._provider.front_matter_aliases(doc.path) or []:
                if isinstance(alias, str) and alias.lower() == lowered:
                    return doc.path
        return None
