"""Backlink discovery: which documents reference a target document."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, replace
from pathlib import PurePosixPath
from typing import Any, Iterable

from backlinker.config import DiscoveryOptions
from backlinker.log import get_logger
from backlinker.provider import NoteIndexProvider
from backlinker.resolver import LinkResolver


@dataclass(frozen=True)
class DiscoveryStatistics:
    total_files_checked: int = 0
    files_with_backlinks: int = 0
    total_backlinks_found: int = 0
    resolved_backlinks: int = 0
    unresolved_backlinks: int = 0
    average_backlinks_per_file: float = 0.0
    last_discovery_time: int | None = None  # epoch ms


def _dedupe(paths: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(paths))


class BacklinkDiscoverer:
    """Combine resolved and unresolved link lookups into one backlink list.

    Public methods never raise: a failing index read is logged and degrades
    to an empty result.
    """

    def __init__(
        self,
        provider: NoteIndexProvider,
        options: DiscoveryOptions | None = None,
        *,
        resolver: LinkResolver | None = None,
        match_aliases: bool = False,
        logger: logging.Logger | None = None,
    ) -> None:
        self._provider = provider
        self._logger = logger or get_logger("discoverer")
        self._resolver = resolver or LinkResolver(provider)
        self.options = options or DiscoveryOptions()
        self.match_aliases = match_aliases
        self._stats = DiscoveryStatistics()

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    def discover(self, target: str) -> list[str]:
        """Return the de-duplicated sources linking to *target*.

        Resolved sources come first, then unresolved ones, each in index order.
        """
        try:
            resolved = self.resolved_backlinks(target)
            unresolved = self.unresolved_backlinks(target)

            combined: list[str] = []
            if self.options.include_resolved:
                combined.extend(resolved)
            if self.options.include_unresolved:
                combined.extend(unresolved)
            backlinks = _dedupe(combined)

            self._record(backlinks, len(resolved), len(unresolved))
            self._logger.debug(
                "Discovered %d backlinks for %s (resolved=%d, unresolved=%d)",
                len(backlinks),
                target,
                len(resolved),
                len(unresolved),
            )
            return backlinks
        except Exception:  # noqa: BLE001
            self._logger.exception("Backlink discovery failed for %s", target)
            return []

    def resolved_backlinks(self, target: str) -> list[str]:
        """Sources whose resolved links include *target*."""
        try:
            return [
                source
                for source, targets in self._provider.resolved_links.items()
                if target in targets
            ]
        except Exception:  # noqa: BLE001
            self._logger.exception("Reading resolved links failed for %s", target)
            return []

    def unresolved_backlinks(self, target: str) -> list[str]:
        """Sources with an unresolved link naming *target* (case-insensitive).

        An entry matches when it equals the target's base name or file name.
        With ``match_aliases`` set, entries the resolver maps to *target*
        (aliases, heading links) match too.
        """
        try:
            names = self._target_names(target)
            if names is None:
                self._logger.debug("Target %s is not in the index", target)
                return []
            backlinks: list[str] = []
            for source, links in self._provider.unresolved_links.items():
                if any(self._matches(link, source, target, names) for link in links):
                    backlinks.append(source)
            return backlinks
        except Exception:  # noqa: BLE001
            self._logger.exception("Reading unresolved links failed for %s", target)
            return []

    def has_backlinks(self, target: str) -> bool:
        return bool(self.resolved_backlinks(target) or self.unresolved_backlinks(target))

    def backlink_count(self, target: str) -> int:
        """Resolved plus unresolved source count (not de-duplicated)."""
        return len(self.resolved_backlinks(target)) + len(self.unresolved_backlinks(target))

    def _target_names(self, target: str) -> set[str] | None:
        for doc in self._provider.list_documents():
            if doc.path == target:
                return {doc.base_name.lower(), doc.full_name.lower()}
        return None

    def _matches(self, link: str, source: str, target: str, names: set[str]) -> bool:
        if not isinstance(link, str):
            return False
        if link.lower() in names:
            return True
        return self.match_aliases and self._resolver.resolve(link, source) == target

    # ------------------------------------------------------------------
    # Filtering
    # ------------------------------------------------------------------

    def filter_backlinks(
        self,
        backlinks: list[str],
        *,
        exclude_daily_notes: bool = False,
        exclude_current_file: str | None = None,
        sort_by_path: bool = False,
    ) -> list[str]:
        """Return a filtered copy of *backlinks*; the input is left untouched."""
        filtered = list(backlinks)
        try:
            if exclude_daily_notes:
                filtered = [p for p in filtered if not self._provider.classify_daily_note(p)]
            if exclude_current_file:
                filtered = [p for p in filtered if p != exclude_current_file]
            if sort_by_path:
                filtered.sort()
        except Exception:  # noqa: BLE001
            self._logger.exception("Filtering backlinks failed")
            return list(backlinks)
        return filtered

    # ------------------------------------------------------------------
    # Options & statistics
    # ------------------------------------------------------------------

    def update_options(self, **changes: Any) -> DiscoveryOptions:
        self.options = self.options.updated(**changes)
        return self.options

    def statistics(self) -> DiscoveryStatistics:
        return self._stats

    def reset_statistics(self) -> None:
        self._stats = DiscoveryStatistics()

    def _record(self, backlinks: list[str], resolved_count: int, unresolved_count: int) -> None:
        stats = self._stats
        checked = stats.total_files_checked + 1
        found = stats.total_backlinks_found + len(backlinks)
        self._stats = replace(
            stats,
            total_files_checked=checked,
            files_with_backlinks=stats.files_with_backlinks + (1 if backlinks else 0),
            total_backlinks_found=found,
            resolved_backlinks=stats.resolved_backlinks + resolved_count,
            unresolved_backlinks=stats.unresolved_backlinks + unresolved_count,
            average_backlinks_per_file=found / checked,
            last_discovery_time=int(time.time() * 1000),
        )


def target_note_name(path: str) -> str:
    """Display name used for ``[[...]]`` references to *path*."""
    return PurePosixPath(path).stem
