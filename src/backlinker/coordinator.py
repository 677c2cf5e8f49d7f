"""DiscoveryCoordinator: the single entry point used by the UI layer.

Composes a :class:`BacklinkDiscoverer`, a :class:`BacklinkCache`, per-document
:class:`BacklinksState` and an :class:`EventEmitter`::

    coordinator = DiscoveryCoordinator(index)
    coordinator.events.on(BACKLINKS_UPDATED, refresh_panel)

    sources = coordinator.update_backlinks("Projects/Atlas.md", origin_id="leaf-1")
    blocks = coordinator.extract_backlink_blocks("Projects/Atlas.md", "headers-only")

Per document the lifecycle is ``UNDISCOVERED -> SERVED_FROM_CACHE |
FRESHLY_DISCOVERED | SKIPPED -> UNDISCOVERED`` (on clear/invalidate).
``SKIPPED`` marks daily notes passed over while ``only_daily_notes`` is set.
Cache expiry is evaluated lazily on the next read; there are no timers.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from backlinker.blocks import Block, BlockExtractor, ExtractionStatistics
from backlinker.cache import BacklinkCache, CacheStatistics, Clock, system_clock
from backlinker.config import DiscoveryOptions, Settings
from backlinker.discoverer import BacklinkDiscoverer, DiscoveryStatistics, target_note_name
from backlinker.events import BACKLINKS_UPDATED, BacklinksUpdated, EventEmitter
from backlinker.exceptions import ConfigError
from backlinker.log import get_logger
from backlinker.provider import NoteIndexProvider
from backlinker.resolver import LinkResolver
from backlinker.state import BacklinksState, DocumentStatus


@dataclass(frozen=True)
class BacklinkMetadata:
    last_updated: int  # epoch ms of the last cache cleanup/clear
    cache_size: int


class DiscoveryCoordinator:
    """Discover, cache and publish backlinks for target documents."""

    def __init__(
        self,
        provider: NoteIndexProvider,
        options: DiscoveryOptions | None = None,
        *,
        max_cache_size: int | None = None,
        block_strategy: str = "default",
        clock: Clock = system_clock,
        events: EventEmitter | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._provider = provider
        self._logger = logger or get_logger("coordinator")
        self._options = options or DiscoveryOptions()
        self.block_strategy = block_strategy

        self.resolver = LinkResolver(provider)
        self.discoverer = BacklinkDiscoverer(provider, self._options, resolver=self.resolver)
        cache_kwargs: dict[str, Any] = {"ttl": self._options.cache_timeout, "clock": clock}
        if max_cache_size is not None:
            cache_kwargs["max_size"] = max_cache_size
        self.cache = BacklinkCache(provider, **cache_kwargs)
        self.extractor = BlockExtractor()
        self.state = BacklinksState()
        self.events = events or EventEmitter()

    @classmethod
    def from_settings(
        cls, provider: NoteIndexProvider, settings: Settings, **kwargs: Any
    ) -> "DiscoveryCoordinator":
        return cls(
            provider,
            settings.options,
            max_cache_size=settings.max_cache_size,
            block_strategy=settings.block_strategy,
            **kwargs,
        )

    # ------------------------------------------------------------------
    # Backlinks
    # ------------------------------------------------------------------

    def update_backlinks(self, path: str, origin_id: str | None = None) -> list[str]:
        """Refresh the backlinks of *path*, publish them, and return a copy."""
        if self._options.only_daily_notes and self._is_daily(path):
            self._logger.debug("Skipping daily note %s", path)
            self.state.set_backlinks(path, [], DocumentStatus.SKIPPED)
            return []

        backlinks: list[str] | None = None
        status = DocumentStatus.FRESHLY_DISCOVERED
        if self._options.use_cache:
            backlinks = self.cache.get(path)
            if backlinks is not None:
                status = DocumentStatus.SERVED_FROM_CACHE

        if backlinks is None:
            backlinks = self.discoverer.discover(path)
            if self._options.use_cache:
                self._cache_put(path, backlinks)

        self.state.set_backlinks(path, backlinks, status)
        self.events.emit(
            BACKLINKS_UPDATED,
            BacklinksUpdated(
                path=path,
                files=tuple(backlinks),
                count=len(backlinks),
                origin_id=origin_id,
                from_cache=status is DocumentStatus.SERVED_FROM_CACHE,
            ),
        )
        self._logger.debug("Backlinks for %s: %d (%s)", path, len(backlinks), status.value)
        return list(backlinks)

    def current_backlinks(self, path: str) -> list[str]:
        """Last recorded backlinks for *path*; no discovery."""
        return self.state.get_backlinks(path)

    def cached_backlinks(self, path: str) -> list[str] | None:
        return self.cache.get(path)

    def status(self, path: str) -> DocumentStatus:
        return self.state.status(path)

    def have_backlinks_changed(self, path: str, candidate: list[str]) -> bool:
        """Compare *candidate* with the recorded backlinks, ignoring order."""
        current = self.state.get_backlinks(path)
        if len(current) != len(candidate):
            return True
        return sorted(current) != sorted(candidate)

    def filter_backlinks(
        self,
        backlinks: list[str],
        current_path: str | None = None,
        *,
        exclude_daily_notes: bool = False,
        exclude_current_file: bool = False,
        sort_by_path: bool = False,
    ) -> list[str]:
        return self.discoverer.filter_backlinks(
            backlinks,
            exclude_daily_notes=exclude_daily_notes,
            exclude_current_file=current_path if exclude_current_file else None,
            sort_by_path=sort_by_path,
        )

    # ------------------------------------------------------------------
    # Invalidation
    # ------------------------------------------------------------------

    def clear_cache(self, path: str | None = None) -> None:
        """Forget cached and recorded backlinks for *path* (or every path)."""
        if path is None:
            self.clear_backlinks()
        else:
            self.invalidate_cache(path)

    def invalidate_cache(self, path: str) -> None:
        self.cache.invalidate(path)
        self.state.clear_backlinks(path)

    def clear_backlinks(self) -> None:
        self.cache.clear()
        self.state.clear_backlinks()

    # ------------------------------------------------------------------
    # Blocks
    # ------------------------------------------------------------------

    def extract_blocks(
        self,
        text: str,
        note_name: str,
        strategy: str | None = None,
        *,
        source_path: str = "",
    ) -> list[Block]:
        return self.extractor.extract(
            text, note_name, strategy or self.block_strategy, source_path=source_path
        )

    def extract_backlink_blocks(
        self, path: str, strategy: str | None = None
    ) -> dict[str, list[Block]]:
        """Blocks from every source linking to *path*, keyed by source path.

        A source that cannot be read is left out; the others are still
        processed.
        """
        note_name = target_note_name(path)
        result: dict[str, list[Block]] = {}
        for source in self.update_backlinks(path):
            try:
                text = self._provider.read_content(source)
            except Exception:  # noqa: BLE001
                self._logger.warning("Cannot read backlink source %s", source, exc_info=True)
                continue
            result[source] = self.extract_blocks(text, note_name, strategy, source_path=source)
        return result

    # ------------------------------------------------------------------
    # Options & observability
    # ------------------------------------------------------------------

    @property
    def options(self) -> DiscoveryOptions:
        return self._options

    def update_options(self, **changes: Any) -> DiscoveryOptions:
        """Apply option changes; an invalid change is logged and ignored."""
        try:
            self._options = self._options.updated(**changes)
        except ConfigError as exc:
            self._logger.warning("Rejected option update %r: %s", changes, exc)
            return self._options
        self.discoverer.options = self._options
        self.cache.set_ttl(self._options.cache_timeout)
        self._logger.debug("Options updated: %s", self._options)
        return self._options

    def statistics(self) -> DiscoveryStatistics:
        return self.discoverer.statistics()

    def cache_statistics(self) -> CacheStatistics:
        return self.cache.statistics()

    def extraction_statistics(self) -> ExtractionStatistics:
        return self.extractor.statistics()

    def backlink_metadata(self) -> BacklinkMetadata:
        stats = self.cache.statistics()
        return BacklinkMetadata(last_updated=stats.last_cleanup, cache_size=stats.total_cached_files)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _is_daily(self, path: str) -> bool:
        try:
            return self._provider.classify_daily_note(path)
        except Exception:  # noqa: BLE001
            self._logger.warning("Daily-note check failed for %s", path, exc_info=True)
            return False

    def _cache_put(self, path: str, backlinks: list[str]) -> None:
        try:
            self.cache.put(path, backlinks)
        except Exception:  # noqa: BLE001
            self._logger.warning("Caching backlinks for %s failed", path, exc_info=True)
