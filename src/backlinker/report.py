"""Tabular views of engine state as Polars DataFrames.

Handy in notebooks and for debugging cache behaviour::

    cache_frame(coordinator.cache)
    blocks_frame(coordinator.extract_backlink_blocks("Atlas.md"))
"""

from __future__ import annotations

from dataclasses import asdict
from typing import TYPE_CHECKING

import polars as pl

if TYPE_CHECKING:
    from backlinker.blocks import Block
    from backlinker.cache import BacklinkCache
    from backlinker.coordinator import DiscoveryCoordinator

_CACHE_SCHEMA = {
    "file_path": pl.Utf8,
    "backlink_count": pl.Int64,
    "timestamp": pl.Int64,
    "file_modified_time": pl.Int64,
    "valid": pl.Boolean,
}

_BLOCK_SCHEMA = {
    "source_path": pl.Utf8,
    "id": pl.Utf8,
    "start_line": pl.Int64,
    "end_line": pl.Int64,
    "start_offset": pl.Int64,
    "end_offset": pl.Int64,
    "heading": pl.Utf8,
    "heading_level": pl.Int64,
    "has_backlink_line": pl.Boolean,
}


def cache_frame(cache: "BacklinkCache") -> pl.DataFrame:
    """One row per cache entry, oldest first."""
    rows = [
        {
            "file_path": e.file_path,
            "backlink_count": len(e.backlinks),
            "timestamp": e.timestamp,
            "file_modified_time": e.file_modified_time,
            "valid": cache.is_valid(e.file_path),
        }
        for e in sorted(cache.entries(), key=lambda e: e.timestamp)
    ]
    return pl.DataFrame(rows, schema=_CACHE_SCHEMA)


def blocks_frame(blocks_by_source: dict[str, list["Block"]]) -> pl.DataFrame:
    """One row per extracted block (content omitted)."""
    rows = [
        {k: v for k, v in asdict(block).items() if k in _BLOCK_SCHEMA}
        for blocks in blocks_by_source.values()
        for block in blocks
    ]
    return pl.DataFrame(rows, schema=_BLOCK_SCHEMA)


def statistics_frame(coordinator: "DiscoveryCoordinator") -> pl.DataFrame:
    """Discovery, cache and extraction counters as ``metric | value`` rows."""
    rows: list[dict[str, object]] = []
    for group, stats in (
        ("discovery", coordinator.statistics()),
        ("cache", coordinator.cache_statistics()),
        ("extraction", coordinator.extraction_statistics()),
    ):
        for key, value in asdict(stats).items():
            rows.append({"metric": f"{group}.{key}", "value": None if value is None else float(value)})
    return pl.DataFrame(rows, schema={"metric": pl.Utf8, "value": pl.Float64})
