"""Backlink discovery, caching, and block extraction for markdown vaults."""

from backlinker.blocks import Block, BlockExtractor, find_heading_boundaries
from backlinker.cache import BacklinkCache
from backlinker.config import DiscoveryOptions, Settings
from backlinker.coordinator import DiscoveryCoordinator
from backlinker.daily import DailyNoteClassifier
from backlinker.discoverer import BacklinkDiscoverer
from backlinker.events import BACKLINKS_UPDATED, BacklinksUpdated, EventEmitter
from backlinker.index import VaultIndex
from backlinker.provider import NoteIndexProvider
from backlinker.resolver import LinkResolver, normalize_link_path

__all__ = [
    "BACKLINKS_UPDATED",
    "BacklinkCache",
    "BacklinkDiscoverer",
    "BacklinksUpdated",
    "Block",
    "BlockExtractor",
    "DailyNoteClassifier",
    "DiscoveryCoordinator",
    "DiscoveryOptions",
    "EventEmitter",
    "LinkResolver",
    "NoteIndexProvider",
    "Settings",
    "VaultIndex",
    "find_heading_boundaries",
    "normalize_link_path",
]
