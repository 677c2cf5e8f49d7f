"""Block extraction: slice the context around each reference to a note.

For every ``[[note]]`` reference in a source document (optionally written as
``[[folder/note]]`` or ``[[note.md]]``, and/or with a ``|display`` suffix) a
strategy decides where the surrounding block ends and whether to keep it:

``default``
    From the start of the reference's line up to the next horizontal rule
    (a line of three or more dashes and nothing else) or the next ``[[note]]``
    mention, whichever comes first, else the end of the text.
``headers-only``
    Same span, but kept only if one of its lines is a ``#`` .. ``#####``
    heading.
``top-line``
    Just the line holding the reference.

Table separator rows such as ``|---|---|`` look like rules but never end a
block.
"""

from __future__ import annotations

import logging
import re
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace

from backlinker.exceptions import UnknownStrategyError
from backlinker.log import get_logger

DEFAULT_STRATEGY = "default"

_HEADING_LINE_RE = re.compile(r"^#{1,5} ")
_HEADING_TEXT_RE = re.compile(r"^(#{1,5}) +(.*?)[ \t]*$", re.MULTILINE)
_RULE_RE = re.compile(r"^-{3,}$")


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Boundary:
    start: int
    end: int


@dataclass
class Block:
    """A span of a source document shown as context for a backlink."""

    id: str
    content: str
    source_path: str
    start_offset: int
    end_offset: int
    start_line: int
    end_line: int
    heading: str | None = None
    heading_level: int | None = None
    has_backlink_line: bool = False
    is_collapsed: bool = False
    is_visible: bool = True


@dataclass(frozen=True)
class ExtractionStatistics:
    total_extractions: int = 0
    total_blocks_extracted: int = 0
    average_extraction_time: float = 0.0  # ms
    last_extraction_time: int | None = None  # epoch ms


# ---------------------------------------------------------------------------
# Line helpers
# ---------------------------------------------------------------------------


def is_heading_line(line: str) -> bool:
    return bool(_HEADING_LINE_RE.match(line))


def is_horizontal_rule(line: str) -> bool:
    """True for ``---``-style rules; pipe-bearing table separators never count."""
    if "|" in line:
        return False
    return bool(_RULE_RE.match(line.strip()))


def reference_pattern(note_name: str) -> re.Pattern[str]:
    """Regex for ``[[note]]``, ``[[path/to/note]]``, ``[[note.md]]`` and ``[[note|display]]``."""
    escaped = re.escape(note_name)
    return re.compile(rf"\[\[(?:[^\]/\n]*/)*{escaped}(?:\.md)?(?:\|[^\]\n]*)?\]\]")


def _line_start(text: str, offset: int) -> int:
    return text.rfind("\n", 0, offset) + 1


def _line_end(text: str, offset: int) -> int:
    end = text.find("\n", offset)
    return len(text) if end == -1 else end


def find_heading_boundaries(text: str) -> list[Boundary]:
    """One single-line boundary per heading line, regardless of references."""
    boundaries: list[Boundary] = []
    pos = 0
    for line in text.split("\n"):
        if is_heading_line(line):
            boundaries.append(Boundary(pos, pos + len(line)))
        pos += len(line) + 1
    return boundaries


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------


class BlockBoundaryStrategy(ABC):
    """Template for locating block spans around note references.

    Subclasses choose where a block ends (:meth:`block_end`) and which spans
    survive (:meth:`accept`).
    """

    name: str = ""
    description: str = ""

    def find_boundaries(self, text: str, note_name: str) -> list[Boundary]:
        boundaries: list[Boundary] = []
        for match in reference_pattern(note_name).finditer(text):
            start = _line_start(text, match.start())
            end = self.block_end(text, match, note_name)
            if end <= start:
                continue
            boundary = Boundary(start, end)
            if self.accept(text, boundary):
                boundaries.append(boundary)
        return boundaries

    @abstractmethod
    def block_end(self, text: str, match: re.Match[str], note_name: str) -> int:
        """Offset one past the last character of the block for *match*."""

    def accept(self, text: str, boundary: Boundary) -> bool:
        return True


class DefaultBoundaryStrategy(BlockBoundaryStrategy):
    name = "default"
    description = "Reference line through the next rule or next mention"

    def block_end(self, text: str, match: re.Match[str], note_name: str) -> int:
        rule = self._next_rule(text, match.end())
        mention = text.find(f"[[{note_name}]]", match.start() + 1)
        if rule != -1 and (mention == -1 or rule < mention):
            return rule
        if mention != -1:
            return mention
        return len(text)

    @staticmethod
    def _next_rule(text: str, offset: int) -> int:
        """Start offset of the first horizontal-rule line after *offset*'s line."""
        pos = text.find("\n", offset)
        while pos != -1:
            line_start = pos + 1
            line_end = _line_end(text, line_start)
            if is_horizontal_rule(text[line_start:line_end]):
                return line_start
            pos = text.find("\n", line_start)
        return -1


class HeadersOnlyBoundaryStrategy(DefaultBoundaryStrategy):
    name = "headers-only"
    description = "Default blocks that contain at least one heading line"

    def accept(self, text: str, boundary: Boundary) -> bool:
        block = text[boundary.start : boundary.end]
        return any(is_heading_line(line) for line in block.split("\n"))


class TopLineBoundaryStrategy(BlockBoundaryStrategy):
    name = "top-line"
    description = "Only the line containing the reference"

    def block_end(self, text: str, match: re.Match[str], note_name: str) -> int:
        return _line_end(text, match.start())


# ---------------------------------------------------------------------------
# Extractor
# ---------------------------------------------------------------------------


def _has_backlink_line(content: str, note_name: str) -> bool:
    needles = (
        f"[[{note_name}]]",
        f"[[{note_name}|",
        f"[[{note_name}.md]]",
        f"[[{note_name}.md|",
        f"[[./{note_name}]]",
        f"[[../{note_name}]]",
    )
    return any(needle in line for line in content.split("\n") for needle in needles)


class BlockExtractor:
    """Turn a source document's text into :class:`Block` records."""

    def __init__(self, *, logger: logging.Logger | None = None) -> None:
        self._logger = logger or get_logger("blocks")
        self._strategies: dict[str, BlockBoundaryStrategy] = {}
        self._descriptions: dict[str, str] = {}
        self._stats = ExtractionStatistics()
        for strategy in (
            DefaultBoundaryStrategy(),
            HeadersOnlyBoundaryStrategy(),
            TopLineBoundaryStrategy(),
        ):
            self.register_strategy(strategy.name, strategy, strategy.description)

    # ------------------------------------------------------------------
    # Strategy registry
    # ------------------------------------------------------------------

    def register_strategy(
        self, name: str, strategy: BlockBoundaryStrategy, description: str = ""
    ) -> None:
        self._strategies[name] = strategy
        self._descriptions[name] = description or strategy.description

    def available_strategies(self) -> list[str]:
        return list(self._strategies)

    def has_strategy(self, name: str) -> bool:
        return name in self._strategies

    def strategy_description(self, name: str) -> str:
        return self._descriptions.get(name, "Unknown strategy")

    def get_strategy(self, name: str) -> BlockBoundaryStrategy:
        try:
            return self._strategies[name]
        except KeyError:
            raise UnknownStrategyError(f"Unknown block strategy: {name!r}") from None

    # ------------------------------------------------------------------
    # Extraction
    # ------------------------------------------------------------------

    def extract(
        self,
        text: str,
        note_name: str,
        strategy: str = DEFAULT_STRATEGY,
        *,
        source_path: str = "",
    ) -> list[Block]:
        """Return one block per accepted reference span; never raises."""
        started = time.perf_counter()
        try:
            try:
                finder = self.get_strategy(strategy)
            except UnknownStrategyError:
                self._logger.warning("Unknown strategy %r, using %r", strategy, DEFAULT_STRATEGY)
                finder = self.get_strategy(DEFAULT_STRATEGY)
            boundaries = finder.find_boundaries(text, note_name)
            blocks = [
                self._make_block(text, note_name, source_path, i, b)
                for i, b in enumerate(boundaries)
            ]
        except Exception:  # noqa: BLE001
            self._logger.exception(
                "Block extraction failed for %s (note=%r)", source_path or "<text>", note_name
            )
            return []
        self._record(len(blocks), (time.perf_counter() - started) * 1000)
        self._logger.debug(
            "Extracted %d blocks from %s with %s", len(blocks), source_path or "<text>", strategy
        )
        return blocks

    def _make_block(
        self, text: str, note_name: str, source_path: str, index: int, boundary: Boundary
    ) -> Block:
        content = text[boundary.start : boundary.end]
        heading = _HEADING_TEXT_RE.search(content)
        return Block(
            id=f"{source_path or note_name}:{index}:{boundary.start}",
            content=content,
            source_path=source_path,
            start_offset=boundary.start,
            end_offset=boundary.end,
            start_line=text.count("\n", 0, boundary.start) + 1,
            end_line=text.count("\n", 0, boundary.end - 1) + 1,
            heading=heading.group(2) if heading else None,
            heading_level=len(heading.group(1)) if heading else None,
            has_backlink_line=_has_backlink_line(content, note_name),
        )

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    def statistics(self) -> ExtractionStatistics:
        return self._stats

    def reset_statistics(self) -> None:
        self._stats = ExtractionStatistics()

    def _record(self, block_count: int, elapsed_ms: float) -> None:
        stats = self._stats
        count = stats.total_extractions + 1
        self._stats = replace(
            stats,
            total_extractions=count,
            total_blocks_extracted=stats.total_blocks_extracted + block_count,
            average_extraction_time=(stats.average_extraction_time * (count - 1) + elapsed_ms)
            / count,
            last_extraction_time=int(time.time() * 1000),
        )
