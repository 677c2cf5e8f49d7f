"""Parsing of note files: YAML front matter, wikilink targets and aliases."""

from __future__ import annotations

import re
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

if TYPE_CHECKING:
    from backlinker.note import Note

# Target, then an optional #heading and/or |display part
_WIKILINK_RE = re.compile(
    r"\[\[(?P<target>[^\]|#\n]+)(?:#(?P<heading>[^\]|\n]*))?(?:\|(?P<display>[^\]\n]*))?\]\]"
)
# Leading ---/--- fence; the body starts after the closing fence line
_FENCE_RE = re.compile(r"\A---[ \t]*\n(?P<yaml>.*?)\n---[ \t]*(?:\n|\Z)", re.DOTALL)


def parse_frontmatter(content: str) -> tuple[dict[str, Any], str]:
    """Split *content* into ``(front_matter, body)``.

    Only a mapping counts as front matter.  Missing, malformed or non-mapping
    YAML gives an empty dict; the fenced block is still removed from the body
    when it is present.
    """
    fence = _FENCE_RE.match(content)
    if fence is None:
        return {}, content
    body = content[fence.end() :]
    try:
        loaded = yaml.safe_load(fence.group("yaml"))
    except yaml.YAMLError:
        return {}, body
    return (loaded if isinstance(loaded, dict) else {}), body


def parse_wikilinks(text: str) -> list[str]:
    """Link targets of every ``[[...]]`` in *text*, first occurrence order.

    Heading fragments and display text are dropped, so ``[[a#b|c]]`` yields
    ``"a"``.
    """
    targets = (m.group("target").strip() for m in _WIKILINK_RE.finditer(text))
    return list(dict.fromkeys(t for t in targets if t))


def parse_aliases(frontmatter: dict[str, Any]) -> list[str]:
    """Return the note's aliases from ``aliases`` (or legacy ``alias``).

    Both a YAML list and a single (optionally comma-separated) string are
    accepted; non-string entries are dropped.
    """
    raw = frontmatter.get("aliases")
    if raw is None:
        raw = frontmatter.get("alias")
    if raw is None:
        return []
    if isinstance(raw, str):
        raw = [a.strip() for a in raw.split(",")]
    if not isinstance(raw, list):
        return []
    return list(dict.fromkeys(a for a in raw if isinstance(a, str) and a))


def parse_note(path: Path, vault_dir: Path) -> "Note":
    """Read a ``.md`` file and return a fully-populated :class:`Note`."""
    from backlinker.note import Note

    content = path.read_text(encoding="utf-8")
    frontmatter, body = parse_frontmatter(content)

    title = frontmatter.get("title")
    if not isinstance(title, str) or not title:
        title = path.stem

    return Note(
        path=path,
        rel_path=path.relative_to(vault_dir).as_posix(),
        title=title,
        body=body,
        links=parse_wikilinks(body),
        aliases=parse_aliases(frontmatter),
        frontmatter=frontmatter,
    )
