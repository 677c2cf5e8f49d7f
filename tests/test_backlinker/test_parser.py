"""Unit tests for backlinker.parser."""

import textwrap
from pathlib import Path

from backlinker.parser import (
    parse_aliases,
    parse_frontmatter,
    parse_note,
    parse_wikilinks,
)

# ---------------------------------------------------------------------------
# parse_frontmatter
# ---------------------------------------------------------------------------


class TestParseFrontmatter:
    def test_no_frontmatter_returns_empty_dict(self):
        meta, body = parse_frontmatter("Just some text.")
        assert meta == {}
        assert body == "Just some text."

    def test_basic_frontmatter(self):
        raw = textwrap.dedent("""\
            ---
            title: My Note
            aliases: [Mine, MN]
            ---
            Body here.
        """)
        meta, body = parse_frontmatter(raw)
        assert meta["title"] == "My Note"
        assert meta["aliases"] == ["Mine", "MN"]
        assert body == "Body here.\n"

    def test_frontmatter_not_at_start_is_ignored(self):
        raw = "Intro\n---\ntitle: Nope\n---\nMore text."
        meta, _ = parse_frontmatter(raw)
        assert meta == {}

    def test_invalid_yaml_returns_empty_dict(self):
        meta, _ = parse_frontmatter("---\n: broken: yaml:\n---\nBody.")
        # Should not raise
        assert isinstance(meta, dict)

    def test_non_mapping_yaml_returns_empty_dict(self):
        meta, _ = parse_frontmatter("---\n- just\n- a list\n---\nBody.")
        assert meta == {}

    def test_invalid_block_still_removed_from_body(self):
        meta, body = parse_frontmatter("---\n[unclosed\n---\nBody.")
        assert meta == {}
        assert body == "Body."

    def test_frontmatter_only_file(self):
        meta, body = parse_frontmatter("---\ntitle: Empty\n---")
        assert meta == {"title": "Empty"}
        assert body == ""


# ---------------------------------------------------------------------------
# parse_wikilinks
# ---------------------------------------------------------------------------


class TestParseWikilinks:
    def test_single_link(self):
        assert parse_wikilinks("See [[Getting Started]] for details.") == ["Getting Started"]

    def test_link_with_alias(self):
        assert parse_wikilinks("See [[index|Home Page]] here.") == ["index"]

    def test_link_with_heading(self):
        assert parse_wikilinks("Jump to [[guide#Setup]].") == ["guide"]

    def test_link_with_heading_and_display(self):
        assert parse_wikilinks("[[guide#Setup|the setup]] and [[guide]]") == ["guide"]

    def test_links_do_not_span_lines(self):
        assert parse_wikilinks("[[broken\nlink]] and [[ok]]") == ["ok"]

    def test_link_with_folder(self):
        assert parse_wikilinks("[[Projects/Atlas]]") == ["Projects/Atlas"]

    def test_deduplication(self):
        assert parse_wikilinks("[[A]] then [[A]] again") == ["A"]

    def test_preserves_order(self):
        assert parse_wikilinks("[[Z]] then [[A]] then [[M]]") == ["Z", "A", "M"]

    def test_no_links(self):
        assert parse_wikilinks("Plain text, no links.") == []


# ---------------------------------------------------------------------------
# parse_aliases
# ---------------------------------------------------------------------------


class TestParseAliases:
    def test_list(self):
        assert parse_aliases({"aliases": ["One", "Two"]}) == ["One", "Two"]

    def test_single_string(self):
        assert parse_aliases({"aliases": "One"}) == ["One"]

    def test_comma_separated_string(self):
        assert parse_aliases({"aliases": "One, Two"}) == ["One", "Two"]

    def test_legacy_alias_key(self):
        assert parse_aliases({"alias": ["Old"]}) == ["Old"]

    def test_non_strings_dropped(self):
        assert parse_aliases({"aliases": ["One", 2, None]}) == ["One"]

    def test_missing(self):
        assert parse_aliases({}) == []


# ---------------------------------------------------------------------------
# parse_note (integration)
# ---------------------------------------------------------------------------


class TestParseNote:
    def test_full_note(self, tmp_path: Path):
        folder = tmp_path / "Projects"
        folder.mkdir()
        md = folder / "atlas.md"
        md.write_text(
            textwrap.dedent("""\
                ---
                title: Atlas
                aliases: [Project Atlas]
                ---
                See [[getting-started]] and [[index|Home]].
            """),
            encoding="utf-8",
        )
        note = parse_note(md, tmp_path)
        assert note.title == "Atlas"
        assert note.rel_path == "Projects/atlas.md"
        assert note.base_name == "atlas"
        assert note.full_name == "atlas.md"
        assert note.links == ["getting-started", "index"]
        assert note.aliases == ["Project Atlas"]

    def test_note_without_frontmatter(self, tmp_path: Path):
        md = tmp_path / "simple.md"
        md.write_text("# Simple\nJust text.\n", encoding="utf-8")
        note = parse_note(md, tmp_path)
        assert note.title == "simple"
        assert note.links == []
        assert note.aliases == []
        assert note.info().path == "simple.md"
