"""VaultIndex: filesystem-backed note index for the discovery engine."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

from backlinker.daily import DailyNoteClassifier
from backlinker.exceptions import IndexAccessError
from backlinker.log import get_logger
from backlinker.note import DocumentInfo, Note
from backlinker.parser import parse_note


class VaultIndex:
    """Scans a vault directory and builds resolved/unresolved link maps.

    Satisfies :class:`~backlinker.provider.NoteIndexProvider`.  Paths are
    vault-relative with forward slashes and keep their ``.md`` extension.
    """

    def __init__(
        self,
        vault_dir: Path,
        *,
        daily_notes: Callable[[str], bool] | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.vault_dir = Path(vault_dir)
        self.notes: dict[str, Note] = {}
        self._resolved: dict[str, set[str]] = {}
        self._unresolved: dict[str, set[str]] = {}
        self._daily = daily_notes or DailyNoteClassifier()
        self._logger = logger or get_logger("index")

    # ------------------------------------------------------------------
    # Build / refresh
    # ------------------------------------------------------------------

    def build(self) -> None:
        """(Re-)scan the vault and rebuild the link maps."""
        self.notes = {}
        for path in sorted(self.vault_dir.glob("**/*.md")):
            try:
                note = parse_note(path, self.vault_dir)
            except (OSError, UnicodeDecodeError) as exc:
                self._logger.warning("Skipping unreadable note %s: %s", path, exc)
                continue
            self.notes[note.rel_path] = note
        self._build_links()
        self._logger.debug(
            "Indexed %d notes under %s", len(self.notes), self.vault_dir
        )

    def _build_links(self) -> None:
        by_name: dict[str, str] = {}
        for rel_path, note in self.notes.items():
            by_name.setdefault(note.base_name, rel_path)

        self._resolved = {rel_path: set() for rel_path in self.notes}
        self._unresolved = {}
        for rel_path, note in self.notes.items():
            for link in note.links:
                target = self._locate(link, by_name)
                if target is not None:
                    self._resolved[rel_path].add(target)
                else:
                    self._unresolved.setdefault(rel_path, set()).add(link)

    def _locate(self, link: str, by_name: dict[str, str]) -> str | None:
        """Map a wikilink target to a note path, as the host editor would."""
        candidate = link.strip()
        if candidate.startswith("./"):
            candidate = candidate[2:]
        candidate = candidate.lstrip("/")
        for path in (candidate, f"{candidate}.md"):
            if path in self.notes:
                return path
        if "/" not in candidate:
            return by_name.get(candidate.removesuffix(".md"))
        return None

    # ------------------------------------------------------------------
    # NoteIndexProvider
    # ------------------------------------------------------------------

    @property
    def resolved_links(self) -> dict[str, set[str]]:
        return self._resolved

    @property
    def unresolved_links(self) -> dict[str, set[str]]:
        return self._unresolved

    def list_documents(self) -> list[DocumentInfo]:
        return [note.info() for note in self.notes.values()]

    def stat_modified_time(self, path: str) -> int | None:
        try:
            return (self.vault_dir / path).stat().st_mtime_ns // 1_000_000
        except OSError:
            return None

    def front_matter_aliases(self, path: str) -> list[str]:
        note = self.notes.get(path)
        return list(note.aliases) if note else []

    def read_content(self, path: str) -> str:
        try:
            return (self.vault_dir / path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise IndexAccessError(f"Cannot read {path}: {exc}") from exc

    def classify_daily_note(self, path: str) -> bool:
        return self._daily(path)
