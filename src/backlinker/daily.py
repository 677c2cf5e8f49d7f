"""Daily-note classification.

A daily note is a markdown file whose stem is a real calendar date in
``YYYY-MM-DD`` form, optionally restricted to a configured folder.  The
discovery engine only ever sees the resulting predicate.
"""

from __future__ import annotations

import re
from datetime import date
from pathlib import PurePosixPath

_DATE_STEM_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")


def date_from_path(path: str) -> date | None:
    """Return the date encoded in *path*'s file name, or ``None``."""
    stem = PurePosixPath(path.replace("\\", "/")).name
    if stem.endswith(".md"):
        stem = stem[:-3]
    m = _DATE_STEM_RE.match(stem)
    if not m:
        return None
    try:
        return date(int(m.group(1)), int(m.group(2)), int(m.group(3)))
    except ValueError:
        return None


def daily_note_path(day: date, folder: str = "") -> str:
    """Return the vault-relative path of the daily note for *day*."""
    name = f"{day.isoformat()}.md"
    folder = folder.replace("\\", "/").strip("/")
    return f"{folder}/{name}" if folder else name


class DailyNoteClassifier:
    """Callable predicate ``path -> bool`` for daily notes."""

    def __init__(self, folder: str = "", enabled: bool = True) -> None:
        self.folder = folder.replace("\\", "/").strip("/")
        self.enabled = enabled

    def __call__(self, path: str) -> bool:
        if not self.enabled:
            return False
        normalized = path.replace("\\", "/")
        if self.folder and not normalized.startswith(self.folder + "/"):
            return False
        return date_from_path(normalized) is not None

    def __repr__(self) -> str:
        return f"DailyNoteClassifier(folder={self.folder!r}, enabled={self.enabled})"
