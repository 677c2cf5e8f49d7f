"""Core Note dataclass."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Any


@dataclass(frozen=True)
class DocumentInfo:
    """Identity of one document as the index reports it."""

    path: str        # vault-relative, forward slashes, with extension
    base_name: str   # file name without extension
    full_name: str   # file name with extension

    @classmethod
    def from_path(cls, path: str) -> "DocumentInfo":
        pure = PurePosixPath(path)
        return cls(path=path, base_name=pure.stem, full_name=pure.name)


@dataclass
class Note:
    """A single markdown note in the vault."""

    path: Path
    rel_path: str
    title: str
    body: str
    #: Raw ``[[WikiLink]]`` targets, heading fragments and display text removed
    links: list[str] = field(default_factory=list)
    aliases: list[str] = field(default_factory=list)
    frontmatter: dict[str, Any] = field(default_factory=dict)

    @property
    def base_name(self) -> str:
        return self.path.stem

    @property
    def full_name(self) -> str:
        return self.path.name

    def info(self) -> DocumentInfo:
        return DocumentInfo(path=self.rel_path, base_name=self.base_name, full_name=self.full_name)
