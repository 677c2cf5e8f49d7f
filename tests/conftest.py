"""Shared fixtures: an in-memory note index and a controllable clock."""

from __future__ import annotations

from typing import Callable, Iterable

import pytest

from backlinker.exceptions import IndexAccessError
from backlinker.note import DocumentInfo


class FakeProvider:
    """Dictionary-backed :class:`~backlinker.provider.NoteIndexProvider`."""

    def __init__(
        self,
        documents: Iterable[str] = (),
        *,
        resolved: dict[str, set[str]] | None = None,
        unresolved: dict[str, set[str]] | None = None,
        aliases: dict[str, list[str]] | None = None,
        mtimes: dict[str, int] | None = None,
        contents: dict[str, str] | None = None,
        daily: Iterable[str] = (),
    ) -> None:
        self.documents = list(documents)
        self.resolved = resolved or {}
        self.unresolved = unresolved or {}
        self.aliases = aliases or {}
        self.mtimes = mtimes or {}
        self.contents = contents or {}
        self.daily = set(daily)
        self.list_calls = 0

    @property
    def resolved_links(self) -> dict[str, set[str]]:
        return self.resolved

    @property
    def unresolved_links(self) -> dict[str, set[str]]:
        return self.unresolved

    def list_documents(self) -> list[DocumentInfo]:
        self.list_calls += 1
        return [DocumentInfo.from_path(p) for p in self.documents]

    def stat_modified_time(self, path: str) -> int | None:
        return self.mtimes.get(path)

    def front_matter_aliases(self, path: str) -> list[str]:
        return list(self.aliases.get(path, []))

    def read_content(self, path: str) -> str:
        if path not in self.contents:
            raise IndexAccessError(f"no such document: {path}")
        return self.contents[path]

    def classify_daily_note(self, path: str) -> bool:
        return path in self.daily


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start: int = 1_000_000) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture()
def make_provider() -> Callable[..., FakeProvider]:
    return FakeProvider


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()
