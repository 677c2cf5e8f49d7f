"""Unit tests for backlinker.daily."""

from datetime import date

from backlinker.daily import DailyNoteClassifier, daily_note_path, date_from_path


class TestDateFromPath:
    def test_plain_date(self):
        assert date_from_path("2024-01-15.md") == date(2024, 1, 15)

    def test_in_folder(self):
        assert date_from_path("Journal/2024-03-02.md") == date(2024, 3, 2)

    def test_not_a_real_date(self):
        assert date_from_path("2024-02-30.md") is None

    def test_not_a_date_stem(self):
        assert date_from_path("Projects/atlas.md") is None
        assert date_from_path("2024-01-15 meeting.md") is None


class TestDailyNotePath:
    def test_without_folder(self):
        assert daily_note_path(date(2024, 1, 5)) == "2024-01-05.md"

    def test_folder_slashes_trimmed(self):
        assert daily_note_path(date(2024, 1, 5), "/Journal/") == "Journal/2024-01-05.md"


class TestDailyNoteClassifier:
    def test_any_folder_by_default(self):
        classify = DailyNoteClassifier()
        assert classify("2024-01-15.md")
        assert classify("deep/inside/2024-01-15.md")
        assert not classify("notes.md")

    def test_restricted_to_folder(self):
        classify = DailyNoteClassifier(folder="Journal")
        assert classify("Journal/2024-01-15.md")
        assert not classify("Archive/2024-01-15.md")
        assert not classify("Journalling/2024-01-15.md")

    def test_disabled(self):
        assert not DailyNoteClassifier(enabled=False)("2024-01-15.md")
