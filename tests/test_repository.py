"""Tests for the SQLite store."""

import sqlite3

import pandas as pd
import pytest

from wordlens.errors import StoreError
from wordlens.services import SQLiteRepository


class TestSearchHistory:
    """Test search records and favorites."""

    def test_first_search_creates_record(self, repository):
        repository.add_search("apple")

        record = repository.get_search("apple")
        assert record.search_count == 1
        assert record.is_favorite is False
        assert record.favorited_at is None
        assert record.created_at == record.last_searched_at

    def test_repeat_search_increments_count(self, repository):
        repository.add_search("apple")
        first = repository.get_search("apple")
        repository.add_search("apple")

        record = repository.get_search("apple")
        assert record.search_count == 2
        assert record.created_at == first.created_at
        assert record.last_searched_at >= first.last_searched_at

    def test_words_are_case_sensitive(self, repository):
        repository.add_search("Apple")
        repository.add_search("apple")
        assert len(repository.get_search_history()) == 2

    def test_favorite_unknown_word(self, repository):
        repository.toggle_favorite("pear", True)

        record = repository.get_search("pear")
        assert record.search_count == 1
        assert record.is_favorite is True
        assert record.favorited_at is not None
        assert repository.is_favorite("pear") is True

    def test_unfavorite_preserves_counters(self, repository):
        repository.add_search("apple")
        repository.add_search("apple")
        repository.toggle_favorite("apple", True)
        before = repository.get_search("apple")

        repository.toggle_favorite("apple", False)

        record = repository.get_search("apple")
        assert record.is_favorite is False
        assert record.favorited_at is None
        assert record.search_count == 2
        assert record.last_searched_at == before.last_searched_at

    def test_is_favorite_unknown_word(self, repository):
        assert repository.is_favorite("nothing") is False

    def test_history_is_most_recent_first(self, repository):
        for word in ("one", "two", "three"):
            repository.add_search(word)
        repository.add_search("one")

        words = [r.word for r in repository.get_search_history()]
        assert words == ["one", "three", "two"]

    def test_history_is_capped(self, repository):
        for i in range(SQLiteRepository.HISTORY_LIMIT + 5):
            repository.add_search(f"word{i}")
        assert len(repository.get_search_history()) == SQLiteRepository.HISTORY_LIMIT

    def test_favorites_only(self, repository):
        repository.add_search("apple")
        repository.add_search("pear")
        repository.toggle_favorite("pear", True)

        assert [r.word for r in repository.get_search_history(favorites_only=True)] == ["pear"]


class TestHistoryExport:
    """Test the pandas export."""

    def test_history_frame(self, repository):
        repository.add_search("apple")
        repository.toggle_favorite("apple", True)

        df = repository.get_history_frame()
        assert isinstance(df, pd.DataFrame)
        assert list(df["word"]) == ["apple"]
        assert bool(df["is_favorite"].iloc[0]) is True

    def test_export_csv(self, repository, tmp_path):
        repository.add_search("apple")
        repository.add_search("pear")

        path = tmp_path / "out" / "history.csv"
        assert repository.export_history_csv(str(path)) == 2
        assert set(pd.read_csv(path)["word"]) == {"apple", "pear"}

    def test_empty_frame_has_columns(self, repository):
        df = repository.get_history_frame()
        assert df.empty
        assert "search_count" in df.columns


class TestSettingsStore:
    """Test the key/value settings table."""

    def test_values_are_json(self, repository):
        repository.save_settings({"anki": {"enabled": True}, "preferredLanguage": "es"})
        assert repository.get_settings() == {"anki": {"enabled": True}, "preferredLanguage": "es"}

    def test_non_json_value_is_returned_raw(self, repository):
        with sqlite3.connect(str(repository.db_path)) as conn:
            conn.execute("INSERT INTO settings (key, value) VALUES ('legacy', 'not json')")

        assert repository.get_settings()["legacy"] == "not json"

    def test_driver_errors_become_store_errors(self, tmp_path):
        repo = SQLiteRepository(str(tmp_path / "fresh.db"))
        # Tables were never created
        with pytest.raises(StoreError):
            repo.add_search("apple")
