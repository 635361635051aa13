"""Tests for the preference stores."""

import importlib
import json
from pathlib import Path

import pytest

import preferences
from preferences import (
    BIRTHDATE_KEY,
    CATEGORY_KEY,
    InMemoryPreferenceStore,
    JsonPreferenceStore,
    SessionPreferenceStore,
)


class FakeSession(dict):
    permanent = False


@pytest.fixture
def prefs_path(tmp_path: Path) -> Path:
    return tmp_path / "pet_preferences.json"


class TestInMemoryPreferenceStore:
    def test_empty(self, store):
        assert store.load_preferences() == (None, None)

    def test_save_and_load(self, store):
        store.save_preferences("2021-10-19", "large")
        assert store.get(BIRTHDATE_KEY) == "2021-10-19"
        assert store.get(CATEGORY_KEY) == "large"
        assert store.load_preferences() == ("2021-10-19", "large")

    def test_initial_values(self):
        store = InMemoryPreferenceStore({CATEGORY_KEY: "medium"})
        assert store.load_preferences() == (None, "medium")


class TestSessionPreferenceStore:
    def test_writes_into_session(self):
        session = FakeSession()
        SessionPreferenceStore(session).save_preferences("2020-01-01", "small")
        assert session == {BIRTHDATE_KEY: "2020-01-01", CATEGORY_KEY: "small"}

    def test_marks_session_permanent(self):
        session = FakeSession()
        SessionPreferenceStore(session).set(CATEGORY_KEY, "small")
        assert session.permanent is True

    def test_reads_from_session(self):
        session = FakeSession({BIRTHDATE_KEY: "2019-05-05"})
        assert SessionPreferenceStore(session).load_preferences() == ("2019-05-05", None)


class TestJsonPreferenceStore:
    def test_missing_file(self, prefs_path):
        store = JsonPreferenceStore("42", prefs_path)
        assert store.load_preferences() == (None, None)
        assert not prefs_path.exists()

    def test_persists_to_file(self, prefs_path):
        JsonPreferenceStore(42, prefs_path).save_preferences("2021-10-19", "large")

        data = json.loads(prefs_path.read_text())
        assert data == {"42": {BIRTHDATE_KEY: "2021-10-19", CATEGORY_KEY: "large"}}

    def test_survives_new_instance(self, prefs_path):
        JsonPreferenceStore("42", prefs_path).save_preferences("2021-10-19", "large")
        assert JsonPreferenceStore("42", prefs_path).load_preferences() == ("2021-10-19", "large")

    def test_users_are_isolated(self, prefs_path):
        JsonPreferenceStore("1", prefs_path).save_preferences("2021-01-01", "small")
        JsonPreferenceStore("2", prefs_path).save_preferences("2015-06-30", "medium")

        assert JsonPreferenceStore("1", prefs_path).load_preferences() == ("2021-01-01", "small")
        assert JsonPreferenceStore("2", prefs_path).load_preferences() == ("2015-06-30", "medium")

    def test_corrupt_file_reads_as_empty(self, prefs_path):
        prefs_path.write_text("{not json")
        assert JsonPreferenceStore("1", prefs_path).get(BIRTHDATE_KEY) is None

    def test_truncated_file_is_moved_aside_not_overwritten(self, prefs_path):
        """Other users' data stays recoverable after a cut-off write."""
        truncated = '{"1": {"pet-birthdate": "2020-01-01"}, "2": {"pet-birth'
        prefs_path.write_text(truncated)

        JsonPreferenceStore("3", prefs_path).set(BIRTHDATE_KEY, "2021-01-01")

        backups = list(prefs_path.parent.glob("pet_preferences.json.corrupt-*"))
        assert len(backups) == 1
        assert backups[0].read_text() == truncated
        assert json.loads(prefs_path.read_text()) == {"3": {BIRTHDATE_KEY: "2021-01-01"}}

    def test_non_object_json_is_treated_as_corrupt(self, prefs_path):
        prefs_path.write_text("[]")

        assert JsonPreferenceStore("1", prefs_path).get(BIRTHDATE_KEY) is None
        assert not prefs_path.exists()
        assert len(list(prefs_path.parent.glob("pet_preferences.json.corrupt-*"))) == 1

    def test_write_leaves_no_temp_files(self, prefs_path):
        store = JsonPreferenceStore("1", prefs_path)
        store.save_preferences("2021-01-01", "small")
        store.save_preferences("2022-02-02", "large")

        assert [p.name for p in prefs_path.parent.iterdir()] == ["pet_preferences.json"]

    def test_failed_write_keeps_previous_file(self, prefs_path, monkeypatch):
        store = JsonPreferenceStore("1", prefs_path)
        store.set(BIRTHDATE_KEY, "2021-01-01")

        def broken_dump(*args, **kwargs):
            raise OSError("disk full")

        monkeypatch.setattr(preferences.json, "dump", broken_dump)
        with pytest.raises(OSError):
            store.set(BIRTHDATE_KEY, "2022-02-02")
        monkeypatch.undo()

        assert store.get(BIRTHDATE_KEY) == "2021-01-01"
        assert [p.name for p in prefs_path.parent.iterdir()] == ["pet_preferences.json"]


class TestPreferencesFileSetting:
    def test_defaults_to_working_directory(self, monkeypatch):
        monkeypatch.delenv("PREFERENCES_FILE", raising=False)
        try:
            assert importlib.reload(preferences).PREFERENCES_FILE == "pet_preferences.json"
        finally:
            monkeypatch.undo()
            importlib.reload(preferences)

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("PREFERENCES_FILE", "/data/prefs.json")
        try:
            assert importlib.reload(preferences).PREFERENCES_FILE == "/data/prefs.json"
        finally:
            monkeypatch.undo()
            importlib.reload(preferences)
