"""Tests for persistence: the JSON store, the key layout, settings and the data model.

Covers: wt.core.store, wt.core.config, wt.core.settings, wt.core.models, wt.util.misc, wt.common.setup
"""

import json
import os
import shutil
import tempfile
import unittest
from datetime import datetime, timedelta, timezone
from pathlib import Path

os.environ.setdefault("WORKTIMER_HOME", tempfile.mkdtemp(prefix="worktimer-tests-"))


class _StoreTestCase(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        self.path = Path(self.tmpdir) / "store.json"

    def tearDown(self):
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    def open_store(self):
        from wt.core.store import JsonStore
        return JsonStore(self.path)


# ──────────────────────────────────────────────────────────────────────────
# store.py tests
# ──────────────────────────────────────────────────────────────────────────

class TestJsonStore(_StoreTestCase):

    def test_missing_file_is_empty(self):
        store = self.open_store()
        self.assertEqual(store.keys(), [])
        self.assertEqual(store.get("anything", "fallback"), "fallback")

    def test_set_writes_through(self):
        store = self.open_store()
        store.set("a", {"x": 1})
        with open(self.path, encoding="utf-8") as f:
            self.assertEqual(json.load(f), {"a": {"x": 1}})
        self.assertEqual(self.open_store().get("a"), {"x": 1})

    def test_remove(self):
        store = self.open_store()
        store.set("a", 1)
        store.set("b", 2)
        store.remove("a")
        store.remove("never-there")
        self.assertNotIn("a", self.open_store())
        self.assertIn("b", self.open_store())

    def test_corrupt_file_treated_as_empty(self):
        self.path.write_text("{invalid json!!", encoding="utf-8")
        store = self.open_store()
        self.assertEqual(store.keys(), [])
        store.set("a", 1)
        self.assertEqual(self.open_store().get("a"), 1)

    def test_non_object_treated_as_empty(self):
        self.path.write_text("[1, 2, 3]", encoding="utf-8")
        self.assertEqual(self.open_store().keys(), [])

    def test_write_leaves_no_temp_file(self):
        store = self.open_store()
        store.set("a", 1)
        self.assertEqual(sorted(p.name for p in Path(self.tmpdir).iterdir()), ["store.json"])

    def test_failed_write_keeps_previous_file(self):
        from unittest.mock import patch
        store = self.open_store()
        store.set("owner-identity", "abc123")
        with patch("wt.core.store.json.dump", side_effect=OSError("disk full")):
            with self.assertRaises(OSError):
                store.set("entries:abc123", [1, 2, 3])
        self.assertFalse(self.path.with_name("store.json.tmp").exists())
        reopened = self.open_store()
        self.assertEqual(reopened.get("owner-identity"), "abc123")
        self.assertNotIn("entries:abc123", reopened)


# ──────────────────────────────────────────────────────────────────────────
# config.py tests
# ──────────────────────────────────────────────────────────────────────────

class TestConfig(_StoreTestCase):

    def test_owner_id_created_once(self):
        from wt.core import config
        store = self.open_store()
        owner = config.get_owner_id(store)
        self.assertTrue(owner)
        self.assertEqual(config.get_owner_id(store), owner)
        self.assertEqual(config.get_owner_id(self.open_store()), owner)

    def test_key_layout(self):
        from wt.core import config
        self.assertEqual(config.entries_key("abc"), "entries:abc")
        self.assertEqual(config.settings_key("abc"), "settings:abc")

    def test_entries_roundtrip(self):
        from wt.core import config
        from wt.core.models import EntryType, TimeEntry
        start = datetime(2026, 10, 19, 9, 0).astimezone()
        entries = [
            TimeEntry(id=1, start_time=start, end_time=start + timedelta(minutes=25), duration=1500,
                      notes="essay", user_id="me"),
            TimeEntry(id=2, start_time=start + timedelta(minutes=25), end_time=start + timedelta(minutes=30),
                      duration=300, type=EntryType.BREAK, user_id="me"),
        ]
        config.save_entries(self.open_store(), "me", entries)
        self.assertEqual(config.load_entries(self.open_store(), "me"), entries)

    def test_missing_entries_default_empty(self):
        from wt.core import config
        self.assertEqual(config.load_entries(self.open_store(), "me"), [])

    def test_non_list_entries_ignored(self):
        from wt.core import config
        store = self.open_store()
        store.set(config.entries_key("me"), {"oops": True})
        self.assertEqual(config.load_entries(store, "me"), [])

    def test_bad_records_skipped_individually(self):
        from wt.core import config
        store = self.open_store()
        store.set(config.entries_key("me"), [
            {"id": 1, "startTime": "2026-10-19T09:00:00+00:00", "endTime": None, "duration": 0,
             "type": "work", "notes": ""},
            {"id": 2, "startTime": "not a date"},
            {"id": 3, "startTime": "2026-10-19T10:00:00+00:00", "type": "nap"},
            "garbage",
        ])
        loaded = config.load_entries(store, "me")
        self.assertEqual([e.id for e in loaded], [1])

    def test_clear_entries_keeps_settings(self):
        from wt.core import config
        from wt.core.models import AppSettings, TimeEntry
        store = self.open_store()
        config.save_settings(store, "me", AppSettings(work_duration=999, user_id="me"))
        config.save_entries(store, "me", [TimeEntry(id=1, start_time=datetime.now().astimezone())])
        config.clear_entries(store, "me")
        self.assertEqual(config.load_entries(store, "me"), [])
        self.assertEqual(config.load_settings(store, "me").work_duration, 999)

    def test_fresh_settings_seeded_and_persisted(self):
        from wt.core import config
        store = self.open_store()
        settings = config.load_settings(store, "me", prefers_dark=lambda: True)
        self.assertEqual(settings.work_duration, 1500)
        self.assertEqual(settings.break_duration, 300)
        self.assertFalse(settings.auto_start_breaks)
        self.assertFalse(settings.auto_start_work)
        self.assertTrue(settings.notifications)
        self.assertTrue(settings.dark_mode)
        self.assertEqual(settings.user_id, "me")
        self.assertIn(config.settings_key("me"), self.open_store())

    def test_stored_settings_ignore_system_preference(self):
        from wt.core import config
        from wt.core.models import AppSettings
        store = self.open_store()
        config.save_settings(store, "me", AppSettings(dark_mode=False, user_id="me"))
        self.assertFalse(config.load_settings(store, "me", prefers_dark=lambda: True).dark_mode)

    def test_settings_fill_missing_and_invalid(self):
        from wt.core import config
        store = self.open_store()
        store.set(config.settings_key("me"), {
            "workDuration": 0,
            "breakDuration": "ten",
            "autoStartBreaks": True,
            "notifications": "yes",
        })
        settings = config.load_settings(store, "me")
        self.assertEqual(settings.work_duration, 1500)
        self.assertEqual(settings.break_duration, 300)
        self.assertTrue(settings.auto_start_breaks)
        self.assertTrue(settings.notifications)
        self.assertEqual(settings.user_id, "me")


# ──────────────────────────────────────────────────────────────────────────
# settings.py tests
# ──────────────────────────────────────────────────────────────────────────

class TestSettingsStore(_StoreTestCase):

    def test_update_replaces_and_restamps(self):
        from wt.core import config
        from wt.core.models import AppSettings
        from wt.core.settings import SettingsStore
        store = self.open_store()
        settings_store = SettingsStore(store, "me")
        updated = settings_store.update(AppSettings(work_duration=60, auto_start_work=True, user_id="other"))
        self.assertEqual(updated.user_id, "me")
        self.assertTrue(settings_store.settings.auto_start_work)
        self.assertEqual(config.load_settings(self.open_store(), "me").work_duration, 60)

    def test_update_does_not_alias_argument(self):
        from wt.core.models import AppSettings
        from wt.core.settings import SettingsStore
        settings_store = SettingsStore(self.open_store(), "me")
        new = AppSettings(work_duration=60)
        settings_store.update(new)
        self.assertIsNone(new.user_id)

    def test_toggle_dark_mode(self):
        from wt.core.settings import SettingsStore
        settings_store = SettingsStore(self.open_store(), "me", prefers_dark=lambda: False)
        settings_store.toggle_dark_mode()
        self.assertTrue(SettingsStore(self.open_store(), "me").settings.dark_mode)


# ──────────────────────────────────────────────────────────────────────────
# models.py tests
# ──────────────────────────────────────────────────────────────────────────

class TestModels(unittest.TestCase):

    def test_entry_to_dict_uses_camel_case(self):
        from wt.core.models import TimeEntry
        start = datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)
        raw = TimeEntry(id=5, start_time=start, duration=10, user_id="me").to_dict()
        self.assertEqual(raw["startTime"], "2026-10-19T09:00:00+00:00")
        self.assertIsNone(raw["endTime"])
        self.assertEqual(raw["type"], "work")
        self.assertEqual(raw["userId"], "me")

    def test_entry_from_dict_accepts_zulu(self):
        from wt.core.models import TimeEntry
        entry = TimeEntry.from_dict({"id": 1, "startTime": "2026-10-19T09:00:00.000Z", "type": "break"})
        self.assertEqual(entry.start_time, datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc))
        self.assertIsNotNone(entry.start_time.tzinfo)
        self.assertTrue(entry.is_active)
        self.assertEqual(entry.notes, "")

    def test_entry_from_dict_rejects_missing_fields(self):
        from wt.core.models import TimeEntry
        with self.assertRaises(ValueError):
            TimeEntry.from_dict({"startTime": "2026-10-19T09:00:00"})

    def test_entry_types(self):
        from wt.core.models import EntryType
        self.assertFalse(EntryType.WORK.is_break)
        self.assertTrue(EntryType.BREAK.is_break)
        self.assertTrue(EntryType.SHORT_BREAK.is_break)
        self.assertTrue(EntryType.LONG_BREAK.is_break)
        self.assertIs(EntryType("shortBreak"), EntryType.SHORT_BREAK)

    def test_settings_roundtrip(self):
        from wt.core.models import AppSettings
        settings = AppSettings(work_duration=3000, break_duration=600, auto_start_breaks=True,
                               notifications=False, dark_mode=True, user_id="me")
        loaded, defaulted = AppSettings.from_dict(settings.to_dict())
        self.assertEqual(loaded, settings)
        self.assertEqual(defaulted, [])

    def test_settings_bool_not_accepted_as_duration(self):
        from wt.core.models import AppSettings
        loaded, defaulted = AppSettings.from_dict({"workDuration": True})
        self.assertEqual(loaded.work_duration, 1500)
        self.assertIn("workDuration", defaulted)

    def test_target_duration(self):
        from wt.core.models import AppSettings, EntryType
        settings = AppSettings(work_duration=100, break_duration=20)
        self.assertEqual(settings.target_duration(EntryType.WORK), 100)
        self.assertEqual(settings.target_duration(EntryType.BREAK), 20)
        self.assertEqual(settings.target_duration(EntryType.LONG_BREAK), 20)


# ──────────────────────────────────────────────────────────────────────────
# util / setup tests
# ──────────────────────────────────────────────────────────────────────────

class TestUtil(unittest.TestCase):

    def test_format_time(self):
        from wt.util.misc import format_time
        self.assertEqual(format_time(0), "00:00:00")
        self.assertEqual(format_time(3725), "01:02:05")
        self.assertEqual(format_time(90000), "25:00:00")

    def test_minutes_to_seconds(self):
        from wt.util.misc import minutes_to_seconds
        self.assertEqual(minutes_to_seconds("25"), 1500)
        self.assertEqual(minutes_to_seconds(5), 300)
        self.assertEqual(minutes_to_seconds("abc"), 0)
        self.assertEqual(minutes_to_seconds(None), 0)

    def test_seconds_to_minutes(self):
        from wt.util.misc import seconds_to_minutes
        self.assertEqual(seconds_to_minutes(1500), 25)
        self.assertEqual(seconds_to_minutes(59), 0)
        self.assertEqual(seconds_to_minutes("x"), 0)

    def test_now_iso_is_aware(self):
        from wt.util.misc import now_iso
        self.assertIsNotNone(datetime.fromisoformat(now_iso()).tzinfo)


class TestLogger(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()

    def tearDown(self):
        import logging
        logger = logging.getLogger("worktimer-test")
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    def test_handlers_not_stacked(self):
        from wt.common.logger import get_logger
        first = get_logger("worktimer-test", log_dir=Path(self.tmpdir), console=True)
        count = len(first.handlers)
        again = get_logger("worktimer-test", log_dir=Path(self.tmpdir), console=True)
        self.assertIs(first, again)
        self.assertEqual(len(again.handlers), count)
        self.assertEqual(count, 3)

    def test_level_from_env(self):
        import logging
        from unittest.mock import patch
        from wt.common.logger import level_from_env
        with patch.dict(os.environ, {"WORKTIMER_LOG_LEVEL": "warning"}):
            self.assertEqual(level_from_env(), logging.WARNING)
        with patch.dict(os.environ, {"WORKTIMER_LOG_LEVEL": "chatty"}):
            self.assertEqual(level_from_env(logging.INFO), logging.INFO)


class TestProjectPaths(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    def test_build_creates_folders(self):
        from wt.common.setup import ProjectPaths
        paths = ProjectPaths.build(Path(self.tmpdir) / "root")
        for folder in (paths.data, paths.logs, paths.current, paths.exports):
            self.assertTrue(folder.is_dir())

    def test_env_override(self):
        from unittest.mock import patch
        from wt.common.setup import resolve_data_root
        with patch.dict(os.environ, {"WORKTIMER_HOME": self.tmpdir}):
            self.assertEqual(resolve_data_root(), Path(self.tmpdir))

    def test_ensure_directory_must_exist(self):
        from wt.common.setup import ensure_directory
        with self.assertRaises(FileNotFoundError):
            ensure_directory(Path(self.tmpdir) / "nope", must_exist=True)


if __name__ == "__main__":
    unittest.main()
