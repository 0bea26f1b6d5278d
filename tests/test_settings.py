import json
import tempfile
import unittest
from pathlib import Path

from s3_explorer.settings import AppSettings, SettingsStorage


class SettingsStorageTests(unittest.TestCase):
    def test_load_returns_defaults_when_missing(self):
        with tempfile.TemporaryDirectory() as tmp:
            storage = SettingsStorage(Path(tmp) / "settings.json")

            self.assertEqual(AppSettings(), storage.load())

    def test_load_reads_saved_values(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "settings.json"
            payload = {"max_attempts": 7, "fetch_acl": False, "page_size": 250, "region_name": "eu-west-1"}
            path.write_text(json.dumps(payload), encoding="utf-8")

            settings = SettingsStorage(path).load()

            self.assertEqual(AppSettings(max_attempts=7, fetch_acl=False, page_size=250, region_name="eu-west-1"), settings)

    def test_load_sanitizes_invalid_values(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "settings.json"
            payload = {"max_attempts": "nope", "fetch_acl": "yes", "page_size": 50000, "region_name": 12}
            path.write_text(json.dumps(payload), encoding="utf-8")

            settings = SettingsStorage(path).load()

            self.assertEqual(AppSettings.max_attempts, settings.max_attempts)
            self.assertEqual(AppSettings.fetch_acl, settings.fetch_acl)
            self.assertEqual(1000, settings.page_size)
            self.assertEqual("", settings.region_name)

    def test_load_ignores_corrupt_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "settings.json"
            path.write_text("{not json", encoding="utf-8")

            self.assertEqual(AppSettings(), SettingsStorage(path).load())

    def test_save_clamps_values(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "nested" / "settings.json"
            storage = SettingsStorage(path)

            storage.save(AppSettings(max_attempts=0, page_size=-5, fetch_acl=False))

            saved = json.loads(path.read_text(encoding="utf-8"))
            self.assertEqual(1, saved["max_attempts"])
            self.assertEqual(1, saved["page_size"])
            self.assertFalse(saved["fetch_acl"])


if __name__ == "__main__":
    unittest.main()
