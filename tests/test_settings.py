"""Tests for the JSON settings store."""

from __future__ import annotations

import json

from tinyshrink.settings import Settings


class TestSettings:
    def test_missing_file_gives_defaults(self, tmp_path):
        settings = Settings(tmp_path / "nope.json")
        assert settings.get("scan.max_size", 123) == 123
        assert settings.as_default_map() == {}

    def test_dot_notation(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({"scan": {"recursive": True, "max_size": 1000}}))

        settings = Settings(path)
        assert settings.get("scan.recursive") is True
        assert settings.get("scan.max_size") == 1000
        assert settings.get("scan.extensions") is None
        assert settings.get("scan.max_size.deeper", "x") == "x"

    def test_default_map(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text(json.dumps({
            "scan": {"extensions": [".png"], "recursive": True},
            "client": {"timeout": 5},
            "runner": {"abort_on_write_error": False, "report_failures": True},
            "unknown": {"key": 1},
        }))

        assert Settings(path).as_default_map() == {
            "extensions": [".png"],
            "recursive": True,
            "timeout": 5,
            "abort_on_write_error": False,
            "report_failures": True,
        }

    def test_corrupt_file_is_ignored(self, tmp_path, caplog):
        path = tmp_path / "settings.json"
        path.write_text("{not json")

        settings = Settings(path)
        assert settings.get("scan.recursive") is None
        assert "Could not load settings" in caplog.text

    def test_non_object_is_ignored(self, tmp_path):
        path = tmp_path / "settings.json"
        path.write_text("[1, 2]")
        assert Settings(path).as_default_map() == {}

    def test_default_location_follows_xdg(self, isolate_config):
        assert Settings().path == isolate_config / "tinyshrink" / "settings.json"
