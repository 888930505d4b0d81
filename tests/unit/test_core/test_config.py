"""
Unit tests for the Config manager.
"""

import json
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent.parent.parent))

from taskdesk.core.config import Config


class TestConfigDefaults:

    def test_creates_files_with_defaults(self, tmp_path):
        config = Config(tmp_path)

        for name in ("settings.json", "llm.json", "agents.json", "whatsapp.json"):
            assert (tmp_path / name).exists()
        assert config.get("dispatch_threshold", "agents") == 0.7
        assert config.get("collaborative_floor", "agents") == 0.4
        assert config.get("default_country_code", "whatsapp") == "+34"
        assert config.get("model", "llm") == "gpt-4o"

    def test_missing_key_and_section(self, tmp_path):
        config = Config(tmp_path)
        assert config.get("nope", default="x") == "x"
        assert config.get("model", section="bogus", default=None) is None

    def test_partial_file_falls_back_to_defaults(self, tmp_path):
        (tmp_path / "agents.json").write_text(json.dumps({"dispatch_threshold": 0.9}))

        config = Config(tmp_path)

        assert config.get("dispatch_threshold", "agents") == 0.9
        assert config.get("history_window", "agents") == 5


class TestConfigSet:

    def test_set_persists(self, tmp_path):
        Config(tmp_path).set("temperature", 0.5, section="llm")

        assert Config(tmp_path).get("temperature", "llm") == 0.5
        assert json.loads((tmp_path / "llm.json").read_text())["temperature"] == 0.5

    def test_set_unknown_section_is_ignored(self, tmp_path):
        config = Config(tmp_path)
        config.set("x", 1, section="bogus")
        assert not (tmp_path / "bogus.json").exists()

    def test_database_path_is_absolute(self, tmp_path):
        config = Config(tmp_path)
        config.set("database_path", "data/test.db")
        path = config.get_database_path()
        assert path.is_absolute()
        assert path.name == "test.db"
