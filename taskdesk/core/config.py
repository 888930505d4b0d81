"""
Configuration management for taskdesk

One JSON file per section under config/:
- settings.json: database path, timezone, date format
- llm.json: chat model, temperature, per-call timeout
- agents.json: routing thresholds and task defaults
- whatsapp.json: number normalization

Secrets (OPENAI_API_KEY, TWILIO_*, DATABASE_URL) are read from the
environment, never from these files.
"""

import copy
import json
from pathlib import Path
from typing import Dict, Any, Optional

PROJECT_ROOT = Path(__file__).parent.parent.parent

DEFAULTS: Dict[str, Dict[str, Any]] = {
    "settings": {
        "database_path": "data/database/taskdesk.db",
        "timezone": "Europe/Madrid",
        "date_format": "%Y-%m-%d",
    },
    "llm": {
        "model": "gpt-4o",
        "temperature": 0.2,
        "timeout_seconds": 30,
    },
    "agents": {
        # keyword confidence above this skips the LLM classifier
        "keyword_threshold": 0.8,
        # classifier confidence below this triggers the collaborative fallback
        "dispatch_threshold": 0.7,
        # best collaborative answer below this asks the user to clarify
        "collaborative_floor": 0.4,
        "history_window": 5,
        "default_category_id": 1,
        "default_priority": "medium",
    },
    "whatsapp": {
        "default_country_code": "+34",
    },
}


class Config:
    """Section-based settings backed by JSON files"""

    SECTIONS = tuple(DEFAULTS)

    def __init__(self, config_dir: Optional[Path] = None):
        """
        Load every section, writing defaults for missing files.

        Args:
            config_dir: Directory holding the JSON files (defaults to <repo>/config)
        """
        self.config_dir = Path(config_dir) if config_dir is not None else PROJECT_ROOT / "config"
        self.config_dir.mkdir(parents=True, exist_ok=True)

        self._sections: Dict[str, Dict[str, Any]] = {
            section: self._load(section) for section in self.SECTIONS
        }

    def _path(self, section: str) -> Path:
        return self.config_dir / f"{section}.json"

    def _load(self, section: str) -> Dict[str, Any]:
        defaults = copy.deepcopy(DEFAULTS[section])
        path = self._path(section)
        if not path.exists():
            self._write(section, defaults)
            return defaults

        with open(path, 'r') as f:
            stored = json.load(f)
        # keys added since the file was written keep their defaults
        return {**defaults, **stored}

    def _write(self, section: str, values: Dict[str, Any]) -> None:
        with open(self._path(section), 'w') as f:
            json.dump(values, f, indent=2)

    def get(self, key: str, section: str = "settings", default: Any = None) -> Any:
        """
        Get a configuration value

        Args:
            key: Configuration key
            section: One of SECTIONS; unknown sections return default
            default: Value returned when the key is absent
        """
        return self._sections.get(section, {}).get(key, default)

    def set(self, key: str, value: Any, section: str = "settings") -> None:
        """Set a value and persist its section. Unknown sections are ignored."""
        if section not in self._sections:
            return
        self._sections[section][key] = value
        self._write(section, self._sections[section])

    def get_database_path(self) -> Path:
        """SQLite file location, resolved against the project root"""
        return PROJECT_ROOT / self._sections["settings"]["database_path"]
