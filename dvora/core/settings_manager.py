"""
Settings Manager
Handles persistent application settings in user home directory
"""
import copy
import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional
import threading

from ..sources.base import DEFAULT_TIMEOUT_SECONDS, DEFAULT_USER_AGENT
from ..sources.api_matcher import DEFAULT_RESULT_PATH


class SettingsManager:
    """Manages application settings with persistence"""

    DEFAULT_SETTINGS = {
        # HTTP
        "user_agent": DEFAULT_USER_AGENT,
        "request_timeout_seconds": DEFAULT_TIMEOUT_SECONDS,
        # 1 = check sites one at a time
        "max_concurrent_checks": 1,

        # Catalogs
        "catalog_dir": "",
        "categories": {
            "shows": {"file": "shows.txt", "required": True},
            "movies": {"file": "movies.txt", "required": True},
            "api sites": {"file": "api_sites.txt", "required": False},
        },
        "manual_checks_file": "manual_checks.txt",
        "manual_checks_enabled": True,

        # Matching
        "api_result_path": DEFAULT_RESULT_PATH,
        # Extra entries on top of the built-in lists of the HTML matcher
        "no_results_phrases": [],
        "noise_link_patterns": [],
    }

    def __init__(self, settings_dir: Optional[Path] = None):
        # Settings stored in user home
        if settings_dir is None:
            data_dir = str(os.environ.get("DVORA_DATA_DIR", "") or "").strip()
            settings_dir = Path(data_dir).expanduser() if data_dir else (Path.home() / ".dvora")
        self.settings_dir = Path(settings_dir)
        self.settings_dir.mkdir(parents=True, exist_ok=True)
        self.settings_file = self.settings_dir / "settings.json"

        self._lock = threading.RLock()
        self._settings: Dict[str, Any] = {}
        self._load()

    def _defaults(self) -> Dict[str, Any]:
        return copy.deepcopy(self.DEFAULT_SETTINGS)

    def _load(self):
        """Load settings from file"""
        with self._lock:
            if self.settings_file.exists():
                try:
                    with open(self.settings_file, 'r', encoding='utf-8') as f:
                        loaded = json.load(f)
                    if not isinstance(loaded, dict):
                        raise ValueError("settings file must contain a JSON object")
                    # Merge with defaults (adds new keys if they don't exist)
                    self._settings = {**self._defaults(), **loaded}
                except Exception as e:
                    print(f"Error loading settings: {e}")
                    self._settings = self._defaults()
            else:
                self._settings = self._defaults()
            self._normalize()

    def _normalize(self):
        """Clamp numeric values and repair malformed entries in place."""
        defaults = self.DEFAULT_SETTINGS
        try:
            timeout = float(self._settings.get("request_timeout_seconds"))
        except (TypeError, ValueError):
            timeout = defaults["request_timeout_seconds"]
        self._settings["request_timeout_seconds"] = timeout if timeout > 0 else defaults["request_timeout_seconds"]

        try:
            workers = int(self._settings.get("max_concurrent_checks"))
        except (TypeError, ValueError):
            workers = defaults["max_concurrent_checks"]
        self._settings["max_concurrent_checks"] = max(1, min(32, workers))

        if not str(self._settings.get("user_agent") or "").strip():
            self._settings["user_agent"] = defaults["user_agent"]

        categories = self._settings.get("categories")
        if not isinstance(categories, dict) or not categories:
            self._settings["categories"] = copy.deepcopy(defaults["categories"])

        for key in ("no_results_phrases", "noise_link_patterns"):
            self._settings[key] = self._normalize_str_list(self._settings.get(key), defaults[key])

    @staticmethod
    def _normalize_str_list(values: Any, fallback: List[str]) -> List[str]:
        if not isinstance(values, list):
            return list(fallback)
        out: List[str] = []
        for v in values:
            text = str(v or "").strip().lower()
            if text and text not in out:
                out.append(text)
        return out

    def _save(self):
        """Save settings to file"""
        with self._lock:
            try:
                with open(self.settings_file, 'w', encoding='utf-8') as f:
                    json.dump(self._settings, f, indent=2)
            except Exception as e:
                print(f"Error saving settings: {e}")

    def get(self, key: str, default=None) -> Any:
        """Get a setting value"""
        with self._lock:
            return copy.deepcopy(self._settings.get(key, default))

    def set(self, key: str, value: Any):
        """Set a setting value and save"""
        with self._lock:
            self._settings[str(key)] = value
            self._normalize()
            self._save()

    def update(self, settings_dict: Dict[str, Any]):
        """Update multiple settings at once"""
        with self._lock:
            self._settings.update(dict(settings_dict or {}))
            self._normalize()
            self._save()

    def get_all(self) -> Dict[str, Any]:
        """Get all settings"""
        with self._lock:
            return copy.deepcopy(self._settings)

    def reset(self):
        """Reset to default settings"""
        with self._lock:
            self._settings = self._defaults()
            self._save()
