"""
Site Catalog
Resolves category names to template files and reads their lines
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional


class CatalogError(Exception):
    """A required catalog source is missing or unreadable"""


@dataclass(frozen=True)
class CategorySpec:
    name: str
    path: Path
    required: bool = True

    @property
    def exists(self) -> bool:
        return self.path.is_file()


class SiteCatalog:
    """
    Category → template-file mapping rooted at one catalog directory.

    Args:
        settings: SettingsManager-like object exposing get(key, default)
        catalog_dir: overrides the "catalog_dir" setting when given
    """

    def __init__(self, settings, catalog_dir: Optional[str] = None):
        self.settings = settings
        self._catalog_dir_override = catalog_dir

    @property
    def catalog_dir(self) -> Path:
        raw = self._catalog_dir_override
        if raw is None:
            raw = self.settings.get("catalog_dir", "")
        text = str(raw or "").strip()
        return Path(text).expanduser() if text else Path.cwd()

    def categories(self) -> Dict[str, CategorySpec]:
        out: Dict[str, CategorySpec] = {}
        raw = self.settings.get("categories", {}) or {}
        if not isinstance(raw, dict):
            return out
        for name, entry in raw.items():
            if isinstance(entry, str):
                entry = {"file": entry}
            if not isinstance(entry, dict):
                continue
            filename = str(entry.get("file") or "").strip()
            if not filename:
                continue
            out[str(name)] = CategorySpec(
                name=str(name),
                path=self._resolve(filename),
                required=bool(entry.get("required", True)),
            )
        return out

    def category(self, name: str) -> CategorySpec:
        spec = self.categories().get(name)
        if spec is None:
            raise CatalogError(f"Unknown category '{name}'.")
        return spec

    def load_lines(self, name: str) -> List[str]:
        """
        Raw lines of one category.

        Missing optional categories yield []; missing required ones raise
        CatalogError.
        """
        spec = self.category(name)
        if not spec.exists:
            if spec.required:
                raise CatalogError(f"File {spec.path} not found!")
            return []
        return self._read(spec.path)

    def load_manual_checks(self) -> List[str]:
        filename = str(self.settings.get("manual_checks_file", "") or "").strip()
        if not filename:
            return []
        path = self._resolve(filename)
        if not path.is_file():
            print(f"Warning: Could not open {path}: file not found")
            return []
        try:
            return self._read(path)
        except CatalogError as e:
            print(f"Warning: {e}")
            return []

    def _resolve(self, filename: str) -> Path:
        path = Path(filename).expanduser()
        if path.is_absolute():
            return path
        return self.catalog_dir / path

    @staticmethod
    def _read(path: Path) -> List[str]:
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return f.read().splitlines()
        except OSError as e:
            raise CatalogError(f"Error reading from file {path}: {e}") from e
