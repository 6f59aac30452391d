"""Runtime bootstrap for the Dvora web API."""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
from typing import Optional

from ..core.catalog import SiteCatalog
from ..core.event_bus import EventBus
from ..core.resolver import ResolutionDriver
from ..core.settings_manager import SettingsManager


@dataclass
class DvoraRuntime:
    """Shared service graph used by web endpoints and the console."""

    settings: SettingsManager
    event_bus: EventBus
    catalog: SiteCatalog
    driver: ResolutionDriver

    def rebuild_driver(self) -> None:
        """Pick up changed HTTP/matching settings."""
        self.driver = ResolutionDriver.from_settings(self.settings, self.event_bus)


def build_runtime(
    settings_dir: Optional[Path] = None,
    catalog_dir: Optional[str] = None,
    max_workers: Optional[int] = None,
) -> DvoraRuntime:
    """Create and wire core services."""

    if settings_dir is None:
        data_dir = str(os.environ.get("DVORA_DATA_DIR", "") or "").strip()
        settings_dir = Path(data_dir).expanduser() if data_dir else None
    settings = SettingsManager(settings_dir=settings_dir)
    event_bus = EventBus()
    catalog = SiteCatalog(settings, catalog_dir=catalog_dir)
    driver = ResolutionDriver.from_settings(settings, event_bus, max_workers=max_workers)
    return DvoraRuntime(
        settings=settings,
        event_bus=event_bus,
        catalog=catalog,
        driver=driver,
    )
