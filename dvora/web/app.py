"""FastAPI app exposing Dvora site checks for web clients."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import Body, FastAPI, HTTPException, Query
from pydantic import BaseModel

from ..core.event_bus import Events
from ..sources.templating import expand_manual_urls
from .runtime import DvoraRuntime, build_runtime


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class SettingsUpdateRequest(BaseModel):
    user_agent: Optional[str] = None
    request_timeout_seconds: Optional[float] = None
    max_concurrent_checks: Optional[int] = None
    catalog_dir: Optional[str] = None
    manual_checks_file: Optional[str] = None
    manual_checks_enabled: Optional[bool] = None
    api_result_path: Optional[str] = None
    no_results_phrases: Optional[List[str]] = None
    noise_link_patterns: Optional[List[str]] = None


def create_app(runtime: Optional[DvoraRuntime] = None) -> FastAPI:
    runtime = runtime or build_runtime()

    app = FastAPI(title="Dvora API", version="1.0.0")

    @app.get("/health")
    def health() -> Dict:
        driver = runtime.driver
        return {
            "ok": True,
            "time": _utc_now_iso(),
            "maxConcurrentChecks": driver.max_workers,
            "matchers": [driver.api_matcher.healthcheck(), driver.html_matcher.healthcheck()],
        }

    @app.get("/api/categories")
    def list_categories() -> Dict:
        return {
            "catalogDir": str(runtime.catalog.catalog_dir),
            "categories": [
                {
                    "name": spec.name,
                    "file": str(spec.path),
                    "required": spec.required,
                    "available": spec.exists,
                }
                for spec in runtime.catalog.categories().values()
            ],
        }

    @app.get("/api/check")
    def check(
        q: str = Query(..., min_length=1),
        category: str = Query(..., min_length=1),
    ) -> Dict[str, Any]:
        term = q.strip()
        if not term:
            raise HTTPException(status_code=400, detail="Search term must not be empty.")
        if category not in runtime.catalog.categories():
            raise HTTPException(status_code=404, detail=f"Unknown category '{category}'.")
        report = runtime.driver.run_category(runtime.catalog, category, term)
        if report.config_error:
            raise HTTPException(status_code=409, detail=report.config_error)
        payload = report.to_dict()
        payload["checkedAt"] = _utc_now_iso()
        return payload

    @app.get("/api/manual-checks")
    def manual_checks(q: str = Query(..., min_length=1)) -> Dict[str, Any]:
        term = q.strip()
        if not term:
            raise HTTPException(status_code=400, detail="Search term must not be empty.")
        if not runtime.settings.get("manual_checks_enabled", True):
            return {"urls": [], "count": 0}
        urls = expand_manual_urls(runtime.catalog.load_manual_checks(), term)
        return {"urls": urls, "count": len(urls)}

    @app.get("/api/settings")
    def get_settings() -> Dict[str, Any]:
        return runtime.settings.get_all()

    @app.patch("/api/settings")
    def patch_settings(body: SettingsUpdateRequest = Body(...)) -> Dict[str, Any]:
        changes = body.model_dump(exclude_none=True)
        if changes:
            runtime.settings.update(changes)
            runtime.rebuild_driver()
            runtime.event_bus.emit(Events.SETTINGS_CHANGED, sorted(changes.keys()))
        return runtime.settings.get_all()

    @app.post("/api/settings/reset")
    def reset_settings() -> Dict[str, Any]:
        runtime.settings.reset()
        runtime.rebuild_driver()
        runtime.event_bus.emit(Events.SETTINGS_CHANGED, ["*"])
        return runtime.settings.get_all()

    return app


app = create_app()
