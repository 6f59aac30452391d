"""
Matcher SDK
Base interface for the per-site presence matchers.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import requests

from ..models.site_template import SiteTemplate
from ..models.verdict import SiteVerdict

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)
DEFAULT_TIMEOUT_SECONDS = 10.0


class ResponseParseError(ValueError):
    """Fetched body could not be parsed (malformed HTML or JSON)"""


class BaseMatcher(ABC):
    """
    Stable matcher contract.

    A matcher holds only read-only configuration (user agent, timeout), so
    one instance can be shared by concurrent checks.
    """
    api_version = 1
    name = "UnnamedMatcher"

    def __init__(self, user_agent: str = DEFAULT_USER_AGENT, timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS):
        self.user_agent = user_agent or DEFAULT_USER_AGENT
        self.timeout_seconds = float(timeout_seconds or DEFAULT_TIMEOUT_SECONDS)

    @abstractmethod
    def check(self, template: SiteTemplate, term: str) -> SiteVerdict:
        """Resolve one template against one search term."""
        raise NotImplementedError

    def _request(self, url: str, headers: Optional[Dict[str, str]] = None) -> requests.Response:
        """Single GET; any non-2xx status is raised as requests.HTTPError."""
        request_headers = {"User-Agent": self.user_agent}
        request_headers.update(headers or {})
        response = requests.get(url, headers=request_headers, timeout=self.timeout_seconds)
        if not 200 <= int(response.status_code) < 300:
            reason = str(getattr(response, "reason", "") or "").strip()
            status = f"{response.status_code} {reason}".strip()
            raise requests.HTTPError(f"HTTP request failed with status: {status}", response=response)
        return response

    def healthcheck(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "api_version": self.api_version,
            "user_agent": self.user_agent,
            "timeout_seconds": self.timeout_seconds,
        }
