"""
API Matcher

Presence check against "ww<N>.<domain>/searching?q=" JSON search endpoints.

Notes:
- Term is always plus-encoded for the API, whatever the line directive says.
- Matching is plain case-insensitive containment against record titles.
"""

from __future__ import annotations

from typing import Any, List

import requests

from .base import BaseMatcher, ResponseParseError
from .classifier import API_QUERY_SEGMENT, ClassificationError, api_base
from ..models.site_template import SiteTemplate
from ..models.verdict import SiteVerdict

API_PAGINATION = "&limit=40&offset=0"
DEFAULT_RESULT_PATH = "/search?keyword="


class ApiMatcher(BaseMatcher):
    name = "api"

    def __init__(self, user_agent: str = "", timeout_seconds: float = 10.0, result_path: str = DEFAULT_RESULT_PATH):
        super().__init__(user_agent=user_agent, timeout_seconds=timeout_seconds)
        self.result_path = result_path or DEFAULT_RESULT_PATH

    @staticmethod
    def build_request_url(base: str, term: str) -> str:
        return f"{base}{API_QUERY_SEGMENT}{term.replace(' ', '+')}{API_PAGINATION}"

    def build_result_url(self, base: str, term: str) -> str:
        """Human-facing search page for manual follow-up (not re-validated)."""
        return f"{base}{self.result_path}{term.replace(' ', '+')}"

    def check(self, template: SiteTemplate, term: str) -> SiteVerdict:
        try:
            base = api_base(template.template)
        except ClassificationError as exc:
            return SiteVerdict.failed(template.expand(term), str(exc), template=template.raw)

        url = self.build_request_url(base, term)
        try:
            response = self._request(url, headers={"Accept": "application/json"})
            titles = self._parse_titles(response)
        except requests.RequestException as exc:
            return SiteVerdict.failed(url, f"failed to fetch URL: {exc}", template=template.raw)
        except ResponseParseError as exc:
            return SiteVerdict.failed(url, str(exc), template=template.raw)

        if self.titles_match(titles, term):
            return SiteVerdict.found(url, result_url=self.build_result_url(base, term), template=template.raw)
        return SiteVerdict.not_found(url, template=template.raw)

    @staticmethod
    def titles_match(titles: List[str], term: str) -> bool:
        needle = (term or "").lower()
        for title in titles:
            if needle in title.lower():
                return True
        return False

    def _parse_titles(self, response) -> List[str]:
        try:
            payload = response.json()
        except ValueError as exc:
            raise ResponseParseError(f"failed to parse JSON response: {exc}") from exc
        return self.extract_titles(payload)

    @staticmethod
    def extract_titles(payload: Any) -> List[str]:
        """
        Accepts {"data": [{"t": ...}], "meta": {...}} or a bare record list.
        Records use "t" for the display title; "title" is accepted as well.
        """
        if isinstance(payload, dict):
            records = payload.get("data")
            if records is None:
                records = []
        else:
            records = payload
        if not isinstance(records, list):
            raise ResponseParseError("failed to parse JSON response: expected a list of result records")

        titles: List[str] = []
        for row in records:
            if not isinstance(row, dict):
                continue
            title = row.get("t")
            if title is None:
                title = row.get("title")
            if isinstance(title, str) and title:
                titles.append(title)
        return titles
