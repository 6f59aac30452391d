"""
HTML Matcher
Link-inspection presence check for conventional HTML search pages
"""
from functools import lru_cache
from typing import Iterable, List, Optional, Pattern, Tuple
import re

import requests
from bs4 import BeautifulSoup
from bs4.element import Comment, Doctype

from .base import BaseMatcher, ResponseParseError
from ..models.site_template import SiteTemplate
from ..models.verdict import SiteVerdict, VerdictStatus

# Attributes that carry a link target, on any element.
LINK_ATTRIBUTES = ("href", "data-href", "data-url")

DEFAULT_NOISE_LINK_PATTERNS = [
    "addtoany.com",
    "facebook.com",
    "twitter.com",
    "reddit.com",
    "pinterest.com",
    "whatsapp.com",
    "t.me",
    "mailto:",
    "/login",
    "/register",
    "/signup",
]

# Lowercase; compared against lowercased page text.
DEFAULT_NO_RESULTS_PHRASES = [
    "no result found.",
    "no result found",
    "no results found",
    "no results",
    "nothing found",
    "not found",
    "no matches",
    "0 results",
    "could not find",
    "couldn't find",
    "search returned no results",
    "sorry, no results",
    "no items found",
    "your search did not match",
    "did not match any",
    "no search results",
]

# Inter-word gap per tier, tightest first.
_TIGHT_GAP = r"[\s\-\+\.]+"
_PATH_GAP = r"[\s\-\+\.\/]+"
_LOOSE_GAP = r"[\s\-\+\.\/\d]+"


@lru_cache(maxsize=64)
def build_match_patterns(term: str) -> Tuple[Pattern, ...]:
    """
    Compile the matching tiers for a search term, tightest first.

    1. exact word boundaries, whitespace/-/+/. gaps
    2. exact word boundaries, gaps may also contain "/"
    3. anything before/after, gaps may also contain "/" and digits
    """
    words = (term or "").lower().split()
    if not words:
        return ()
    escaped = [re.escape(w) for w in words]
    return (
        re.compile(r"(?<![a-z0-9])" + _TIGHT_GAP.join(escaped) + r"(?![a-z0-9])"),
        re.compile(r"(?<![a-z0-9])" + _PATH_GAP.join(escaped) + r"(?![a-z0-9])"),
        re.compile(_LOOSE_GAP.join(escaped)),
    )


def extract_all_links(soup: BeautifulSoup) -> List[str]:
    """Every link-bearing attribute value in document order (duplicates kept)."""
    links = []
    for node in soup.find_all(True):
        for attr in LINK_ATTRIBUTES:
            value = node.get(attr)
            if isinstance(value, list):
                value = " ".join(value)
            if value:
                links.append(value)
    return links


def is_noise_link(link_lower: str, noise_patterns: Iterable[str]) -> bool:
    return any(token in link_lower for token in noise_patterns)


def page_text(soup: BeautifulSoup) -> str:
    parts = []
    for node in soup.find_all(string=True):
        if isinstance(node, (Comment, Doctype)):
            continue
        parts.append(str(node))
    return " ".join(parts).lower()


def has_no_results(soup: BeautifulSoup, phrases: Iterable[str]) -> bool:
    """True when the page text carries an explicit "no results" message."""
    content = page_text(soup)
    return any(phrase in content for phrase in phrases)


def _merge_lowercase(defaults: Iterable[str], extra: Optional[Iterable[str]]) -> Tuple[str, ...]:
    out: List[str] = []
    for item in list(defaults) + list(extra or []):
        text = str(item or "").strip().lower()
        if text and text not in out:
            out.append(text)
    return tuple(out)


class HtmlMatcher(BaseMatcher):
    """Fetch one search page and look for links naming the title"""

    name = "html"

    def __init__(
        self,
        user_agent: str = "",
        timeout_seconds: float = 10.0,
        noise_patterns: Optional[List[str]] = None,
        no_results_phrases: Optional[List[str]] = None,
    ):
        super().__init__(user_agent=user_agent, timeout_seconds=timeout_seconds)
        # Configured entries extend the built-in lists; they never replace them.
        self.noise_patterns = _merge_lowercase(DEFAULT_NOISE_LINK_PATTERNS, noise_patterns)
        self.no_results_phrases = _merge_lowercase(DEFAULT_NO_RESULTS_PHRASES, no_results_phrases)

    def check(self, template: SiteTemplate, term: str) -> SiteVerdict:
        url = template.expand(term)
        try:
            response = self._request(url)
            status, detail = self.evaluate(response.content, term)
        except requests.RequestException as exc:
            return SiteVerdict.failed(url, f"failed to fetch URL: {exc}", template=template.raw)
        except ResponseParseError as exc:
            return SiteVerdict.failed(url, str(exc), template=template.raw)

        if status is VerdictStatus.FOUND:
            return SiteVerdict.found(url, template=template.raw, detail=detail)
        return SiteVerdict.not_found(url, template=template.raw, detail=detail)

    def evaluate(self, html_content, term: str) -> Tuple[VerdictStatus, str]:
        """
        Decide presence for an already-fetched document.

        Returns (status, deciding signal). Matching links win over any
        "no results" text on the same page; no evidence at all is a plain
        not-found, never an error.
        """
        soup = self._parse(html_content)
        matches = self.count_matching_links(extract_all_links(soup), term)
        if matches > 0:
            return VerdictStatus.FOUND, f"{matches} matching link(s)"
        if has_no_results(soup, self.no_results_phrases):
            return VerdictStatus.NOT_FOUND, "page reports no results"
        return VerdictStatus.NOT_FOUND, "no matching links"

    def count_matching_links(self, links: List[str], term: str) -> int:
        patterns = build_match_patterns(term)
        if not patterns:
            return 0
        count = 0
        for link in links:
            link_lower = link.lower()
            if is_noise_link(link_lower, self.noise_patterns):
                continue
            if any(p.search(link_lower) for p in patterns):
                count += 1
        return count

    def _parse(self, html_content) -> BeautifulSoup:
        if html_content is None:
            raise ResponseParseError("failed to parse HTML: empty body")
        try:
            return BeautifulSoup(html_content, "html.parser")
        except Exception as e:
            raise ResponseParseError(f"failed to parse HTML: {e}") from e
