"""
Resolution Driver
Runs every template of a site category against one search term and reports
each verdict as soon as it is produced
"""
from typing import Iterable, Iterator, List, Optional
from concurrent.futures import ThreadPoolExecutor

from ..models.site_template import SiteTemplate
from ..models.verdict import CategoryReport, SiteVerdict
from ..sources.api_matcher import ApiMatcher
from ..sources.base import BaseMatcher
from ..sources.classifier import ClassificationError
from ..sources.html_matcher import HtmlMatcher
from ..sources.templating import expand_url, iter_template_lines, parse_template_line
from .catalog import CatalogError, SiteCatalog
from .event_bus import EventBus, Events


class ResolutionDriver:
    """Drives categories of templates through the classifier and matchers"""

    def __init__(
        self,
        event_bus: EventBus,
        api_matcher: Optional[BaseMatcher] = None,
        html_matcher: Optional[BaseMatcher] = None,
        max_workers: int = 1,
    ):
        self.event_bus = event_bus
        self.api_matcher = api_matcher or ApiMatcher()
        self.html_matcher = html_matcher or HtmlMatcher()
        self.max_workers = max(1, int(max_workers or 1))

    @classmethod
    def from_settings(cls, settings, event_bus: EventBus, max_workers: Optional[int] = None) -> "ResolutionDriver":
        user_agent = str(settings.get("user_agent", "") or "")
        timeout = float(settings.get("request_timeout_seconds", 10.0) or 10.0)
        return cls(
            event_bus,
            api_matcher=ApiMatcher(
                user_agent=user_agent,
                timeout_seconds=timeout,
                result_path=str(settings.get("api_result_path", "") or ""),
            ),
            html_matcher=HtmlMatcher(
                user_agent=user_agent,
                timeout_seconds=timeout,
                noise_patterns=settings.get("noise_link_patterns"),
                no_results_phrases=settings.get("no_results_phrases"),
            ),
            max_workers=max_workers if max_workers is not None else int(settings.get("max_concurrent_checks", 1) or 1),
        )

    def matcher_for(self, template: SiteTemplate) -> BaseMatcher:
        return self.api_matcher if template.is_api else self.html_matcher

    def resolve_line(self, line: str, term: str, category: str = "") -> Optional[SiteVerdict]:
        """Expand, classify and resolve one catalog line. Blank lines give None."""
        try:
            template = parse_template_line(line)
        except ClassificationError as e:
            url = expand_url(line, term)
            self._announce(category, url)
            return SiteVerdict.failed(url, str(e), template=line.strip())
        if template is None:
            return None

        url = template.expand(term)
        self._announce(category, url)
        matcher = self.matcher_for(template)
        try:
            return matcher.check(template, term)
        except Exception as e:
            # Matchers report transport/parse failures themselves; anything
            # else still only fails this one site.
            print(f"Error checking {url}: {e}")
            return SiteVerdict.failed(url, str(e), template=template.raw)

    def _announce(self, category: str, url: str):
        self.event_bus.emit(Events.SITE_STARTED, {"category": category, "url": url})

    def resolve(self, lines: Iterable[str], term: str, category: str = "") -> Iterator[SiteVerdict]:
        """
        Yield one verdict per non-blank line, in input order.

        With max_workers > 1 the checks run concurrently; verdicts are still
        flushed in input order.
        """
        if not (term or "").strip():
            raise ValueError("Search term must not be empty.")
        pending = iter_template_lines(lines)
        if self.max_workers <= 1 or len(pending) <= 1:
            for line in pending:
                verdict = self.resolve_line(line, term, category)
                if verdict is not None:
                    yield verdict
            return

        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(pending))) as executor:
            futures = [executor.submit(self.resolve_line, line, term, category) for line in pending]
            for future in futures:
                verdict = future.result()
                if verdict is not None:
                    yield verdict

    def run_lines(
        self,
        category: str,
        lines: Iterable[str],
        term: str,
    ) -> CategoryReport:
        """Resolve an already-loaded category and publish progress events."""
        report = CategoryReport(category=category, term=term)
        self.event_bus.emit(Events.CHECK_STARTED, {"category": category, "term": term})
        for index, verdict in enumerate(self.resolve(lines, term, category)):
            report.add(verdict)
            self.event_bus.emit(Events.SITE_CHECKED, {
                "category": category,
                "index": index,
                "verdict": verdict,
            })
        self.event_bus.emit(Events.CATEGORY_COMPLETED, {"category": category, "report": report})
        return report

    def run_category(
        self,
        catalog: SiteCatalog,
        category: str,
        term: str,
    ) -> CategoryReport:
        """
        Load one category from the catalog and resolve it.

        A missing required catalog is reported on the returned report and
        never raised, so chained categories keep running.
        """
        try:
            lines = catalog.load_lines(category)
        except CatalogError as e:
            report = CategoryReport(category=category, term=term, config_error=str(e))
            self.event_bus.emit(Events.CATEGORY_FAILED, {"category": category, "error": str(e), "report": report})
            return report
        return self.run_lines(category, lines, term)

    def run_categories(
        self,
        catalog: SiteCatalog,
        categories: Iterable[str],
        term: str,
    ) -> List[CategoryReport]:
        return [self.run_category(catalog, name, term) for name in categories]
