import os
import tempfile
import threading
import time
import unittest
from pathlib import Path

from dvora.core.catalog import SiteCatalog
from dvora.core.event_bus import EventBus, Events
from dvora.core.resolver import ResolutionDriver
from dvora.core.settings_manager import SettingsManager
from dvora.models.verdict import SiteVerdict, VerdictStatus
from dvora.sources.base import BaseMatcher


class StubMatcher(BaseMatcher):
    name = "stub"

    def __init__(self, status=VerdictStatus.NOT_FOUND, fail_on=None, delays=None):
        super().__init__()
        self.status = status
        self.fail_on = fail_on or set()
        self.delays = delays or {}
        self.calls = []
        self._lock = threading.Lock()

    def check(self, template, term):
        url = template.expand(term)
        with self._lock:
            self.calls.append(url)
        time.sleep(self.delays.get(url, 0.0))
        if url in self.fail_on:
            raise RuntimeError("matcher exploded")
        if self.status is VerdictStatus.FOUND:
            return SiteVerdict.found(url, result_url=url + "#result", template=template.raw)
        if self.status is VerdictStatus.ERROR:
            return SiteVerdict.failed(url, "HTTP request failed with status: 503", template=template.raw)
        return SiteVerdict.not_found(url, template=template.raw)


class _Settings:
    def __init__(self, catalog_dir):
        self.data = {
            "catalog_dir": catalog_dir,
            "categories": {
                "shows": {"file": "shows.txt", "required": True},
                "movies": {"file": "movies.txt", "required": True},
                "api sites": {"file": "api_sites.txt", "required": False},
            },
        }

    def get(self, key, default=None):
        return self.data.get(key, default)


class TestResolutionDriver(unittest.TestCase):
    def test_blank_lines_produce_no_verdicts(self):
        html = StubMatcher()
        driver = ResolutionDriver(EventBus(), api_matcher=StubMatcher(), html_matcher=html)
        verdicts = list(driver.resolve(["", "   ", "https://a.example/?q=", "\t", "+https://b.example/?q="], "the matrix"))
        self.assertEqual([v.url for v in verdicts], [
            "https://a.example/?q=the matrix",
            "https://b.example/?q=the+matrix",
        ])
        self.assertEqual(len(html.calls), 2)

    def test_api_templates_route_to_api_matcher(self):
        api = StubMatcher(status=VerdictStatus.FOUND)
        html = StubMatcher()
        driver = ResolutionDriver(EventBus(), api_matcher=api, html_matcher=html)
        verdicts = list(driver.resolve([
            "https://ww3.flixsite.to/searching?q=",
            "https://plain.example/search?q=",
        ], "alien"))
        self.assertEqual(len(api.calls), 1)
        self.assertEqual(len(html.calls), 1)
        self.assertTrue(verdicts[0].is_found)
        self.assertEqual(verdicts[1].status, VerdictStatus.NOT_FOUND)

    def test_malformed_api_template_is_error_not_html(self):
        api = StubMatcher()
        html = StubMatcher()
        driver = ResolutionDriver(EventBus(), api_matcher=api, html_matcher=html)
        verdict = driver.resolve_line("+https://example.com/searching?q=", "the matrix")
        self.assertEqual(verdict.status, VerdictStatus.ERROR)
        self.assertEqual(verdict.url, "https://example.com/searching?q=the+matrix")
        self.assertEqual(api.calls, [])
        self.assertEqual(html.calls, [])

    def test_failing_site_does_not_stop_later_sites(self):
        html = StubMatcher(status=VerdictStatus.FOUND, fail_on={"https://a.example/?q=x"})
        driver = ResolutionDriver(EventBus(), html_matcher=html)
        verdicts = list(driver.resolve(["https://a.example/?q=", "https://b.example/?q="], "x"))
        self.assertEqual([v.status for v in verdicts], [VerdictStatus.ERROR, VerdictStatus.FOUND])
        self.assertIn("matcher exploded", verdicts[0].error)

    def test_concurrent_checks_keep_input_order(self):
        lines = [f"https://site{i}.example/?q=" for i in range(5)]
        delays = {f"https://site{i}.example/?q=x": 0.05 * (5 - i) for i in range(5)}
        html = StubMatcher(delays=delays)
        driver = ResolutionDriver(EventBus(), html_matcher=html, max_workers=5)
        verdicts = list(driver.resolve(lines, "x"))
        self.assertEqual([v.url for v in verdicts], [line + "x" for line in lines])

    def test_empty_term_is_rejected(self):
        driver = ResolutionDriver(EventBus(), html_matcher=StubMatcher())
        with self.assertRaises(ValueError):
            list(driver.resolve(["https://a.example/?q="], "   "))

    def test_run_lines_streams_events_and_summarizes(self):
        bus = EventBus()
        seen = []
        done = {}
        bus.subscribe(Events.SITE_CHECKED, lambda d: seen.append((d["index"], d["verdict"].url)))
        bus.subscribe(Events.CATEGORY_COMPLETED, lambda d: done.update(d))
        driver = ResolutionDriver(bus, html_matcher=StubMatcher(status=VerdictStatus.FOUND))
        report = driver.run_lines("shows", ["https://a.example/?q=", "", "https://b.example/?q="], "x")
        self.assertEqual(seen, [(0, "https://a.example/?q=x"), (1, "https://b.example/?q=x")])
        self.assertIs(done["report"], report)
        self.assertTrue(report.found_any)
        self.assertEqual(report.found_count, 2)
        self.assertIn("was found on 2 site(s)", report.summary)

    def test_site_started_is_emitted_before_fetch(self):
        bus = EventBus()
        log = []
        bus.subscribe(Events.SITE_STARTED, lambda d: log.append(("started", d["category"], d["url"])))
        bus.subscribe(Events.SITE_CHECKED, lambda d: log.append(("checked", d["category"], d["verdict"].url)))

        class _Recording(StubMatcher):
            def check(self, template, term):
                log.append(("fetch", "", template.expand(term)))
                return super().check(template, term)

        driver = ResolutionDriver(bus, html_matcher=_Recording())
        driver.run_lines("movies", ["+https://a.example/?q=", "+https://example.com/searching?q="], "the matrix")
        self.assertEqual(log, [
            ("started", "movies", "https://a.example/?q=the+matrix"),
            ("fetch", "", "https://a.example/?q=the+matrix"),
            ("checked", "movies", "https://a.example/?q=the+matrix"),
            ("started", "movies", "https://example.com/searching?q=the+matrix"),
            ("checked", "movies", "https://example.com/searching?q=the+matrix"),
        ])

    def test_errors_are_not_counted_as_not_found(self):
        driver = ResolutionDriver(EventBus(), api_matcher=StubMatcher(status=VerdictStatus.ERROR))
        report = driver.run_lines("api sites", ["https://ww1.flixsite.to/searching?q="], "the matrix")
        self.assertEqual(report.error_count, 1)
        self.assertEqual(report.not_found_count, 0)
        self.assertFalse(report.found_any)
        self.assertIn("was not found on any of the sites", report.summary)
        self.assertIn("could not be checked", report.summary)

    def test_missing_required_category_fails_only_that_category(self):
        with tempfile.TemporaryDirectory() as tmp:
            with open(os.path.join(tmp, "movies.txt"), "w", encoding="utf-8") as f:
                f.write("+https://m.example/?q=\n\n")
            bus = EventBus()
            failed = []
            bus.subscribe(Events.CATEGORY_FAILED, lambda d: failed.append(d["category"]))
            driver = ResolutionDriver(bus, html_matcher=StubMatcher(status=VerdictStatus.FOUND))
            reports = driver.run_categories(SiteCatalog(_Settings(tmp)), ["shows", "movies"], "the matrix")

        self.assertEqual(failed, ["shows"])
        self.assertIn("shows.txt", reports[0].config_error)
        self.assertEqual(reports[0].verdicts, [])
        self.assertIsNone(reports[1].config_error)
        self.assertEqual([v.url for v in reports[1].verdicts], ["https://m.example/?q=the+matrix"])

    def test_missing_optional_category_is_silent(self):
        with tempfile.TemporaryDirectory() as tmp:
            bus = EventBus()
            failed = []
            bus.subscribe(Events.CATEGORY_FAILED, lambda d: failed.append(d))
            driver = ResolutionDriver(bus, html_matcher=StubMatcher())
            report = driver.run_category(SiteCatalog(_Settings(tmp)), "api sites", "alien")
        self.assertEqual(failed, [])
        self.assertIsNone(report.config_error)
        self.assertEqual(report.verdicts, [])

    def test_from_settings_passes_configuration_to_matchers(self):
        settings = {
            "user_agent": "CustomAgent/2.0",
            "request_timeout_seconds": 4.5,
            "max_concurrent_checks": 3,
            "api_result_path": "/find/",
            "noise_link_patterns": ["/ads/"],
            "no_results_phrases": ["nada"],
        }

        class _Dict:
            def get(self, key, default=None):
                return settings.get(key, default)

        driver = ResolutionDriver.from_settings(_Dict(), EventBus())
        self.assertEqual(driver.max_workers, 3)
        self.assertEqual(driver.api_matcher.user_agent, "CustomAgent/2.0")
        self.assertEqual(driver.html_matcher.timeout_seconds, 4.5)
        self.assertEqual(driver.api_matcher.result_path, "/find/")
        self.assertIn("/ads/", driver.html_matcher.noise_patterns)
        self.assertIn("facebook.com", driver.html_matcher.noise_patterns)
        self.assertIn("nada", driver.html_matcher.no_results_phrases)
        self.assertIn("no results", driver.html_matcher.no_results_phrases)

    def test_configured_noise_list_cannot_readmit_share_links(self):
        with tempfile.TemporaryDirectory() as tmp:
            settings = SettingsManager(settings_dir=Path(tmp))
            settings.update({"noise_link_patterns": ["/ads/"], "no_results_phrases": []})
            driver = ResolutionDriver.from_settings(settings, EventBus())
        html = (
            b"<html><body><a href='https://www.facebook.com/sharer.php?u=/the-matrix'>share</a>"
            b"<a href='/ads/the-matrix'>ad</a><p>no results</p></body></html>"
        )
        status, detail = driver.html_matcher.evaluate(html, "the matrix")
        self.assertEqual(status, VerdictStatus.NOT_FOUND)
        self.assertEqual(detail, "page reports no results")


if __name__ == "__main__":
    unittest.main()
