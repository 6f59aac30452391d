import unittest

from dvora.models.site_template import SiteKind
from dvora.sources.classifier import ClassificationError, api_base, classify_template, looks_like_api


class TestSiteClassifier(unittest.TestCase):
    def test_numbered_subdomain_search_endpoint_is_api(self):
        self.assertEqual(classify_template("https://ww1.123movies.net/searching?q="), SiteKind.API)
        self.assertEqual(api_base("https://ww1.123movies.net/searching?q="), "https://ww1.123movies.net")

    def test_any_host_of_the_right_shape_is_api(self):
        self.assertEqual(classify_template("https://ww27.unknown-host.io/searching?q="), SiteKind.API)
        self.assertEqual(api_base("https://ww2.movies.co.uk/searching?q="), "https://ww2.movies.co.uk")

    def test_regular_search_page_is_html(self):
        self.assertEqual(classify_template("https://example.com/search?q="), SiteKind.HTML)
        self.assertFalse(looks_like_api("https://example.com/search?q="))

    def test_api_marker_without_api_shape_is_an_error(self):
        with self.assertRaises(ClassificationError):
            classify_template("https://example.com/searching?q=")
        with self.assertRaises(ClassificationError):
            classify_template("http://ww1.example.com/searching?q=")


if __name__ == "__main__":
    unittest.main()
