from .api_matcher import ApiMatcher
from .base import BaseMatcher, ResponseParseError
from .classifier import ClassificationError, classify_template
from .html_matcher import HtmlMatcher
from .templating import expand_manual_urls, expand_url, parse_template_line

__all__ = [
    "ApiMatcher",
    "BaseMatcher",
    "ClassificationError",
    "HtmlMatcher",
    "ResponseParseError",
    "classify_template",
    "expand_manual_urls",
    "expand_url",
    "parse_template_line",
]
