"""
Site Classifier
Decides whether a catalog template targets a JSON search API or an HTML page
"""
import re

from ..models.site_template import SiteKind

# Any template carrying this path segment is meant for the JSON search API.
API_QUERY_SEGMENT = "/searching?q="

# https://ww<digits>.<domain>/searching?q=
API_TEMPLATE_RE = re.compile(
    r"(https://ww\d+\.(?:[a-zA-Z0-9\-]+\.)+[a-zA-Z]+)(/searching\?q=)"
)


class ClassificationError(ValueError):
    """Template looks like an API endpoint but does not have the expected shape"""


def looks_like_api(template: str) -> bool:
    return API_QUERY_SEGMENT in (template or "")


def classify_template(template: str) -> SiteKind:
    """
    Classify a (directive-stripped) template.

    Raises:
        ClassificationError: the API marker is present but the host/path
            shape cannot be parsed.
    """
    if not looks_like_api(template):
        return SiteKind.HTML
    api_base(template)
    return SiteKind.API


def api_base(template: str) -> str:
    """Return the scheme+host part preceding the search-query segment"""
    match = API_TEMPLATE_RE.search(template or "")
    if not match or len(match.groups()) < 2 or not match.group(1):
        raise ClassificationError(f"invalid movie API URL format: {template}")
    return match.group(1)
