"""
URL Templater
Expands raw catalog lines plus a search term into concrete URLs
"""
from typing import Iterable, List, Optional

from ..models.site_template import SeparatorDirective, SiteTemplate
from .classifier import classify_template

_DIRECTIVES = {
    "+": SeparatorDirective.PLUS,
    "-": SeparatorDirective.MINUS,
}


def split_directive(line: str):
    """Return (directive, template) with a leading +/- consumed"""
    text = (line or "").strip()
    directive = _DIRECTIVES.get(text[:1])
    if directive is None:
        return SeparatorDirective.NONE, text
    return directive, text[1:]


def expand_url(line: str, term: str) -> str:
    """
    Expand one catalog line into a URL.

    "+prefix" replaces spaces in the term with "+", "-prefix" with "-",
    anything else appends the term verbatim.
    """
    directive, template = split_directive(line)
    if directive is SeparatorDirective.NONE:
        return template + term
    return template + term.replace(" ", directive.separator)


def parse_template_line(line: str) -> Optional[SiteTemplate]:
    """
    Parse and classify one catalog line. Blank lines return None.

    Raises:
        ClassificationError: see classify_template().
    """
    text = (line or "").strip()
    if not text:
        return None
    directive, template = split_directive(text)
    return SiteTemplate(
        raw=text,
        template=template,
        directive=directive,
        kind=classify_template(template),
    )


def iter_template_lines(lines: Iterable[str]) -> List[str]:
    """Non-blank, trimmed lines in input order"""
    out = []
    for line in lines or []:
        text = str(line or "").strip()
        if text:
            out.append(text)
    return out


def expand_manual_urls(lines: Iterable[str], term: str) -> List[str]:
    """Expand a manual-checks list without fetching anything"""
    return [expand_url(line, term) for line in iter_template_lines(lines)]
