"""
Site Template Model
One configured catalog line with its separator directive
"""
from dataclasses import dataclass
from enum import Enum


class SeparatorDirective(Enum):
    """How spaces in the search term are encoded for a template"""
    PLUS = "plus"
    MINUS = "minus"
    NONE = "none"

    @property
    def separator(self) -> str:
        if self is SeparatorDirective.PLUS:
            return "+"
        if self is SeparatorDirective.MINUS:
            return "-"
        return " "


class SiteKind(Enum):
    """Which matcher handles a template"""
    API = "api"
    HTML = "html"


@dataclass(frozen=True)
class SiteTemplate:
    """A parsed catalog line (leading +/- already consumed)"""
    raw: str
    template: str
    directive: SeparatorDirective = SeparatorDirective.NONE
    kind: SiteKind = SiteKind.HTML

    def encode_term(self, term: str) -> str:
        """Re-encode the search term according to the separator directive"""
        if self.directive is SeparatorDirective.NONE:
            return term
        return term.replace(" ", self.directive.separator)

    def expand(self, term: str) -> str:
        """Concrete URL for this template and search term"""
        return self.template + self.encode_term(term)

    @property
    def is_api(self) -> bool:
        return self.kind is SiteKind.API
