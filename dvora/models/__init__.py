from .site_template import SeparatorDirective, SiteKind, SiteTemplate
from .verdict import CategoryReport, SiteVerdict, VerdictStatus

__all__ = [
    "CategoryReport",
    "SeparatorDirective",
    "SiteKind",
    "SiteTemplate",
    "SiteVerdict",
    "VerdictStatus",
]
