"""
Verdict Models
Tri-state outcome of one site check plus the per-category aggregate
"""
from dataclasses import dataclass, field
from typing import List, Optional
from enum import Enum


class VerdictStatus(Enum):
    """Site check outcome"""
    FOUND = "found"
    NOT_FOUND = "not_found"
    ERROR = "error"


@dataclass(frozen=True)
class SiteVerdict:
    """Result of resolving one template against one search term"""
    url: str
    status: VerdictStatus
    result_url: Optional[str] = None
    error: Optional[str] = None
    template: str = ""
    # Which signal decided the verdict ("matching links", "no-results text", ...).
    detail: str = ""

    @classmethod
    def found(cls, url: str, result_url: Optional[str] = None, template: str = "", detail: str = "") -> "SiteVerdict":
        return cls(url=url, status=VerdictStatus.FOUND, result_url=result_url, template=template, detail=detail)

    @classmethod
    def not_found(cls, url: str, template: str = "", detail: str = "") -> "SiteVerdict":
        return cls(url=url, status=VerdictStatus.NOT_FOUND, template=template, detail=detail)

    @classmethod
    def failed(cls, url: str, error: str, template: str = "") -> "SiteVerdict":
        return cls(url=url, status=VerdictStatus.ERROR, error=error, template=template)

    @property
    def is_found(self) -> bool:
        return self.status is VerdictStatus.FOUND

    @property
    def is_error(self) -> bool:
        return self.status is VerdictStatus.ERROR

    def to_dict(self) -> dict:
        return {
            "url": self.url,
            "status": self.status.value,
            "resultUrl": self.result_url,
            "error": self.error,
            "detail": self.detail,
        }


@dataclass
class CategoryReport:
    """Aggregate of every verdict produced for one site category"""
    category: str
    term: str
    verdicts: List[SiteVerdict] = field(default_factory=list)
    # Set when the category could not run at all (missing required catalog).
    config_error: Optional[str] = None

    def add(self, verdict: SiteVerdict):
        self.verdicts.append(verdict)

    @property
    def found_count(self) -> int:
        return sum(1 for v in self.verdicts if v.status is VerdictStatus.FOUND)

    @property
    def not_found_count(self) -> int:
        return sum(1 for v in self.verdicts if v.status is VerdictStatus.NOT_FOUND)

    @property
    def error_count(self) -> int:
        return sum(1 for v in self.verdicts if v.status is VerdictStatus.ERROR)

    @property
    def found_any(self) -> bool:
        return self.found_count > 0

    @property
    def summary(self) -> str:
        if self.config_error:
            return f"Could not check {self.category}: {self.config_error}"
        if self.found_any:
            return f"'{self.term}' was found on {self.found_count} site(s) in {self.category}."
        message = f"'{self.term}' was not found on any of the sites."
        if self.error_count:
            message += f" ({self.error_count} site(s) could not be checked.)"
        return message

    def to_dict(self) -> dict:
        return {
            "category": self.category,
            "term": self.term,
            "foundAny": self.found_any,
            "found": self.found_count,
            "notFound": self.not_found_count,
            "errors": self.error_count,
            "configError": self.config_error,
            "summary": self.summary,
            "verdicts": [v.to_dict() for v in self.verdicts],
        }
