"""Pydantic models for accessibility scan outcomes and audit aggregates.

This module defines the records produced while auditing a site: individual
rule violations, per-page scan outcomes, severity tallies, rule frequency
rankings and the sealed audit profile consumed by grading and reporting.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Severity(str, Enum):
    """Impact levels reported by the accessibility rule engine."""
    CRITICAL = "critical"
    SERIOUS = "serious"
    MODERATE = "moderate"
    MINOR = "minor"

    @property
    def rank(self) -> int:
        """Ordinal rank, higher is more severe."""
        return _SEVERITY_RANKS[self]

    @classmethod
    def from_impact(cls, impact: Optional[str]) -> "Severity":
        """Map a raw impact token to a severity, defaulting to minor."""
        if not impact:
            return cls.MINOR
        try:
            return cls(impact.strip().lower())
        except ValueError:
            return cls.MINOR

    def __lt__(self, other):
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank >= other.rank


_SEVERITY_RANKS = {
    Severity.MINOR: 1,
    Severity.MODERATE: 2,
    Severity.SERIOUS: 3,
    Severity.CRITICAL: 4,
}


class LeadGrade(str, Enum):
    """Outreach priority derived from an audit profile."""
    A = "A"
    B = "B"
    C = "C"
    SKIP = "skip"

    @property
    def level(self) -> int:
        """Ordinal level (Skip < C < B < A)."""
        return _GRADE_LEVELS[self]

    @property
    def label(self) -> str:
        """Operator-facing description of the grade."""
        return _GRADE_LABELS[self]


_GRADE_LEVELS = {
    LeadGrade.SKIP: 0,
    LeadGrade.C: 1,
    LeadGrade.B: 2,
    LeadGrade.A: 3,
}

_GRADE_LABELS = {
    LeadGrade.A: "A-LEAD: High priority - significant issues found",
    LeadGrade.B: "B-LEAD: Medium priority - moderate issues found",
    LeadGrade.C: "C-LEAD: Low priority - minor issues found",
    LeadGrade.SKIP: "SKIP: Site appears compliant",
}


class ViolationRecord(BaseModel):
    """One rule failing on one page, possibly across several DOM nodes."""

    model_config = ConfigDict(frozen=True)

    rule_id: str = Field(description="Rule identifier reported by the engine")
    severity: Severity = Field(description="Impact level of the failure")
    description: str = Field(default="", description="What the rule checks")
    help: str = Field(default="", description="Short remediation guidance")
    help_url: str = Field(default="", description="Link to rule documentation")
    wcag_tags: Tuple[str, ...] = Field(
        default_factory=tuple,
        description="WCAG tags attached to the rule"
    )
    page_url: str = Field(description="Page on which the failure was found")
    occurrences: int = Field(
        default=1,
        ge=1,
        description="Number of DOM nodes matching this failure on the page"
    )


class PageScanOutcome(BaseModel):
    """Result of attempting to audit a single URL."""

    url: str = Field(description="URL that was audited")
    violations: List[ViolationRecord] = Field(
        default_factory=list,
        description="Violations found on the page"
    )
    passes: int = Field(default=0, ge=0, description="Number of passing rules")
    incomplete: int = Field(
        default=0,
        ge=0,
        description="Number of rules needing manual review"
    )
    scan_time_ms: int = Field(default=0, ge=0, description="Time spent on this page")
    error: Optional[str] = Field(
        default=None,
        description="Failure reason, set only when the page could not be audited"
    )

    @model_validator(mode='after')
    def validate_failure_has_no_violations(self):
        """A failed outcome never contributes violation records."""
        if self.error is not None and self.violations:
            raise ValueError("failed page outcome cannot carry violations")
        return self

    @property
    def failed(self) -> bool:
        """Whether the page could not be audited."""
        return self.error is not None

    @classmethod
    def failure(cls, url: str, error: str, scan_time_ms: int = 0) -> "PageScanOutcome":
        """Build a failure outcome."""
        return cls(url=url, error=error or "Unknown error", scan_time_ms=scan_time_ms)


class SeverityTally(BaseModel):
    """Occurrence counts per severity level."""

    model_config = ConfigDict(frozen=True)

    critical: int = Field(default=0, ge=0)
    serious: int = Field(default=0, ge=0)
    moderate: int = Field(default=0, ge=0)
    minor: int = Field(default=0, ge=0)

    @property
    def total(self) -> int:
        return self.critical + self.serious + self.moderate + self.minor

    @property
    def critical_serious(self) -> int:
        return self.critical + self.serious

    def count(self, severity: Severity) -> int:
        return getattr(self, severity.value)


class RuleFrequency(BaseModel):
    """Total occurrences of one rule across a run."""

    model_config = ConfigDict(frozen=True)

    rule_id: str = Field(description="Rule identifier")
    count: int = Field(ge=0, description="Summed occurrence count")
    severity: Severity = Field(description="Severity reported for the rule")


class PageFailure(BaseModel):
    """A page that could not be audited and why."""

    model_config = ConfigDict(frozen=True)

    url: str
    error: str


class AuditProfile(BaseModel):
    """Sealed aggregate of one site's scan run.

    This is the single artifact handed to the grading engine and to any
    report renderer. It is immutable once built.
    """

    model_config = ConfigDict(frozen=True)

    site: str = Field(description="Host name of the audited site")
    site_url: str = Field(description="Root URL the audit was started from")
    scanned_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the scan run completed"
    )
    pages_scanned: int = Field(default=0, ge=0, description="Pages audited successfully")
    pages_failed: int = Field(default=0, ge=0, description="Pages that could not be audited")
    discovery_source: Optional[str] = Field(
        default=None,
        description="How the page list was discovered (sitemap or fallback)"
    )
    urls_found: int = Field(default=0, ge=0, description="URLs discovered before filtering")
    by_severity: SeverityTally = Field(default_factory=SeverityTally)
    top_issues: Tuple[RuleFrequency, ...] = Field(default_factory=tuple)
    violations: Tuple[ViolationRecord, ...] = Field(default_factory=tuple)
    failures: Tuple[PageFailure, ...] = Field(
        default_factory=tuple,
        description="Pages that could not be audited, in scan order"
    )

    @property
    def total_violations(self) -> int:
        return self.by_severity.total

    @property
    def is_indeterminate(self) -> bool:
        """No page was audited successfully, so zero violations means no data."""
        return self.pages_scanned == 0
