"""Cross-site lead summary over saved audit results.

Saved runs are bucketed by lead grade so an operator can work through
the hottest leads first. Grades are always recomputed from each saved
severity tally rather than read from the file.
"""

from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel, Field

from .grading import grade_profile
from .models.audit import LeadGrade
from .storage import StoredResult


class LeadEntry(BaseModel):
    """One site in the lead summary."""

    domain: str
    folder: str
    grade: LeadGrade
    total: int = Field(ge=0)
    critical: int = Field(ge=0)
    serious: int = Field(ge=0)
    top_issue: Optional[str] = None
    indeterminate: bool = False


class LeadSummary(BaseModel):
    """Saved runs grouped by grade, each group sorted by total violations."""

    leads: Dict[LeadGrade, List[LeadEntry]] = Field(
        default_factory=lambda: {grade: [] for grade in GRADE_ORDER}
    )

    @property
    def total_scanned(self) -> int:
        return sum(len(entries) for entries in self.leads.values())

    def count(self, grade: LeadGrade) -> int:
        return len(self.leads.get(grade, []))

    def entries(self, grade: LeadGrade) -> List[LeadEntry]:
        return self.leads.get(grade, [])


# Hottest first
GRADE_ORDER = (LeadGrade.A, LeadGrade.B, LeadGrade.C, LeadGrade.SKIP)


def to_lead_entry(stored: StoredResult) -> LeadEntry:
    profile = stored.profile
    return LeadEntry(
        domain=profile.site,
        folder=stored.folder,
        grade=grade_profile(profile),
        total=profile.total_violations,
        critical=profile.by_severity.critical,
        serious=profile.by_severity.serious,
        top_issue=profile.top_issues[0].rule_id if profile.top_issues else None,
        indeterminate=profile.is_indeterminate
    )


def summarize_leads(results: Iterable[StoredResult]) -> LeadSummary:
    """Group saved runs by lead grade, most violations first within a grade."""
    summary = LeadSummary()

    for stored in results:
        entry = to_lead_entry(stored)
        summary.leads[entry.grade].append(entry)

    for grade in GRADE_ORDER:
        summary.leads[grade].sort(key=lambda entry: entry.total, reverse=True)

    return summary
