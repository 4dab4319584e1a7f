"""Lead grading from an audit profile's severity tally.

Grades are evaluated in precedence order, first match wins:

    A     critical + serious >= 10, or total >= 25
    B     critical + serious >= 5,  or total >= 15
    C     total >= 1
    Skip  otherwise

Grading depends on nothing but the tally, so the same profile always
yields the same grade.
"""

from .models.audit import AuditProfile, LeadGrade, SeverityTally


A_CRITICAL_SERIOUS = 10
A_TOTAL = 25
B_CRITICAL_SERIOUS = 5
B_TOTAL = 15
C_TOTAL = 1


def grade_tally(tally: SeverityTally) -> LeadGrade:
    """Map a severity tally to a lead grade."""
    critical_serious = tally.critical_serious
    total = tally.total

    if critical_serious >= A_CRITICAL_SERIOUS or total >= A_TOTAL:
        return LeadGrade.A
    if critical_serious >= B_CRITICAL_SERIOUS or total >= B_TOTAL:
        return LeadGrade.B
    if total >= C_TOTAL:
        return LeadGrade.C
    return LeadGrade.SKIP


def grade_profile(profile: AuditProfile) -> LeadGrade:
    """Grade a sealed audit profile."""
    return grade_tally(profile.by_severity)
