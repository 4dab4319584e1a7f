"""Run-level aggregation of page scan outcomes into an audit profile.

This module flattens the violation records of every successfully audited
page, tallies occurrences by severity, ranks rules by total occurrences
and seals the result into an AuditProfile. Aggregation has no failure
mode: a run with no successful page yields a valid, empty profile.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Sequence

from .models.audit import (
    AuditProfile,
    PageFailure,
    PageScanOutcome,
    RuleFrequency,
    Severity,
    SeverityTally,
    ViolationRecord,
)
from .models.crawl import CandidateUrlSet
from .utils.url_normalizer import get_site_name


logger = logging.getLogger(__name__)


TOP_ISSUES_LIMIT = 10


def collect_violations(outcomes: Iterable[PageScanOutcome]) -> List[ViolationRecord]:
    """Flatten violation records of all non-failed outcomes."""
    records: List[ViolationRecord] = []
    for outcome in outcomes:
        if outcome.failed:
            continue
        records.extend(outcome.violations)
    return records


def tally_severities(records: Iterable[ViolationRecord]) -> SeverityTally:
    """Sum occurrence counts into their severity buckets."""
    counts = {severity.value: 0 for severity in Severity}
    for record in records:
        counts[record.severity.value] += record.occurrences
    return SeverityTally(**counts)


def rank_rules(
    records: Iterable[ViolationRecord],
    limit: Optional[int] = TOP_ISSUES_LIMIT
) -> List[RuleFrequency]:
    """Rank rule identifiers by summed occurrence count.

    Args:
        records: Violation records of a run
        limit: Maximum entries to return, None for the full ranking

    Returns:
        RuleFrequency entries, highest count first. Ties keep the order in
        which rules were first seen. Each rule keeps the severity of its
        first record.
    """
    counts: Dict[str, int] = {}
    severities: Dict[str, Severity] = {}

    for record in records:
        if record.rule_id not in counts:
            counts[record.rule_id] = 0
            severities[record.rule_id] = record.severity
        elif record.severity != severities[record.rule_id]:
            logger.debug(
                f"Rule {record.rule_id} reported as both {severities[record.rule_id].value} "
                f"and {record.severity.value}"
            )
        counts[record.rule_id] += record.occurrences

    # sorted() is stable, so equal counts stay in first-seen order
    ranking = sorted(
        (RuleFrequency(rule_id=rule_id, count=count, severity=severities[rule_id])
         for rule_id, count in counts.items()),
        key=lambda entry: entry.count,
        reverse=True
    )

    if limit is not None:
        ranking = ranking[:limit]
    return ranking


class ViolationAggregator:
    """Builds the sealed audit profile of a run."""

    def __init__(self, top_issues_limit: int = TOP_ISSUES_LIMIT):
        self.top_issues_limit = top_issues_limit

    def aggregate(
        self,
        site_url: str,
        outcomes: Sequence[PageScanOutcome],
        candidates: Optional[CandidateUrlSet] = None,
        scanned_at: Optional[datetime] = None
    ) -> AuditProfile:
        """Aggregate all page outcomes of a run.

        Args:
            site_url: Root URL the run was started from
            outcomes: One outcome per scanned URL
            candidates: Discovery result, recorded for provenance
            scanned_at: Completion time, defaults to now

        Returns:
            Sealed AuditProfile
        """
        records = collect_violations(outcomes)
        failed = [outcome for outcome in outcomes if outcome.failed]
        failures = [PageFailure(url=outcome.url, error=outcome.error) for outcome in failed]
        tally = tally_severities(records)

        profile = AuditProfile(
            site=get_site_name(site_url),
            site_url=site_url,
            scanned_at=scanned_at or datetime.now(timezone.utc),
            pages_scanned=len(outcomes) - len(failed),
            pages_failed=len(failed),
            discovery_source=candidates.source.value if candidates else None,
            urls_found=len(candidates.urls) if candidates else len(outcomes),
            by_severity=tally,
            top_issues=rank_rules(records, self.top_issues_limit),
            violations=records,
            failures=failures
        )

        logger.info(
            f"Aggregated {profile.pages_scanned} pages ({profile.pages_failed} failed): "
            f"{tally.total} violations"
        )
        return profile
