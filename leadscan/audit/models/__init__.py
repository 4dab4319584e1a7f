"""Data models for the audit pipeline."""

from .audit import (
    Severity,
    LeadGrade,
    ViolationRecord,
    PageScanOutcome,
    SeverityTally,
    RuleFrequency,
    AuditProfile,
)
from .crawl import DiscoverySource, CandidateUrlSet, FilteredUrls

__all__ = [
    # Scan results
    'Severity',
    'LeadGrade',
    'ViolationRecord',
    'PageScanOutcome',
    'SeverityTally',
    'RuleFrequency',
    'AuditProfile',

    # Discovery
    'DiscoverySource',
    'CandidateUrlSet',
    'FilteredUrls',
]
