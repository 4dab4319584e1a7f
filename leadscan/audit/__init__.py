"""Audit engine package for LeadScan.

This package provides sitemap discovery, page selection, sequential
accessibility audits, aggregation and lead grading.
"""

from .aggregation import ViolationAggregator, rank_rules, tally_severities
from .grading import grade_profile, grade_tally
from .input.sitemap_resolver import SitemapResolver
from .models.audit import (
    AuditProfile,
    LeadGrade,
    PageScanOutcome,
    RuleFrequency,
    Severity,
    SeverityTally,
    ViolationRecord,
)
from .models.crawl import CandidateUrlSet, DiscoverySource, FilteredUrls
from .runner import AuditInitializationError, AuditResult, AuditRunner, BatchEntry
from .scanner import PageAuditOrchestrator, ScanConfig
from .utils.url_filter import filter_urls

__all__ = [
    # Runner
    'AuditRunner',
    'AuditResult',
    'BatchEntry',
    'AuditInitializationError',

    # Pipeline stages
    'SitemapResolver',
    'filter_urls',
    'PageAuditOrchestrator',
    'ScanConfig',
    'ViolationAggregator',
    'tally_severities',
    'rank_rules',
    'grade_tally',
    'grade_profile',

    # Models
    'AuditProfile',
    'LeadGrade',
    'PageScanOutcome',
    'RuleFrequency',
    'Severity',
    'SeverityTally',
    'ViolationRecord',
    'CandidateUrlSet',
    'DiscoverySource',
    'FilteredUrls',
]
