"""Unit tests for audit data models."""

import pytest
from pydantic import ValidationError

from leadscan.audit.models.audit import (
    AuditProfile,
    PageScanOutcome,
    Severity,
    SeverityTally,
    ViolationRecord
)
from leadscan.audit.models.crawl import CandidateUrlSet, DiscoverySource, FilteredUrls


class TestSeverity:
    """Tests for Severity ordering and mapping."""

    def test_ordering(self):
        assert Severity.CRITICAL > Severity.SERIOUS > Severity.MODERATE > Severity.MINOR
        assert max([Severity.MINOR, Severity.CRITICAL, Severity.MODERATE]) == Severity.CRITICAL

    @pytest.mark.parametrize("impact,expected", [
        ("critical", Severity.CRITICAL),
        ("Serious", Severity.SERIOUS),
        (" moderate ", Severity.MODERATE),
        ("minor", Severity.MINOR),
        (None, Severity.MINOR),
        ("", Severity.MINOR),
        ("unknown", Severity.MINOR),
    ])
    def test_from_impact(self, impact, expected):
        assert Severity.from_impact(impact) == expected


class TestViolationRecord:
    """Tests for ViolationRecord."""

    def test_occurrences_must_be_positive(self):
        with pytest.raises(ValidationError):
            ViolationRecord(
                rule_id="label",
                severity=Severity.SERIOUS,
                page_url="https://example.com/",
                occurrences=0
            )

    def test_frozen(self, record_factory):
        record = record_factory()
        with pytest.raises(ValidationError):
            record.occurrences = 5


class TestPageScanOutcome:
    """Tests for PageScanOutcome."""

    def test_failure(self):
        outcome = PageScanOutcome.failure("https://example.com/", "Timeout", scan_time_ms=30010)

        assert outcome.failed
        assert outcome.violations == []
        assert outcome.scan_time_ms == 30010

    def test_failure_without_reason(self):
        assert PageScanOutcome.failure("https://example.com/", "").error == "Unknown error"

    def test_failed_outcome_cannot_carry_violations(self, record_factory):
        with pytest.raises(ValidationError, match="cannot carry violations"):
            PageScanOutcome(url="https://example.com/", violations=[record_factory()], error="boom")

    def test_success(self, outcome_factory, record_factory):
        outcome = outcome_factory("https://example.com/", record_factory())
        assert not outcome.failed


class TestAuditProfile:
    """Tests for AuditProfile."""

    def test_defaults(self):
        profile = AuditProfile(site="example.com", site_url="https://example.com")

        assert profile.by_severity == SeverityTally()
        assert profile.total_violations == 0
        assert profile.is_indeterminate
        assert profile.violations == ()
        assert profile.scanned_at.tzinfo is not None

    def test_json_round_trip(self, sample_outcomes):
        profile = AuditProfile(
            site="example.com",
            site_url="https://example.com",
            pages_scanned=2,
            violations=sample_outcomes[0].violations,
            by_severity=SeverityTally(critical=3, serious=5)
        )

        restored = AuditProfile.model_validate_json(profile.model_dump_json())

        assert restored == profile


class TestCrawlModels:
    """Tests for discovery models."""

    def test_candidate_set_cannot_be_empty(self):
        with pytest.raises(ValidationError, match="cannot be empty"):
            CandidateUrlSet(urls=[], source=DiscoverySource.SITEMAP)

    def test_filtered_urls_selected(self):
        selection = FilteredUrls(urls=["https://example.com/"], total_found=3, html_count=2, max_pages=10)
        assert selection.selected == 1

    def test_filtered_urls_cap_must_be_positive(self):
        with pytest.raises(ValidationError):
            FilteredUrls(urls=[], max_pages=0)

    def test_discovery_time_is_timezone_aware(self):
        candidates = CandidateUrlSet(urls=["https://example.com/"], source=DiscoverySource.FALLBACK)
        assert candidates.discovered_at.tzinfo is not None
