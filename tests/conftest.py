"""Shared test fixtures and configuration for LeadScan tests."""

import pytest
from pathlib import Path
import sys

# Add project root to Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

from leadscan.audit.capture.rule_engine import EngineResult, EngineViolation
from leadscan.audit.models.audit import PageScanOutcome, Severity, ViolationRecord


def make_record(rule_id="image-alt", severity=Severity.SERIOUS, page_url="https://example.com/",
                occurrences=1):
    """Build a violation record with sensible defaults."""
    return ViolationRecord(
        rule_id=rule_id,
        severity=severity,
        description=f"{rule_id} description",
        help=f"Fix {rule_id}",
        help_url=f"https://dequeuniversity.com/rules/axe/4.10/{rule_id}",
        wcag_tags=["wcag2a"],
        page_url=page_url,
        occurrences=occurrences
    )


def make_outcome(url, *records):
    return PageScanOutcome(url=url, violations=list(records), passes=20, incomplete=1)


class FakeAuditSession:
    """In-memory stand-in for the shared browser session.

    ``results`` maps URL to an EngineResult or an exception raised while
    navigating to that URL. Unlisted URLs evaluate clean.
    """

    def __init__(self, results=None, evaluate_errors=None):
        self.results = results or {}
        self.evaluate_errors = evaluate_errors or {}
        self.navigations = []
        self.evaluated_tags = []
        self._current = None

    async def navigate(self, url, timeout_ms=30000, wait_until="domcontentloaded"):
        self.navigations.append((url, timeout_ms, wait_until))
        self._current = url
        result = self.results.get(url)
        if isinstance(result, BaseException):
            raise result

    async def evaluate(self, tags):
        self.evaluated_tags.append(list(tags))
        if self._current in self.evaluate_errors:
            raise self.evaluate_errors[self._current]
        result = self.results.get(self._current)
        return result if isinstance(result, EngineResult) else EngineResult(passes=10)


class RecordingSleep:
    """Async sleep replacement that records requested delays."""

    def __init__(self):
        self.calls = []

    async def __call__(self, delay):
        self.calls.append(delay)


def engine_result(*violations, passes=12, incomplete=2):
    """Build an EngineResult from (rule_id, impact, node_count) tuples."""
    return EngineResult(
        violations=[
            EngineViolation(
                rule_id=rule_id,
                impact=impact,
                description=f"{rule_id} description",
                help=f"Fix {rule_id}",
                help_url=f"https://dequeuniversity.com/rules/axe/4.10/{rule_id}",
                tags=["cat.text-alternatives", "wcag2a", "wcag111"],
                node_count=node_count
            )
            for rule_id, impact, node_count in violations
        ],
        passes=passes,
        incomplete=incomplete
    )


@pytest.fixture
def fake_session():
    return FakeAuditSession()


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
def sample_outcomes():
    """Three pages: two audited, one failed."""
    return [
        make_outcome(
            "https://example.com/",
            make_record("image-alt", Severity.CRITICAL, "https://example.com/", occurrences=3),
            make_record("color-contrast", Severity.SERIOUS, "https://example.com/", occurrences=5),
        ),
        make_outcome(
            "https://example.com/about",
            make_record("color-contrast", Severity.SERIOUS, "https://example.com/about", occurrences=2),
            make_record("region", Severity.MODERATE, "https://example.com/about", occurrences=1),
        ),
        PageScanOutcome.failure("https://example.com/broken", "Timeout 30000ms exceeded"),
    ]


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )


@pytest.fixture
def record_factory():
    """Factory building ViolationRecord instances."""
    return make_record


@pytest.fixture
def outcome_factory():
    """Factory building successful PageScanOutcome instances."""
    return make_outcome


@pytest.fixture
def engine_result_factory():
    """Factory building EngineResult instances from (rule_id, impact, nodes) tuples."""
    return engine_result


@pytest.fixture
def session_factory():
    """Factory building FakeAuditSession instances."""
    return FakeAuditSession
