"""Unit tests for saved audit results."""

import json
from datetime import datetime

import pytest

from leadscan.audit.aggregation import ViolationAggregator
from leadscan.audit.models.crawl import CandidateUrlSet, DiscoverySource
from leadscan.audit.runner import AuditResult
from leadscan.audit.storage import (
    RESULTS_FILENAME,
    find_result,
    load_result,
    load_results,
    run_folder_name,
    save_result
)
from leadscan.audit.utils.url_filter import filter_urls


@pytest.fixture
def audit_result(sample_outcomes):
    candidates = CandidateUrlSet(
        urls=[o.url for o in sample_outcomes],
        source=DiscoverySource.SITEMAP,
        sitemap_url="https://www.example.org/sitemap.xml"
    )
    profile = ViolationAggregator().aggregate(
        "https://www.example.org",
        sample_outcomes,
        candidates=candidates,
        scanned_at=datetime(2026, 3, 1, 9, 30)
    )
    return AuditResult(profile=profile, candidates=candidates, selection=filter_urls(candidates, 10))


class TestSaveResult:
    """Tests for save_result."""

    def test_folder_name(self, audit_result):
        assert run_folder_name(audit_result.profile) == "www-example-org-2026-03-01"

    def test_writes_profile_and_grade(self, audit_result, tmp_path):
        folder = save_result(audit_result, tmp_path)

        assert folder == tmp_path / "www-example-org-2026-03-01"
        data = json.loads((folder / RESULTS_FILENAME).read_text())
        assert data["site"] == "www.example.org"
        assert data["total_violations"] == 11
        assert data["lead_grade"] == "A"
        assert data["by_severity"]["serious"] == 7

    def test_same_day_rerun_overwrites(self, audit_result, tmp_path):
        save_result(audit_result, tmp_path)
        save_result(audit_result, tmp_path)

        assert len(list(tmp_path.iterdir())) == 1


class TestLoadResults:
    """Tests for reading saved runs back."""

    def test_round_trip(self, audit_result, tmp_path):
        folder = save_result(audit_result, tmp_path)

        profile = load_result(folder / RESULTS_FILENAME)

        assert profile == audit_result.profile

    def test_load_results_skips_bad_entries(self, audit_result, tmp_path, caplog):
        save_result(audit_result, tmp_path)
        (tmp_path / "broken-site").mkdir()
        (tmp_path / "broken-site" / RESULTS_FILENAME).write_text("{not json")
        (tmp_path / "empty-folder").mkdir()
        (tmp_path / "notes.txt").write_text("ignored")

        results = load_results(tmp_path)

        assert [r.folder for r in results] == ["www-example-org-2026-03-01"]
        assert "Cannot read saved results" in caplog.text

    def test_missing_root(self, tmp_path):
        assert load_results(tmp_path / "missing") == []

    def test_invalid_profile(self, tmp_path):
        path = tmp_path / RESULTS_FILENAME
        path.write_text(json.dumps({"site": "example.com"}))

        with pytest.raises(ValueError, match="Invalid saved results"):
            load_result(path)

    def test_non_object(self, tmp_path):
        path = tmp_path / RESULTS_FILENAME
        path.write_text("[]")

        with pytest.raises(ValueError, match="not an object"):
            load_result(path)

    def test_find_result(self, audit_result, tmp_path):
        save_result(audit_result, tmp_path)

        stored = find_result(tmp_path, "www-example-org-2026-03-01")

        assert stored.profile.site == "www.example.org"
        assert find_result(tmp_path, "nope") is None
