"""Audit runner: site URL in, sealed profile and lead grade out.

The runner wires the pipeline together: sitemap discovery, URL
filtering, sequential page audits over one browser session, aggregation
and grading. Only initialization failures (a malformed site URL or a
browser that will not start) are raised to the caller. Missing sitemaps
and failing pages are absorbed and show up as data in the result.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence

from pydantic import BaseModel, Field

from .aggregation import ViolationAggregator
from .capture.browser_factory import BrowserConfig, BrowserFactory, BrowserStartError
from .grading import grade_profile
from .input.sitemap_resolver import SitemapResolver
from .models.audit import AuditProfile, LeadGrade
from .models.crawl import CandidateUrlSet, FilteredUrls
from .scanner import PageAuditOrchestrator, ProgressCallback, ScanConfig
from .utils.url_filter import DEFAULT_MAX_PAGES, filter_urls
from .utils.url_normalizer import URLNormalizationError, parse_http_url


logger = logging.getLogger(__name__)


class AuditInitializationError(Exception):
    """Raised when an audit cannot start: invalid site URL or no browser."""
    pass


class AuditResult(BaseModel):
    """Outcome of one audit run."""

    profile: AuditProfile = Field(description="Sealed aggregate of the run")
    candidates: CandidateUrlSet = Field(description="Discovered candidate URLs")
    selection: FilteredUrls = Field(description="URLs selected for scanning")

    @property
    def grade(self) -> LeadGrade:
        """Lead grade, always recomputed from the profile."""
        return grade_profile(self.profile)


class BatchEntry(BaseModel):
    """One site of a batch run."""

    site_url: str
    result: Optional[AuditResult] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.result is not None


BatchCallback = Callable[[BatchEntry], None]


class AuditRunner:
    """Runs complete audits for site URLs."""

    def __init__(
        self,
        scan_config: Optional[ScanConfig] = None,
        browser_config: Optional[BrowserConfig] = None,
        resolver: Optional[SitemapResolver] = None,
        aggregator: Optional[ViolationAggregator] = None,
        browser_factory: Optional[Callable[[BrowserConfig], BrowserFactory]] = None
    ):
        """Initialize audit runner.

        Args:
            scan_config: Page audit timing and rule selection
            browser_config: Browser launch configuration
            resolver: Sitemap resolver used for discovery
            aggregator: Aggregator building the profile
            browser_factory: Callable creating a BrowserFactory for a run
        """
        self.scan_config = scan_config or ScanConfig()
        self.browser_config = browser_config or BrowserConfig()
        self.resolver = resolver or SitemapResolver()
        self.aggregator = aggregator or ViolationAggregator()
        self._browser_factory = browser_factory or BrowserFactory

    @staticmethod
    def validate_site_url(site_url: str) -> str:
        """Validate the site URL before any work starts.

        Raises:
            AuditInitializationError: If the URL is not an absolute http(s) URL
        """
        try:
            parse_http_url(site_url)
        except URLNormalizationError as e:
            raise AuditInitializationError(f"Invalid URL provided: {e}") from e
        return site_url.strip()

    async def run_audit(
        self,
        site_url: str,
        max_pages: int = DEFAULT_MAX_PAGES,
        progress: Optional[ProgressCallback] = None
    ) -> AuditResult:
        """Run an audit for a site.

        Args:
            site_url: Absolute root URL of the site
            max_pages: Maximum number of pages to audit
            progress: Optional per-page progress callback

        Returns:
            AuditResult with the sealed profile; ``result.grade`` is its lead grade

        Raises:
            AuditInitializationError: If the URL is invalid, the page cap is not
                positive, or the browser session cannot start
        """
        site_url = self.validate_site_url(site_url)
        if isinstance(max_pages, bool) or not isinstance(max_pages, int) or max_pages < 1:
            raise AuditInitializationError(
                f"Invalid page cap {max_pages!r}. Must be a positive number."
            )

        logger.info(f"Target: {site_url} (max pages: {max_pages})")

        logger.info("Finding pages to scan...")
        candidates = await self.resolver.resolve(site_url)
        selection = filter_urls(candidates, max_pages)
        logger.info(f"Will scan {selection.selected} pages")

        factory = self._browser_factory(self.browser_config)
        try:
            async with factory.session() as session:
                orchestrator = PageAuditOrchestrator(session, self.scan_config)
                outcomes = await orchestrator.scan(selection.urls, progress=progress)
        except BrowserStartError as e:
            raise AuditInitializationError(str(e)) from e

        profile = self.aggregator.aggregate(
            site_url,
            outcomes,
            candidates=candidates,
            scanned_at=datetime.now(timezone.utc)
        )
        result = AuditResult(profile=profile, candidates=candidates, selection=selection)

        if profile.is_indeterminate:
            logger.warning(
                f"No page of {profile.site} could be audited; "
                f"grade {result.grade.value} reflects missing data, not compliance"
            )
        logger.info(f"Lead grade for {profile.site}: {result.grade.value}")
        return result

    async def run_batch(
        self,
        site_urls: Sequence[str],
        max_pages: int = DEFAULT_MAX_PAGES,
        on_result: Optional[BatchCallback] = None
    ) -> List[BatchEntry]:
        """Audit several sites one after another, each with its own browser.

        A site that fails to initialize is recorded and the batch continues.

        Args:
            site_urls: Root URLs to audit, in order
            max_pages: Maximum number of pages to audit per site
            on_result: Called with each entry as soon as its site is done,
                so completed sites survive an interrupted batch
        """
        entries: List[BatchEntry] = []

        for index, site_url in enumerate(site_urls):
            logger.info(f"Batch site {index + 1}/{len(site_urls)}: {site_url}")
            try:
                result = await self.run_audit(site_url, max_pages)
            except AuditInitializationError as e:
                logger.error(f"Audit of {site_url} could not start: {e}")
                entry = BatchEntry(site_url=site_url, error=str(e))
            else:
                entry = BatchEntry(site_url=site_url, result=result)

            entries.append(entry)
            if on_result:
                on_result(entry)

        return entries
