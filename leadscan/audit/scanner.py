"""Sequential page audit orchestration over a shared browser session.

This module provides the PageAuditOrchestrator that drives the browser
session and rule engine across the selected URLs of a run. Pages are
audited strictly one at a time: navigate, let deferred scripts settle,
evaluate, record exactly one outcome, then pause before the next
request. A failure on one page is recorded as that page's outcome and
never stops the run.
"""

import asyncio
import logging
import time
from typing import Awaitable, Callable, List, Optional, Protocol, Sequence

from pydantic import BaseModel, Field

from .capture.page_session import WaitStrategy
from .capture.rule_engine import EngineResult, WCAG_TAGS
from .models.audit import PageScanOutcome, Severity, ViolationRecord
from .queue.rate_limiter import RequestPacer


logger = logging.getLogger(__name__)


class PageAuditSession(Protocol):
    """Browser capability the orchestrator drives."""

    async def navigate(self, url: str, timeout_ms: int, wait_until: str) -> None: ...

    async def evaluate(self, tags: Sequence[str]) -> EngineResult: ...


class ScanConfig(BaseModel):
    """Timing and rule selection for page audits."""

    navigation_timeout_ms: int = Field(
        default=30000,
        ge=1000,
        le=300000,
        description="Navigation timeout in milliseconds"
    )
    wait_until: str = Field(
        default=WaitStrategy.DOMCONTENTLOADED,
        description="Navigation event treated as page loaded"
    )
    settle_delay_seconds: float = Field(
        default=2.0,
        ge=0.0,
        le=60.0,
        description="Pause after navigation for script-driven content to settle"
    )
    request_interval_seconds: float = Field(
        default=1.0,
        ge=0.0,
        le=60.0,
        description="Minimum pause between successive page requests"
    )
    tags: List[str] = Field(
        default_factory=lambda: list(WCAG_TAGS),
        description="Rule engine tags to evaluate"
    )


ProgressCallback = Callable[[int, int, PageScanOutcome], None]


def to_violation_records(result: EngineResult, page_url: str) -> List[ViolationRecord]:
    """Convert engine violations of one page into violation records."""
    return [
        ViolationRecord(
            rule_id=violation.rule_id,
            severity=Severity.from_impact(violation.impact),
            description=violation.description,
            help=violation.help,
            help_url=violation.help_url,
            wcag_tags=[tag for tag in violation.tags if tag.startswith('wcag')],
            page_url=page_url,
            occurrences=max(1, violation.node_count)
        )
        for violation in result.violations
    ]


class PageAuditOrchestrator:
    """Audits URLs one after another through a single shared session."""

    def __init__(
        self,
        session: PageAuditSession,
        config: Optional[ScanConfig] = None,
        pacer: Optional[RequestPacer] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    ):
        """Initialize orchestrator.

        Args:
            session: Shared browser session, exclusively used by this orchestrator
            config: Scan timing and rule configuration
            pacer: Politeness pacer; built from config when omitted
            sleep: Coroutine function used for the settle delay
        """
        self.session = session
        self.config = config or ScanConfig()
        self.pacer = pacer or RequestPacer(self.config.request_interval_seconds, sleep=sleep)
        self._sleep = sleep

    async def scan_page(self, url: str) -> PageScanOutcome:
        """Audit a single URL, converting any failure into a failure outcome."""
        start_time = time.monotonic()

        try:
            await self.session.navigate(
                url,
                timeout_ms=self.config.navigation_timeout_ms,
                wait_until=self.config.wait_until
            )

            if self.config.settle_delay_seconds > 0:
                await self._sleep(self.config.settle_delay_seconds)

            result = await self.session.evaluate(self.config.tags)

            return PageScanOutcome(
                url=url,
                violations=to_violation_records(result, url),
                passes=result.passes,
                incomplete=result.incomplete,
                scan_time_ms=_elapsed_ms(start_time)
            )

        except asyncio.CancelledError:
            raise
        except Exception as e:
            message = str(e) or type(e).__name__
            logger.warning(f"Failed to audit {url}: {message}")
            return PageScanOutcome.failure(url, message, scan_time_ms=_elapsed_ms(start_time))

    async def scan(
        self,
        urls: Sequence[str],
        progress: Optional[ProgressCallback] = None
    ) -> List[PageScanOutcome]:
        """Audit URLs in order, producing exactly one outcome per URL.

        Args:
            urls: URLs to audit, in scan order
            progress: Called with (index, total, outcome) after each page

        Returns:
            Outcomes in the same order as urls
        """
        outcomes: List[PageScanOutcome] = []
        total = len(urls)

        for index, url in enumerate(urls):
            if index > 0:
                await self.pacer.wait()

            logger.info(f"[{index + 1}/{total}] Scanning: {url}")
            outcome = await self.scan_page(url)
            self.pacer.mark()
            outcomes.append(outcome)

            if outcome.failed:
                logger.info(f"[{index + 1}/{total}] Error: {outcome.error}")
            elif outcome.violations:
                logger.info(f"[{index + 1}/{total}] {len(outcome.violations)} issues")
            else:
                logger.info(f"[{index + 1}/{total}] Clean")

            if progress:
                progress(index, total, outcome)

        return outcomes


def _elapsed_ms(start_time: float) -> int:
    return int((time.monotonic() - start_time) * 1000)
