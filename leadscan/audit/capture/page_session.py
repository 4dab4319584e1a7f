"""Shared page session used to audit every URL of a run.

One Playwright page is reused for all URLs in a run. The session exposes
the two operations the audit orchestrator needs: navigating to a URL and
evaluating the rule engine against whatever is loaded.
"""

import logging
from typing import Optional, Sequence

from playwright.async_api import Page

from .rule_engine import AxeRuleEngine, EngineResult, WCAG_TAGS


logger = logging.getLogger(__name__)


class WaitStrategy:
    """Navigation completion events accepted by Playwright."""
    LOAD = "load"
    DOMCONTENTLOADED = "domcontentloaded"
    NETWORKIDLE = "networkidle"
    COMMIT = "commit"


class AuditSession:
    """Navigate-and-evaluate capability over a single shared page."""

    def __init__(self, page: Page, rule_engine: Optional[AxeRuleEngine] = None):
        """Initialize audit session.

        Args:
            page: Playwright page owned by this session
            rule_engine: Rule engine to evaluate pages with
        """
        self.page = page
        self.rule_engine = rule_engine or AxeRuleEngine()
        self.pages_visited = 0

    async def navigate(
        self,
        url: str,
        timeout_ms: int = 30000,
        wait_until: str = WaitStrategy.DOMCONTENTLOADED
    ) -> None:
        """Load a URL in the shared page.

        Error status pages are still audited; only failures to load raise.

        Raises:
            playwright.async_api.Error: If navigation failed or timed out
        """
        logger.debug(f"Navigating to {url} (wait_until={wait_until}, timeout={timeout_ms}ms)")
        response = await self.page.goto(url, wait_until=wait_until, timeout=timeout_ms)
        self.pages_visited += 1

        if response is not None and response.status >= 400:
            logger.warning(f"HTTP {response.status} loading {url}")

    async def evaluate(self, tags: Sequence[str] = WCAG_TAGS) -> EngineResult:
        """Evaluate the rule engine against the loaded page."""
        return await self.rule_engine.evaluate(self.page, tags)
