"""Browser factory for launching the headless browser used by an audit run.

This module provides the BrowserFactory class that handles Playwright and
browser lifecycle, context configuration and cleanup, and hands out the
single shared AuditSession a run audits all of its pages through.
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncGenerator, Dict, List, Optional

from playwright.async_api import Browser, BrowserContext, Playwright, async_playwright

from .page_session import AuditSession
from .rule_engine import AxeRuleEngine, DEFAULT_AXE_SCRIPT_URL


logger = logging.getLogger(__name__)


DEFAULT_LAUNCH_ARGS = [
    '--no-sandbox',
    '--disable-setuid-sandbox',
    '--disable-dev-shm-usage',
]


class BrowserStartError(Exception):
    """Raised when the browser or its page could not be started."""
    pass


class BrowserConfig:
    """Configuration for browser launch and context setup."""

    def __init__(
        self,
        headless: bool = True,
        viewport: Optional[Dict[str, int]] = None,
        user_agent: Optional[str] = None,
        launch_args: Optional[List[str]] = None,
        ignore_https_errors: bool = False,
        axe_script_url: Optional[str] = DEFAULT_AXE_SCRIPT_URL,
        axe_script_path: Optional[Path] = None,
        **kwargs
    ):
        """Initialize browser configuration.

        Args:
            headless: Run browser in headless mode
            viewport: Viewport size dict with 'width' and 'height'
            user_agent: Custom User-Agent string
            launch_args: Extra Chromium command line switches
            ignore_https_errors: Ignore SSL/TLS certificate errors
            axe_script_url: URL of axe.min.js injected into audited pages
            axe_script_path: Local axe.min.js, preferred over the URL
        """
        self.headless = headless
        self.viewport = viewport or {'width': 1920, 'height': 1080}
        self.user_agent = user_agent
        self.launch_args = list(launch_args) if launch_args is not None else list(DEFAULT_LAUNCH_ARGS)
        self.ignore_https_errors = ignore_https_errors
        self.axe_script_url = axe_script_url
        self.axe_script_path = axe_script_path
        self.extra_options = kwargs

    def to_browser_options(self) -> Dict[str, Any]:
        """Convert to Playwright browser launch options."""
        options = {
            'headless': self.headless,
            'args': self.launch_args,
        }
        options.update(self.extra_options)
        return options

    def to_context_options(self) -> Dict[str, Any]:
        """Convert to Playwright browser context options."""
        options = {}

        if self.viewport:
            options['viewport'] = self.viewport

        if self.user_agent:
            options['user_agent'] = self.user_agent

        if self.ignore_https_errors:
            options['ignore_https_errors'] = self.ignore_https_errors

        return options

    def create_rule_engine(self) -> AxeRuleEngine:
        return AxeRuleEngine(script_url=self.axe_script_url, script_path=self.axe_script_path)


class BrowserFactory:
    """Factory for starting Playwright Chromium and opening the audit session."""

    def __init__(self, config: Optional[BrowserConfig] = None):
        self.config = config or BrowserConfig()
        self.playwright: Optional[Playwright] = None
        self.browser: Optional[Browser] = None

    async def start(self) -> None:
        """Start Playwright and launch the browser.

        Raises:
            BrowserStartError: If Playwright or Chromium fails to start
        """
        if self.playwright is not None:
            logger.warning("Browser factory already started")
            return

        logger.info(f"Launching browser (headless={self.config.headless})")

        try:
            self.playwright = await async_playwright().start()
            self.browser = await self.playwright.chromium.launch(**self.config.to_browser_options())
        except Exception as e:
            logger.error(f"Failed to start browser: {e}")
            await self.stop()
            raise BrowserStartError(f"Browser session could not start: {e}") from e

        logger.info("Browser launched successfully")

    async def stop(self) -> None:
        """Stop browser and cleanup resources."""
        try:
            if self.browser:
                await self.browser.close()
            if self.playwright:
                await self.playwright.stop()
        except Exception as e:
            logger.error(f"Error stopping browser factory: {e}")
        finally:
            self.browser = None
            self.playwright = None

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AuditSession, None]:
        """Context manager yielding the single shared audit session of a run.

        Raises:
            BrowserStartError: If the browser, context or page cannot be created
        """
        await self.start()
        context: Optional[BrowserContext] = None
        try:
            try:
                context = await self.browser.new_context(**self.config.to_context_options())
                page = await context.new_page()
            except Exception as e:
                raise BrowserStartError(f"Browser page could not be opened: {e}") from e

            yield AuditSession(page, self.config.create_rule_engine())
        finally:
            if context is not None:
                try:
                    await context.close()
                except Exception as e:
                    logger.warning(f"Error closing browser context: {e}")
            await self.stop()

    @property
    def is_running(self) -> bool:
        return self.browser is not None

    def __repr__(self) -> str:
        return f"BrowserFactory(headless={self.config.headless}, running={self.is_running})"
