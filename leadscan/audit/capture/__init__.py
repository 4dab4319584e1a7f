"""Browser capture package for LeadScan.

Main Components:
- Browser Factory: Playwright Chromium lifecycle and the shared audit session
- Audit Session: navigate-and-evaluate capability over one page
- Rule Engine: axe-core injection and result parsing

Usage:
    from leadscan.audit.capture import BrowserFactory

    async with BrowserFactory().session() as session:
        await session.navigate("https://example.com")
        result = await session.evaluate()
"""

from .browser_factory import BrowserFactory, BrowserConfig, BrowserStartError
from .page_session import AuditSession, WaitStrategy
from .rule_engine import (
    AxeRuleEngine,
    EngineResult,
    EngineViolation,
    RuleEngineError,
    WCAG_TAGS,
    parse_engine_result,
)

__all__ = [
    "BrowserFactory",
    "BrowserConfig",
    "BrowserStartError",
    "AuditSession",
    "WaitStrategy",
    "AxeRuleEngine",
    "EngineResult",
    "EngineViolation",
    "RuleEngineError",
    "WCAG_TAGS",
    "parse_engine_result",
]
