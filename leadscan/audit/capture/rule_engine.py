"""axe-core rule engine driven inside a Playwright page.

The engine injects axe-core into the loaded page when it is not already
present, runs it restricted to a set of rule tags, and converts the raw
JavaScript result into typed models.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from playwright.async_api import Page
from pydantic import BaseModel, Field


logger = logging.getLogger(__name__)


DEFAULT_AXE_SCRIPT_URL = "https://cdnjs.cloudflare.com/ajax/libs/axe-core/4.10.2/axe.min.js"

# WCAG 2.0 and 2.1, levels A and AA
WCAG_TAGS = ("wcag2a", "wcag2aa", "wcag21a", "wcag21aa")

_AXE_RUN_SCRIPT = """
async (tags) => {
    if (!window.axe || !window.axe.run) {
        return { error: 'axe not loaded' };
    }
    const res = await window.axe.run(document, {
        runOnly: { type: 'tag', values: tags }
    });
    return {
        violations: res.violations.map(v => ({
            id: v.id,
            impact: v.impact,
            description: v.description,
            help: v.help,
            helpUrl: v.helpUrl,
            tags: v.tags,
            nodeCount: v.nodes.length
        })),
        passes: res.passes.length,
        incomplete: res.incomplete.length
    };
}
"""


class RuleEngineError(Exception):
    """Raised when the rule engine cannot be loaded or returns bad data."""
    pass


class EngineViolation(BaseModel):
    """A failed rule as reported by the engine for one page."""

    rule_id: str = Field(description="Rule identifier")
    impact: Optional[str] = Field(default=None, description="Raw impact token")
    description: str = Field(default="")
    help: str = Field(default="")
    help_url: str = Field(default="")
    tags: List[str] = Field(default_factory=list)
    node_count: int = Field(default=0, ge=0, description="Number of affected nodes")


class EngineResult(BaseModel):
    """Evaluation result for one page."""

    violations: List[EngineViolation] = Field(default_factory=list)
    passes: int = Field(default=0, ge=0)
    incomplete: int = Field(default=0, ge=0)


def parse_engine_result(raw: Any) -> EngineResult:
    """Convert the raw object returned by the in-page script.

    Raises:
        RuleEngineError: If the result is not a well-formed axe summary
    """
    if not isinstance(raw, dict):
        raise RuleEngineError(f"Unexpected rule engine result: {type(raw).__name__}")

    if raw.get("error"):
        raise RuleEngineError(str(raw["error"]))

    violations = []
    for entry in raw.get("violations") or []:
        if not isinstance(entry, dict) or not entry.get("id"):
            raise RuleEngineError("Rule engine violation is missing an id")
        violations.append(EngineViolation(
            rule_id=entry["id"],
            impact=entry.get("impact"),
            description=entry.get("description") or "",
            help=entry.get("help") or "",
            help_url=entry.get("helpUrl") or "",
            tags=list(entry.get("tags") or []),
            node_count=_node_count(entry)
        ))

    return EngineResult(
        violations=violations,
        passes=_result_count(raw.get("passes")),
        incomplete=_result_count(raw.get("incomplete"))
    )


def _node_count(entry: Dict[str, Any]) -> int:
    if "nodeCount" in entry:
        return int(entry["nodeCount"] or 0)
    return len(entry.get("nodes") or [])


def _result_count(value: Any) -> int:
    # Full axe results carry lists, the summary script carries counts
    if isinstance(value, list):
        return len(value)
    return int(value or 0)


class AxeRuleEngine:
    """Runs axe-core inside a Playwright page."""

    def __init__(
        self,
        script_url: Optional[str] = DEFAULT_AXE_SCRIPT_URL,
        script_path: Optional[Path] = None
    ):
        """Initialize the rule engine.

        Args:
            script_url: URL of axe.min.js to inject
            script_path: Local axe.min.js, preferred over script_url when set
        """
        if not script_url and not script_path:
            raise ValueError("Either script_url or script_path is required")
        self.script_url = script_url
        self.script_path = Path(script_path) if script_path else None

    async def _ensure_loaded(self, page: Page) -> None:
        loaded = await page.evaluate("() => !!(window.axe && window.axe.run)")
        if loaded:
            return

        try:
            if self.script_path:
                await page.add_script_tag(path=str(self.script_path))
            else:
                await page.add_script_tag(url=self.script_url)
        except Exception as e:
            raise RuleEngineError(f"Failed to inject axe-core: {e}")

    async def evaluate(self, page: Page, tags: Sequence[str] = WCAG_TAGS) -> EngineResult:
        """Run the rule engine against the current page.

        Args:
            page: Loaded Playwright page
            tags: Rule tags to restrict the run to

        Returns:
            Parsed engine result
        """
        await self._ensure_loaded(page)
        raw = await page.evaluate(_AXE_RUN_SCRIPT, list(tags))
        result = parse_engine_result(raw)
        logger.debug(
            f"axe-core found {len(result.violations)} violations, "
            f"{result.passes} passes, {result.incomplete} incomplete"
        )
        return result
