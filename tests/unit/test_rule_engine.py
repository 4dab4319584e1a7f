"""Unit tests for axe-core result parsing and injection."""

import pytest
from pathlib import Path
from unittest.mock import AsyncMock

from leadscan.audit.capture.rule_engine import (
    AxeRuleEngine,
    DEFAULT_AXE_SCRIPT_URL,
    RuleEngineError,
    WCAG_TAGS,
    parse_engine_result
)


RAW_SUMMARY = {
    "violations": [
        {
            "id": "image-alt",
            "impact": "critical",
            "description": "Ensures <img> elements have alternate text",
            "help": "Images must have alternate text",
            "helpUrl": "https://dequeuniversity.com/rules/axe/4.10/image-alt",
            "tags": ["cat.text-alternatives", "wcag2a", "wcag111"],
            "nodeCount": 4
        },
        {
            "id": "region",
            "impact": None,
            "tags": ["best-practice"],
            "nodeCount": 1
        }
    ],
    "passes": 31,
    "incomplete": 2
}


class TestParseEngineResult:
    """Tests for parse_engine_result."""

    def test_summary_result(self):
        result = parse_engine_result(RAW_SUMMARY)

        assert [v.rule_id for v in result.violations] == ["image-alt", "region"]
        first = result.violations[0]
        assert first.impact == "critical"
        assert first.node_count == 4
        assert first.help_url.endswith("image-alt")
        assert result.violations[1].impact is None
        assert result.violations[1].description == ""
        assert result.passes == 31
        assert result.incomplete == 2

    def test_full_axe_result(self):
        """Full axe output carries node and rule lists instead of counts."""
        raw = {
            "violations": [{"id": "label", "impact": "serious", "nodes": [{}, {}, {}]}],
            "passes": [{"id": "a"}, {"id": "b"}],
            "incomplete": []
        }

        result = parse_engine_result(raw)

        assert result.violations[0].node_count == 3
        assert result.passes == 2
        assert result.incomplete == 0

    def test_clean_page(self):
        result = parse_engine_result({"violations": [], "passes": 40, "incomplete": 0})
        assert result.violations == []
        assert result.passes == 40

    def test_error_result(self):
        with pytest.raises(RuleEngineError, match="axe not loaded"):
            parse_engine_result({"error": "axe not loaded"})

    def test_non_dict_result(self):
        with pytest.raises(RuleEngineError, match="NoneType"):
            parse_engine_result(None)

    def test_violation_without_id(self):
        with pytest.raises(RuleEngineError, match="missing an id"):
            parse_engine_result({"violations": [{"impact": "minor"}]})


class TestAxeRuleEngine:
    """Tests for AxeRuleEngine."""

    def test_requires_a_script_source(self):
        with pytest.raises(ValueError):
            AxeRuleEngine(script_url=None, script_path=None)

    def test_defaults(self):
        engine = AxeRuleEngine()
        assert engine.script_url == DEFAULT_AXE_SCRIPT_URL
        assert engine.script_path is None
        assert WCAG_TAGS == ("wcag2a", "wcag2aa", "wcag21a", "wcag21aa")

    @pytest.mark.asyncio
    async def test_injects_when_missing(self):
        page = AsyncMock()
        page.evaluate.side_effect = [False, RAW_SUMMARY]
        engine = AxeRuleEngine()

        result = await engine.evaluate(page, WCAG_TAGS)

        page.add_script_tag.assert_awaited_once_with(url=DEFAULT_AXE_SCRIPT_URL)
        run_call = page.evaluate.await_args_list[1]
        assert run_call.args[1] == list(WCAG_TAGS)
        assert len(result.violations) == 2

    @pytest.mark.asyncio
    async def test_skips_injection_when_loaded(self):
        page = AsyncMock()
        page.evaluate.side_effect = [True, RAW_SUMMARY]

        await AxeRuleEngine().evaluate(page)

        page.add_script_tag.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_local_script_preferred(self, tmp_path):
        script = tmp_path / "axe.min.js"
        script.write_text("window.axe = {};")
        page = AsyncMock()
        page.evaluate.side_effect = [False, RAW_SUMMARY]

        await AxeRuleEngine(script_path=script).evaluate(page)

        page.add_script_tag.assert_awaited_once_with(path=str(Path(script)))

    @pytest.mark.asyncio
    async def test_injection_failure(self):
        page = AsyncMock()
        page.evaluate.return_value = False
        page.add_script_tag.side_effect = Exception("net::ERR_BLOCKED_BY_CLIENT")

        with pytest.raises(RuleEngineError, match="Failed to inject axe-core"):
            await AxeRuleEngine().evaluate(page)
