"""Unit tests for CLI configuration loading and precedence."""

import json
from pathlib import Path

import pytest

from leadscan.cli.config import (
    CLIConfiguration,
    ConfigurationError,
    ConfigurationLoader,
    print_configuration
)


class TestDefaults:
    """Tests for default configuration."""

    def test_defaults(self, tmp_path):
        config = ConfigurationLoader(environ={}).load_configuration(search_paths=[tmp_path])

        assert config.discovery.max_pages == 10
        assert config.discovery.sitemap_timeout_seconds == 30.0
        assert config.scan.settle_delay_seconds == 2.0
        assert config.scan.request_interval_seconds == 1.0
        assert config.browser.headless is True
        assert config.output.output_dir == Path("output")
        assert config.loaded_from == ["defaults"]

    def test_conversions(self):
        config = CLIConfiguration()

        scan_config = config.to_scan_config()
        browser_config = config.to_browser_config()
        resolver = config.to_resolver()

        assert scan_config.navigation_timeout_ms == 30000
        assert scan_config.wait_until == "domcontentloaded"
        assert browser_config.viewport == {'width': 1920, 'height': 1080}
        assert resolver.timeout == 30.0


class TestPrecedence:
    """Tests for source precedence."""

    def test_config_file(self, tmp_path):
        config_file = tmp_path / "custom.yaml"
        config_file.write_text("discovery:\n  max_pages: 25\nscan:\n  settle_delay_seconds: 0.5\n")

        config = ConfigurationLoader(environ={}).load_configuration(config_file=config_file)

        assert config.discovery.max_pages == 25
        assert config.scan.settle_delay_seconds == 0.5
        assert config.config_file_path == config_file

    def test_auto_discovered_file(self, tmp_path):
        (tmp_path / "leadscan.json").write_text(json.dumps({"browser": {"headless": False}}))

        config = ConfigurationLoader(environ={}).load_configuration(search_paths=[tmp_path])

        assert config.browser.headless is False
        assert any("auto-discovered" in source for source in config.loaded_from)

    def test_environment_overrides_file(self, tmp_path):
        config_file = tmp_path / "leadscan.yaml"
        config_file.write_text("discovery:\n  max_pages: 25\n")
        environ = {
            "LEADSCAN_MAX_PAGES": "40",
            "LEADSCAN_HEADLESS": "false",
            "LEADSCAN_REQUEST_INTERVAL": "2.5",
            "LEADSCAN_OUTPUT_DIR": "/tmp/leads",
        }

        config = ConfigurationLoader(environ=environ).load_configuration(config_file=config_file)

        assert config.discovery.max_pages == 40
        assert config.browser.headless is False
        assert config.scan.request_interval_seconds == 2.5
        assert config.output.output_dir == Path("/tmp/leads")

    def test_cli_overrides_environment(self, tmp_path):
        config = ConfigurationLoader(environ={"LEADSCAN_MAX_PAGES": "40"}).load_configuration(
            cli_overrides={"discovery": {"max_pages": 3}},
            search_paths=[tmp_path]
        )

        assert config.discovery.max_pages == 3
        assert config.loaded_from[-1] == "CLI flags"


class TestErrors:
    """Tests for configuration errors."""

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            ConfigurationLoader(environ={}).load_configuration(config_file=tmp_path / "nope.yaml")

    def test_unsupported_format(self, tmp_path):
        config_file = tmp_path / "leadscan.toml"
        config_file.write_text("[discovery]")

        with pytest.raises(ConfigurationError, match="Unsupported"):
            ConfigurationLoader(environ={}).load_configuration(config_file=config_file)

    def test_invalid_yaml(self, tmp_path):
        config_file = tmp_path / "leadscan.yaml"
        config_file.write_text("discovery: [unclosed\n")

        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            ConfigurationLoader(environ={}).load_configuration(config_file=config_file)

    def test_invalid_value(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Invalid configuration"):
            ConfigurationLoader(environ={}).load_configuration(
                cli_overrides={"discovery": {"max_pages": 0}},
                search_paths=[tmp_path]
            )

    def test_invalid_wait_until(self, tmp_path):
        with pytest.raises(ConfigurationError):
            ConfigurationLoader(environ={"LEADSCAN_WAIT_UNTIL": "whenever"}).load_configuration(
                search_paths=[tmp_path]
            )

    def test_invalid_numeric_env(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Invalid numeric value"):
            ConfigurationLoader(environ={"LEADSCAN_MAX_PAGES": "many"}).load_configuration(
                search_paths=[tmp_path]
            )


class TestPrintConfiguration:
    """Tests for print_configuration."""

    def test_yaml_and_json(self):
        config = CLIConfiguration()

        assert "max_pages: 10" in print_configuration(config)
        assert json.loads(print_configuration(config, format="json"))["discovery"]["max_pages"] == 10
