"""Configuration system for the LeadScan CLI with precedence handling.

Configuration sources, highest precedence first:
CLI flags > environment variables > config file > auto-discovered file > defaults
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from ..audit.capture.browser_factory import BrowserConfig, DEFAULT_LAUNCH_ARGS
from ..audit.capture.page_session import WaitStrategy
from ..audit.capture.rule_engine import DEFAULT_AXE_SCRIPT_URL, WCAG_TAGS
from ..audit.input.sitemap_provider import DEFAULT_USER_AGENT
from ..audit.input.sitemap_resolver import SitemapResolver
from ..audit.scanner import ScanConfig
from ..audit.utils.url_filter import DEFAULT_MAX_PAGES


class ConfigurationError(Exception):
    """Raised when configuration cannot be loaded or is invalid."""
    pass


class DiscoveryConfig(BaseModel):
    """Sitemap discovery and page selection."""
    max_pages: int = Field(default=DEFAULT_MAX_PAGES, ge=1, description="Maximum pages to audit")
    sitemap_timeout_seconds: float = Field(
        default=30.0, gt=0.0, le=300.0, description="Timeout per probed sitemap location"
    )
    user_agent: str = Field(default=DEFAULT_USER_AGENT, description="User-Agent for sitemap requests")


class ScanSettings(BaseModel):
    """Per-page audit timing."""
    navigation_timeout_seconds: float = Field(default=30.0, ge=1.0, le=300.0)
    settle_delay_seconds: float = Field(default=2.0, ge=0.0, le=60.0)
    request_interval_seconds: float = Field(default=1.0, ge=0.0, le=60.0)
    wait_until: str = Field(default=WaitStrategy.DOMCONTENTLOADED)
    tags: List[str] = Field(default_factory=lambda: list(WCAG_TAGS))

    @field_validator('wait_until')
    @classmethod
    def validate_wait_until(cls, v):
        allowed = (WaitStrategy.LOAD, WaitStrategy.DOMCONTENTLOADED,
                   WaitStrategy.NETWORKIDLE, WaitStrategy.COMMIT)
        if v not in allowed:
            raise ValueError(f"wait_until must be one of: {', '.join(allowed)}")
        return v

    @field_validator('tags')
    @classmethod
    def validate_tags(cls, v):
        if not v:
            raise ValueError("at least one rule tag is required")
        return v


class BrowserSettings(BaseModel):
    """Browser launch options."""
    headless: bool = Field(default=True)
    window_width: int = Field(default=1920, ge=320)
    window_height: int = Field(default=1080, ge=240)
    user_agent: Optional[str] = Field(default=None, description="Browser User-Agent override")
    launch_args: List[str] = Field(default_factory=lambda: list(DEFAULT_LAUNCH_ARGS))
    axe_script_url: Optional[str] = Field(default=DEFAULT_AXE_SCRIPT_URL)
    axe_script_path: Optional[Path] = Field(default=None, description="Local axe.min.js")


class OutputConfig(BaseModel):
    """Output configuration options."""
    output_dir: Path = Field(default=Path("output"), description="Root folder for saved runs")
    verbose: bool = Field(default=False)
    quiet: bool = Field(default=False)
    json_output: bool = Field(default=False)


class CLIConfiguration(BaseModel):
    """Complete CLI configuration with all sections."""

    discovery: DiscoveryConfig = Field(default_factory=DiscoveryConfig)
    scan: ScanSettings = Field(default_factory=ScanSettings)
    browser: BrowserSettings = Field(default_factory=BrowserSettings)
    output: OutputConfig = Field(default_factory=OutputConfig)

    # Metadata
    config_file_path: Optional[Path] = Field(default=None, description="Source config file")
    loaded_from: List[str] = Field(default_factory=list, description="Configuration sources")

    def to_scan_config(self) -> ScanConfig:
        return ScanConfig(
            navigation_timeout_ms=int(self.scan.navigation_timeout_seconds * 1000),
            wait_until=self.scan.wait_until,
            settle_delay_seconds=self.scan.settle_delay_seconds,
            request_interval_seconds=self.scan.request_interval_seconds,
            tags=list(self.scan.tags)
        )

    def to_browser_config(self) -> BrowserConfig:
        return BrowserConfig(
            headless=self.browser.headless,
            viewport={'width': self.browser.window_width, 'height': self.browser.window_height},
            user_agent=self.browser.user_agent,
            launch_args=self.browser.launch_args,
            axe_script_url=self.browser.axe_script_url,
            axe_script_path=self.browser.axe_script_path
        )

    def to_resolver(self) -> SitemapResolver:
        return SitemapResolver(
            timeout=self.discovery.sitemap_timeout_seconds,
            user_agent=self.discovery.user_agent
        )


class ConfigurationLoader:
    """Loads and merges configuration from multiple sources with proper precedence."""

    ENV_PREFIX = "LEADSCAN_"

    # Searched in order
    DEFAULT_CONFIG_FILES = [
        "leadscan.yaml",
        "leadscan.yml",
        ".leadscan.yaml",
        ".leadscan.yml",
        "leadscan.json",
        ".leadscan.json"
    ]

    ENV_MAPPING = {
        "MAX_PAGES": "discovery.max_pages",
        "SITEMAP_TIMEOUT": "discovery.sitemap_timeout_seconds",
        "USER_AGENT": "discovery.user_agent",
        "NAVIGATION_TIMEOUT": "scan.navigation_timeout_seconds",
        "SETTLE_DELAY": "scan.settle_delay_seconds",
        "REQUEST_INTERVAL": "scan.request_interval_seconds",
        "WAIT_UNTIL": "scan.wait_until",
        "HEADLESS": "browser.headless",
        "AXE_SCRIPT_URL": "browser.axe_script_url",
        "AXE_SCRIPT_PATH": "browser.axe_script_path",
        "OUTPUT_DIR": "output.output_dir",
        "VERBOSE": "output.verbose",
        "QUIET": "output.quiet",
    }

    BOOLEAN_KEYS = ('.headless', '.verbose', '.quiet')
    INTEGER_KEYS = ('.max_pages',)
    FLOAT_KEYS = ('_seconds',)

    def __init__(self, environ: Optional[Dict[str, str]] = None):
        self.environ = environ if environ is not None else os.environ
        self.loaded_sources: List[str] = []

    def load_configuration(
        self,
        config_file: Optional[Path] = None,
        cli_overrides: Optional[Dict[str, Any]] = None,
        search_paths: Optional[List[Path]] = None
    ) -> CLIConfiguration:
        """Load configuration with proper precedence.

        Raises:
            ConfigurationError: If a file is missing or unreadable, or values are invalid
        """
        self.loaded_sources = ["defaults"]
        config_data: Dict[str, Any] = {}

        if config_file:
            config_file = Path(config_file)
            if not config_file.exists():
                raise ConfigurationError(f"Configuration file not found: {config_file}")
            config_data = self._merge_config(config_data, self._load_config_file(config_file))
            self.loaded_sources.append(f"config file: {config_file}")
        else:
            discovered = self._discover_config_file(search_paths or [Path.cwd()])
            if discovered:
                path, data = discovered
                config_data = self._merge_config(config_data, data)
                self.loaded_sources.append(f"auto-discovered: {path}")

        env_config = self._load_environment_variables()
        if env_config:
            config_data = self._merge_config(config_data, env_config)
            self.loaded_sources.append("environment variables")

        if cli_overrides:
            config_data = self._merge_config(config_data, cli_overrides)
            self.loaded_sources.append("CLI flags")

        config_data["loaded_from"] = self.loaded_sources
        if config_file:
            config_data["config_file_path"] = config_file

        try:
            return CLIConfiguration(**config_data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

    def _discover_config_file(self, search_paths: List[Path]):
        for search_path in search_paths:
            for config_filename in self.DEFAULT_CONFIG_FILES:
                config_path = Path(search_path) / config_filename
                if config_path.is_file():
                    return config_path, self._load_config_file(config_path)
        return None

    def _load_config_file(self, config_path: Path) -> Dict[str, Any]:
        """Load configuration from a YAML or JSON file."""
        suffix = config_path.suffix.lower()
        if suffix not in ('.yaml', '.yml', '.json'):
            raise ConfigurationError(f"Unsupported config file format: {config_path.suffix}")

        try:
            content = config_path.read_text(encoding='utf-8')
            if suffix == '.json':
                data = json.loads(content)
            else:
                data = yaml.safe_load(content) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in config file {config_path}: {e}")
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in config file {config_path}: {e}")
        except OSError as e:
            raise ConfigurationError(f"Error loading config file {config_path}: {e}")

        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {config_path} must contain a mapping")
        return data

    def _load_environment_variables(self) -> Dict[str, Any]:
        config: Dict[str, Any] = {}
        for suffix, config_path in self.ENV_MAPPING.items():
            env_value = self.environ.get(f"{self.ENV_PREFIX}{suffix}")
            if env_value is not None:
                self._set_nested_value(config, config_path, self._convert_env_value(env_value, config_path))
        return config

    def _convert_env_value(self, value: str, config_path: str) -> Any:
        """Convert environment variable string to appropriate type."""
        if config_path.endswith(self.BOOLEAN_KEYS):
            return value.lower() in ('true', '1', 'yes', 'on')

        try:
            if config_path.endswith(self.INTEGER_KEYS):
                return int(value)
            if config_path.endswith(self.FLOAT_KEYS):
                return float(value)
        except ValueError:
            raise ConfigurationError(f"Invalid numeric value for {config_path}: {value!r}")

        if config_path.endswith('_path') or config_path.endswith('_dir'):
            return Path(value) if value else None

        return value

    def _set_nested_value(self, config: Dict[str, Any], path: str, value: Any):
        """Set a nested configuration value using dot notation."""
        keys = path.split('.')
        current = config
        for key in keys[:-1]:
            current = current.setdefault(key, {})
        current[keys[-1]] = value

    def _merge_config(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Merge configuration dictionaries, with override taking precedence."""
        if not override:
            return base

        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_config(result[key], value)
            else:
                result[key] = value
        return result


def load_configuration(
    config_file: Optional[Path] = None,
    cli_overrides: Optional[Dict[str, Any]] = None,
    search_paths: Optional[List[Path]] = None
) -> CLIConfiguration:
    """Convenience function to load configuration."""
    return ConfigurationLoader().load_configuration(config_file, cli_overrides, search_paths)


def print_configuration(config: CLIConfiguration, format: str = "yaml") -> str:
    """Render the effective configuration for debugging."""
    config_dict = config.model_dump(
        mode="json",
        exclude={'loaded_from', 'config_file_path'}
    )

    if format.lower() == "json":
        return json.dumps(config_dict, indent=2, default=str)
    return yaml.safe_dump(config_dict, default_flow_style=False, sort_keys=True)
