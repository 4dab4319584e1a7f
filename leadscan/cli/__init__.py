"""CLI module for LeadScan.

This package provides the command-line interface for running audits,
batch scans and the lead summary.
"""

from .config import CLIConfiguration, ConfigurationError, ConfigurationLoader, load_configuration
from .main import ExitCode, app

__all__ = [
    'app',
    'ExitCode',
    'CLIConfiguration',
    'ConfigurationError',
    'ConfigurationLoader',
    'load_configuration',
]
