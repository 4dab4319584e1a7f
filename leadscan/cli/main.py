#!/usr/bin/env python3
"""Main CLI entry point for LeadScan using Typer."""

import asyncio
import json
import logging
import traceback
from enum import IntEnum
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer
from typing_extensions import Annotated

from .. import __version__
from ..audit.grading import grade_profile
from ..audit.leads import GRADE_ORDER, LeadSummary, summarize_leads
from ..audit.models.audit import AuditProfile, LeadGrade
from ..audit.runner import AuditInitializationError, AuditResult, AuditRunner, BatchEntry
from ..audit.storage import find_result, load_results, save_result
from .config import CLIConfiguration, ConfigurationError, load_configuration, print_configuration


logger = logging.getLogger(__name__)


class ExitCode(IntEnum):
    """CLI exit codes."""
    SUCCESS = 0
    PARTIAL_FAILURE = 1   # Some sites of a batch could not be audited
    CONFIG_ERROR = 3      # Configuration, input or setup error
    RUNTIME_ERROR = 4     # Unexpected error during execution


app = typer.Typer(
    name="leadscan",
    help="LeadScan - sitemap-driven accessibility audits graded for outreach",
    add_completion=False
)


def configure_logging(verbose: bool = False, quiet: bool = False) -> None:
    level = logging.INFO
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        force=True
    )


def _build_overrides(
    max_pages: Optional[int] = None,
    out: Optional[Path] = None,
    headful: bool = False,
    verbose: bool = False,
    quiet: bool = False,
    json_output: bool = False
) -> Dict[str, Any]:
    """Only flags that were explicitly set override lower-precedence sources."""
    overrides: Dict[str, Any] = {}
    if max_pages is not None:
        overrides.setdefault("discovery", {})["max_pages"] = max_pages
    if out is not None:
        overrides.setdefault("output", {})["output_dir"] = out
    if headful:
        overrides.setdefault("browser", {})["headless"] = False
    if verbose:
        overrides.setdefault("output", {})["verbose"] = True
    if quiet:
        overrides.setdefault("output", {})["quiet"] = True
    if json_output:
        overrides.setdefault("output", {})["json_output"] = True
    return overrides


def _load_config(config_file: Optional[Path], overrides: Dict[str, Any]) -> CLIConfiguration:
    try:
        config = load_configuration(config_file=config_file, cli_overrides=overrides)
    except ConfigurationError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(code=ExitCode.CONFIG_ERROR.value)
    configure_logging(config.output.verbose, config.output.quiet)
    return config


def _runtime_failure(error: Exception, verbose: bool):
    typer.echo(f"Runtime error: {error}", err=True)
    if verbose:
        traceback.print_exc()
    raise typer.Exit(code=ExitCode.RUNTIME_ERROR.value)


def create_runner(config: CLIConfiguration) -> AuditRunner:
    return AuditRunner(
        scan_config=config.to_scan_config(),
        browser_config=config.to_browser_config(),
        resolver=config.to_resolver()
    )


def format_result(result: AuditResult) -> str:
    """Short console summary of one run."""
    return format_profile(result.profile, result.grade)


def format_profile(profile: AuditProfile, grade: LeadGrade) -> str:
    tally = profile.by_severity
    lines = [
        f"Domain: {profile.site}",
        f"Scanned: {profile.scanned_at.isoformat()}",
        f"Pages scanned: {profile.pages_scanned}",
        f"Pages with errors: {profile.pages_failed}",
        f"Discovery: {profile.discovery_source} ({profile.urls_found} URLs found)",
        "",
        "Violations by severity:",
        f"  Critical: {tally.critical}",
        f"  Serious:  {tally.serious}",
        f"  Moderate: {tally.moderate}",
        f"  Minor:    {tally.minor}",
        f"  Total:    {tally.total}",
    ]

    if profile.top_issues:
        lines.append("")
        lines.append("Top issues:")
        for i, issue in enumerate(profile.top_issues, 1):
            lines.append(f"  {i}. [{issue.severity.value.upper()}] {issue.rule_id} ({issue.count} instances)")

    lines.append("")
    lines.append(f"Lead qualification: {grade.label}")
    if profile.is_indeterminate:
        lines.append("  Warning: no page could be audited, the grade reflects missing data")
    return "\n".join(lines)


def format_lead_summary(summary: LeadSummary) -> str:
    """Console rendering of the cross-site lead summary."""
    lines = [
        f"Total scanned: {summary.total_scanned}",
        f"A-Leads (Hot):  {summary.count(LeadGrade.A)}",
        f"B-Leads (Warm): {summary.count(LeadGrade.B)}",
        f"C-Leads (Cool): {summary.count(LeadGrade.C)}",
        f"Skip (Clean):   {summary.count(LeadGrade.SKIP)}",
    ]

    for grade in GRADE_ORDER:
        entries = summary.entries(grade)
        lines.append("")
        lines.append(f"{grade.label.split(':')[0]} - {len(entries)} found")
        if not entries:
            lines.append("  None")
        for i, entry in enumerate(entries, 1):
            flag = " (no pages audited)" if entry.indeterminate else ""
            lines.append(
                f"  {i}. {entry.domain}: {entry.total} violations "
                f"({entry.critical} critical, {entry.serious} serious){flag}"
            )
            if entry.top_issue and grade in (LeadGrade.A, LeadGrade.B):
                lines.append(f"     Top issue: {entry.top_issue}")
            lines.append(f"     Folder: {entry.folder}")

    return "\n".join(lines)


@app.command(name="version")
def show_version():
    """Show version information."""
    typer.echo(f"LeadScan v{__version__}")


@app.command()
def run(
    url: Annotated[str, typer.Argument(help="Root URL of the site to audit")],
    max_pages: Annotated[
        Optional[int],
        typer.Option("--pages", "-p", min=1, help="Maximum pages to scan")
    ] = None,
    config_file: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to configuration file")
    ] = None,
    out: Annotated[
        Optional[Path],
        typer.Option("--out", "-o", help="Root folder for saved results")
    ] = None,
    headful: Annotated[bool, typer.Option("--headful", help="Run browser with GUI")] = False,
    json_output: Annotated[bool, typer.Option("--json", help="Print the profile as JSON")] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Verbose output")] = False,
    quiet: Annotated[bool, typer.Option("--quiet", "-q", help="Minimal output")] = False,
    print_config: Annotated[
        bool,
        typer.Option("--print-config", help="Print effective configuration and exit")
    ] = False,
):
    """
    Audit one site and grade it as a lead.

    Examples:

        leadscan run https://www.example.org

        leadscan run https://www.example.org --pages 25
    """
    config = _load_config(config_file, _build_overrides(max_pages, out, headful, verbose, quiet, json_output))

    if print_config:
        typer.echo(print_configuration(config))
        raise typer.Exit()

    runner = create_runner(config)
    try:
        result = asyncio.run(runner.run_audit(url, config.discovery.max_pages))
    except AuditInitializationError as e:
        typer.echo(f"Audit failed: {e}", err=True)
        raise typer.Exit(code=ExitCode.CONFIG_ERROR.value)
    except KeyboardInterrupt:
        typer.echo("Operation interrupted by user", err=True)
        raise typer.Exit(code=ExitCode.RUNTIME_ERROR.value)
    except Exception as e:
        _runtime_failure(e, config.output.verbose)

    folder = save_result(result, config.output.output_dir)

    if config.output.json_output:
        payload = result.profile.model_dump(mode="json")
        payload["lead_grade"] = result.grade.value
        typer.echo(json.dumps(payload, indent=2))
    else:
        typer.echo(format_result(result))
        typer.echo(f"\nAll outputs saved to: {folder}")


def read_site_list(path: Path) -> List[str]:
    """Read one site URL per line, ignoring blank lines and # comments."""
    sites = []
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if line and not line.startswith("#"):
            sites.append(line.split()[0])
    return sites


@app.command()
def batch(
    sites_file: Annotated[Path, typer.Argument(help="File with one site URL per line")],
    max_pages: Annotated[
        Optional[int],
        typer.Option("--pages", "-p", min=1, help="Maximum pages to scan per site")
    ] = None,
    config_file: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to configuration file")
    ] = None,
    out: Annotated[
        Optional[Path],
        typer.Option("--out", "-o", help="Root folder for saved results")
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Verbose output")] = False,
    quiet: Annotated[bool, typer.Option("--quiet", "-q", help="Minimal output")] = False,
):
    """Audit several sites one after another and save each run."""
    if not sites_file.exists():
        typer.echo(f"Sites file not found: {sites_file}", err=True)
        raise typer.Exit(code=ExitCode.CONFIG_ERROR.value)

    config = _load_config(config_file, _build_overrides(max_pages, out, verbose=verbose, quiet=quiet))
    sites = read_site_list(sites_file)
    if not sites:
        typer.echo(f"No sites listed in {sites_file}", err=True)
        raise typer.Exit(code=ExitCode.CONFIG_ERROR.value)
    logger.info(f"Loaded {len(sites)} sites from {sites_file}")

    runner = create_runner(config)
    failures: List[BatchEntry] = []

    def save_entry(entry: BatchEntry) -> None:
        if entry.succeeded:
            folder = save_result(entry.result, config.output.output_dir)
            typer.echo(f"{entry.result.grade.value:>4}  {entry.site_url}  -> {folder}")
        else:
            failures.append(entry)
            typer.echo(f"FAIL  {entry.site_url}  ({entry.error})")

    try:
        entries = asyncio.run(
            runner.run_batch(sites, config.discovery.max_pages, on_result=save_entry)
        )
    except KeyboardInterrupt:
        typer.echo("Operation interrupted by user", err=True)
        raise typer.Exit(code=ExitCode.RUNTIME_ERROR.value)
    except Exception as e:
        _runtime_failure(e, config.output.verbose)

    typer.echo(f"\nBatch complete: {len(entries) - len(failures)} audited, {len(failures)} failed")
    if failures:
        raise typer.Exit(code=ExitCode.PARTIAL_FAILURE.value)


@app.command()
def leads(
    output_dir: Annotated[
        Optional[Path],
        typer.Argument(help="Folder holding saved runs (defaults to the configured output dir)")
    ] = None,
    config_file: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to configuration file")
    ] = None,
    folder: Annotated[
        Optional[str],
        typer.Option("--folder", "-f", help="Show one saved run, e.g. www-example-org-2026-03-01")
    ] = None,
):
    """Summarize saved runs by lead grade, or show a single saved run."""
    config = _load_config(config_file, {})
    root = output_dir or config.output.output_dir

    if folder:
        try:
            stored = find_result(root, folder)
        except ValueError as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(code=ExitCode.CONFIG_ERROR.value)
        if stored is None:
            typer.echo(f"No saved run named {folder} in {root}", err=True)
            raise typer.Exit(code=ExitCode.CONFIG_ERROR.value)
        typer.echo(format_profile(stored.profile, grade_profile(stored.profile)))
        return

    summary = summarize_leads(load_results(root))
    typer.echo(format_lead_summary(summary))


if __name__ == "__main__":
    app()
