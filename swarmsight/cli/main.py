"""Main CLI Module - Command-line interface for SwarmSight."""

import asyncio
import shlex
import subprocess
import sys
from typing import List, Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from .. import TOOL_NAME, __version__
from ..checkers import ExternalToolChecker, default_registry
from ..core.aggregator import ScanResult
from ..core.checker import Checker, Severity
from ..core.options import DEFAULT_EXCLUDES, ConfigurationError, ScanOptions, load_options
from ..core.orchestrator import Orchestrator
from ..core.parallel_executor import CheckerRegistry
from ..reporters.report_generator import SUPPORTED_FORMATS, ReportGenerator
from ..utils.log import configure_logging

# Reports go to stdout; everything meant for humans goes to stderr.
console = Console(stderr=True)

SEVERITY_CHOICES = [s.value for s in Severity.known()]


def availability_label(checker: Checker) -> str:
    """Describe how a checker would run on this machine."""
    if isinstance(checker, ExternalToolChecker):
        if checker.tool_available():
            return "[green]✓ Installed[/green]"
        if checker.fallback is not None:
            return "[yellow]~ Pattern fallback[/yellow]"
        return "[red]✗ Not Found[/red]"
    return "[green]✓ Built-in[/green]"


def print_summary(result: ScanResult, options: ScanOptions) -> None:
    """Print the run table and severity summary."""
    table = Table(title="Checkers")
    table.add_column("Checker", style="cyan")
    table.add_column("Language")
    table.add_column("Status")
    table.add_column("Findings", justify="right")
    table.add_column("Duration", justify="right")

    status_colors = {"ok": "green", "fallback": "yellow", "unavailable": "dim", "failed": "red", "timeout": "red"}
    for run in result.metadata.get("checkers", []):
        color = status_colors.get(run["status"], "white")
        table.add_row(
            run["name"],
            run["language"],
            f"[{color}]{run['status']}[/{color}]",
            str(run["finding_count"]),
            f"{run['duration_ms']} ms",
        )
    console.print(table)

    summary = result.summary
    counts = "  ".join(
        f"[{s.color}]{s.value.upper()}: {summary.count(s)}[/{s.color}]" for s in Severity.known()
    )
    if summary.unknown:
        counts += f"  [{Severity.UNKNOWN.color}]UNKNOWN: {summary.unknown}[/{Severity.UNKNOWN.color}]"

    console.print(Panel.fit(
        f"[bold]Risk Score:[/bold] [{result.risk.color}]{result.score}/100 ({result.rating})[/{result.risk.color}]\n"
        f"[bold]Findings:[/bold] {summary.total}\n{counts}",
        title=f"{TOOL_NAME} Summary",
        border_style="blue",
    ))

    for error in result.errors:
        console.print(f"[red]✗ {error['checker']}:[/red] {error['error']}")


@click.group()
@click.version_option(version=__version__, prog_name="swarmsight")
@click.pass_context
def cli(ctx: click.Context):
    """SwarmSight - Multi-language security scanning orchestrator."""
    ctx.ensure_object(dict)


@cli.command("scan")
@click.argument("path", type=click.Path(), default=".")
@click.option("--output-format", "-f", help=f"Report format: {', '.join(SUPPORTED_FORMATS)} (default: json)")
@click.option("--output-file", "-o", type=click.Path(), help="Write the report here instead of stdout")
@click.option("--severity", "-s", type=click.Choice(SEVERITY_CHOICES, case_sensitive=False),
              help="Minimum severity to report (default: low)")
@click.option("--checkers", "-c", help="Comma-separated checker ids, names or languages (default: all)")
@click.option("--exclude", "-e", help=f"Comma-separated directory names to skip (default: {','.join(DEFAULT_EXCLUDES)})")
@click.option("--ci", is_flag=True, help="Exit with code 1 when findings reach the --fail-on severity")
@click.option("--fail-on", type=click.Choice(SEVERITY_CHOICES, case_sensitive=False),
              help="Severity that fails a CI run (default: critical)")
@click.option("--timeout", type=float, help="Per-checker timeout in seconds (default: 300)")
@click.option("--analyzer-type", help="Comma-separated analyzer types: static, dynamic, verifier")
@click.option("--max-concurrency", type=int, help="Maximum checkers running at once (default: unbounded)")
@click.option("--config", "config_path", type=click.Path(), envvar="SWARMSIGHT_CONFIG",
              help="YAML configuration file")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def scan(
    path: str,
    output_format: Optional[str],
    output_file: Optional[str],
    severity: Optional[str],
    checkers: Optional[str],
    exclude: Optional[str],
    ci: bool,
    fail_on: Optional[str],
    timeout: Optional[float],
    analyzer_type: Optional[str],
    max_concurrency: Optional[int],
    config_path: Optional[str],
    verbose: bool,
):
    """Scan a project for security issues.

    PATH is the directory to scan (default: current directory).
    """
    configure_logging(verbose, console)

    try:
        options = load_options(
            path,
            config_path=config_path,
            output_format=output_format,
            output_file=output_file,
            severity=severity,
            checkers=checkers,
            exclude=exclude,
            ci=ci or None,
            fail_on=fail_on,
            timeout=timeout,
            analyzer_type=analyzer_type,
            max_concurrency=max_concurrency,
            verbose=verbose or None,
        )
        orchestrator = Orchestrator(default_registry())
        orchestrator.validate(options)
    except ConfigurationError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    console.print(Panel.fit(
        f"[bold blue]{TOOL_NAME} Security Scan[/bold blue]\n"
        f"Scanning: [cyan]{options.project_path}[/cyan]",
        title="SwarmSight Scan",
        border_style="blue",
    ))

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    ) as progress:
        scan_task = progress.add_task("[cyan]Running checkers...", total=None)

        def update_progress(completed: int, total: int, checker_name: str):
            progress.update(
                scan_task, completed=completed, total=total,
                description=f"[cyan]{checker_name} finished ({completed}/{total})",
            )

        try:
            result = asyncio.run(orchestrator.run(options, update_progress))
        except ConfigurationError as e:
            console.print(f"[red]Error: {e}[/red]")
            sys.exit(1)

    print_summary(result, options)

    written = ReportGenerator(orchestrator.reporter).emit(result, options.output_file)
    if written:
        console.print(f"[green]✓[/green] Report written to [cyan]{written}[/cyan]")

    if options.ci and result.should_fail(options.fail_on):
        blocking = len(result.findings_at_or_above(options.fail_on))
        console.print(
            f"[red]CI check failed: {blocking} finding(s) at or above {options.fail_on.value}[/red]"
        )
        sys.exit(1)


@cli.command("list-checkers")
@click.option("--language", "-l", help="Only show checkers for this language")
def list_checkers(language: Optional[str]):
    """List available checkers."""
    registry = default_registry()

    table = Table(title="SwarmSight Checkers")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Language")
    table.add_column("Type")
    table.add_column("Category")
    table.add_column("Status")
    table.add_column("Description")

    for checker in registry.all():
        if language and checker.language != language.lower():
            continue
        info = checker.info
        table.add_row(
            info.id,
            info.name,
            info.language,
            info.analyzer_type,
            info.category,
            availability_label(checker),
            info.description,
        )

    console.print(table)


@cli.command("version")
def version():
    """Show version information."""
    click.echo(f"{TOOL_NAME} {__version__}")


def _install_steps(hint: str) -> List[List[str]]:
    return [shlex.split(step) for step in hint.split("&&") if step.strip()]


@cli.command("install-checker")
@click.argument("name")
@click.option("--execute", is_flag=True, help="Run the install command instead of only printing it")
def install_checker(name: str, execute: bool):
    """Show (or run) the install command for a checker's external tool."""
    registry: CheckerRegistry = default_registry()
    checker = registry.get(name)

    if checker is None:
        console.print(f"[red]Unknown checker: {name}[/red]")
        console.print(f"[dim]Known checkers: {', '.join(c.id for c in registry.all())}[/dim]")
        sys.exit(1)

    if not isinstance(checker, ExternalToolChecker):
        console.print(f"[green]{checker.name} is built in; nothing to install.[/green]")
        return

    if checker.tool_available():
        console.print(f"[green]{checker.name} is already installed.[/green]")
        return

    hint = checker.info.install_hint
    if not hint:
        console.print(f"[yellow]No install command known for {checker.name}.[/yellow]")
        if checker.info.website:
            console.print(f"See {checker.info.website}")
        sys.exit(1)

    if not execute:
        click.echo(hint)
        return

    for step in _install_steps(hint):
        console.print(f"[cyan]$ {' '.join(step)}[/cyan]")
        try:
            completed = subprocess.run(step, check=False)
        except OSError as e:
            console.print(f"[red]Failed to run {step[0]}: {e}[/red]")
            sys.exit(1)
        if completed.returncode != 0:
            console.print(f"[red]Install step failed with exit code {completed.returncode}[/red]")
            sys.exit(completed.returncode)

    console.print(f"[green]✓ {checker.name} installed[/green]")


def main():
    """Entry point for the CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
