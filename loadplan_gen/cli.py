"""Command-line interface for the load plan generator.

This module provides a Click-based CLI for generating JMeter JMX files
and functional test case sheets from OpenAPI/Swagger specifications and
HAR captures.
"""

import functools
import logging
import re
import sys
from pathlib import Path
from typing import Callable, Optional, Tuple

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from loadplan_gen import __version__
from loadplan_gen.core.csv_synthesizer import CsvTestCaseSynthesizer
from loadplan_gen.core.data_structures import ParsedSpec
from loadplan_gen.core.har_parser import HARParser
from loadplan_gen.core.jmx_generator import JMXGenerator
from loadplan_gen.core.jmx_validator import JMXValidator
from loadplan_gen.core.load_config import GROUPING_STRATEGIES, LoadConfig, load_config_file
from loadplan_gen.core.openapi_parser import OpenAPIParser
from loadplan_gen.exceptions import LoadPlanGenException

console = Console()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _safe_name(title: str, suffix: str) -> str:
    """Example: ('Pet Store API', '-test.jmx') -> 'pet-store-api-test.jmx'."""
    safe_title = re.sub(r"[^\w\s-]", "", title.lower())
    safe_title = re.sub(r"[\s_-]+", "-", safe_title).strip("-")
    return f"{safe_title}{suffix}" if safe_title else f"test{suffix}"


def _fail(message: str) -> None:
    console.print(f"\n[bold red]Error:[/bold red] {message}")
    sys.exit(1)


def load_options(func: Callable) -> Callable:
    """Attach the load configuration options shared by 'generate' and 'har'."""
    options = [
        click.option("--config", "config_path", type=click.Path(exists=True), help="YAML load configuration file"),
        click.option("--base-url", help="Override base URL from spec (e.g., http://staging.example.com)"),
        click.option("--threads", type=int, help="Number of threads per thread group (default: 10)"),
        click.option("--rampup", type=int, help="Ramp-up period in seconds (default: 10)"),
        click.option("--loops", type=int, help="Iterations per thread, -1 for infinite (default: 1)"),
        click.option("--duration", type=int, help="Test duration in seconds (enables the scheduler)"),
        click.option("--name", "plan_name", help="Test plan name"),
        click.option(
            "--group-by",
            type=click.Choice(GROUPING_STRATEGIES),
            help="Group samplers into thread groups by first tag or first path segment",
        ),
        click.option("--no-assertions", is_flag=True, help="Skip 2xx response code assertions"),
        click.option("--correlation", is_flag=True, help="Add JSON extractors for id-like response fields"),
        click.option("--csv-config", is_flag=True, help="Add a CSV Data Set Config element"),
        click.option("--reporting", is_flag=True, help="Add Summary Report and Aggregate Report listeners"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _build_config(
    config_path: Optional[str],
    threads: Optional[int],
    rampup: Optional[int],
    loops: Optional[int],
    duration: Optional[int],
    plan_name: Optional[str],
    group_by: Optional[str],
    no_assertions: bool,
    correlation: bool,
    csv_config: bool,
    reporting: bool,
) -> LoadConfig:
    """Load the config file (if any) and apply command-line overrides."""
    config = load_config_file(config_path) if config_path else LoadConfig()
    return config.with_overrides(
        test_plan_name=plan_name,
        thread_count=threads,
        ramp_up=rampup,
        loop_count=loops,
        duration=duration,
        grouping=group_by,
        add_assertions=False if no_assertions else None,
        add_correlation=True if correlation else None,
        generate_csv_config=True if csv_config else None,
        enable_reporting=True if reporting else None,
    )


def _prompt_base_url(parsed: ParsedSpec, base_url: Optional[str]) -> Optional[str]:
    """Return the base URL to use, asking the user when the spec declares none."""
    if base_url or parsed.base_url:
        return base_url or parsed.base_url

    console.print("[bold]Base URL Configuration[/bold]")
    console.print("[yellow]No base URL found in the specification.[/yellow]")
    user_input = console.input("\nEnter base URL (press Enter for https://localhost): ").strip()
    console.print()
    return user_input or None


def _generate_plan(
    parsed: ParsedSpec,
    output: str,
    config: LoadConfig,
    base_url: Optional[str],
    endpoints: Tuple[str, ...] = (),
) -> None:
    """Run the JMX generator and print the result panel."""
    console.print(f"[bold]Generating JMX file:[/bold] {output}")
    console.print(f"[dim]  Threads: {config.thread_count}[/dim]")
    console.print(f"[dim]  Ramp-up: {config.ramp_up}s[/dim]")
    if config.duration is not None:
        console.print(f"[dim]  Duration: {config.duration}s[/dim]")
    else:
        console.print(f"[dim]  Iterations: {config.loop_count}[/dim]")
    console.print(f"[dim]  Grouping: {config.grouping}[/dim]\n")

    generator = JMXGenerator()
    result = generator.generate(
        parsed,
        output_path=output,
        config=config,
        base_url=base_url,
        operation_ids=list(endpoints) or None,
    )

    panel = Panel(
        f"[bold green]✓ JMX file generated successfully![/bold green]\n\n"
        f"[cyan]File:[/cyan] {result['jmx_path']}\n"
        f"[cyan]Base URL:[/cyan] {result['base_url'] or 'https://localhost'}\n"
        f"[cyan]Thread Groups:[/cyan] {result['thread_groups']}\n"
        f"[cyan]Samplers:[/cyan] {result['samplers_created']}\n"
        f"[cyan]Assertions:[/cyan] {result['assertions_added']}\n"
        f"[cyan]Extractors:[/cyan] {result['extractors_added']}\n\n"
        f"[dim]Next step: Open in JMeter GUI or run headless[/dim]",
        title="Generation Complete",
        border_style="green",
    )
    console.print(panel)


def _handle_errors(func: Callable) -> Callable:
    """Turn tool errors into a red 'Error:' line and exit code 1."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except LoadPlanGenException as e:
            _fail(str(e))
        except FileNotFoundError as e:
            _fail(str(e))

    return wrapper


@click.group()
@click.version_option(version=__version__, prog_name="loadplan-gen")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool):
    """Load Plan Generator - Generate JMeter test plans from API specifications.

    Turns OpenAPI/Swagger specs and HAR captures into JMeter JMX files, and
    synthesizes CSV sheets of functional test cases.
    """
    _configure_logging(verbose)


@cli.command()
@click.option("--spec", required=True, type=click.Path(exists=True), help="OpenAPI/Swagger spec file")
@_handle_errors
def inspect(spec: str):
    """Show the operations found in a specification.

    Example:
        loadplan-gen inspect --spec openapi.yaml
    """
    parsed = OpenAPIParser().parse(spec)

    table = Table(title="API Specification", show_header=True)
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Spec File", spec)
    table.add_row("Title", parsed.title)
    table.add_row("Version", parsed.version)
    table.add_row("Type", parsed.spec_type)
    table.add_row("Base URL", parsed.base_url or "[yellow]not declared[/yellow]")
    table.add_row("Operations", str(len(parsed.operations)))
    table.add_row("Security Schemes", ", ".join(s.name for s in parsed.security_schemes) or "none")

    console.print()
    console.print(table)

    if parsed.operations:
        operations_table = Table(title="Operations", show_header=True)
        operations_table.add_column("#", style="dim", width=3)
        operations_table.add_column("Method", style="magenta")
        operations_table.add_column("Path", style="cyan")
        operations_table.add_column("Summary")
        operations_table.add_column("Tags", style="green")

        for idx, operation in enumerate(parsed.operations, 1):
            operations_table.add_row(
                str(idx),
                operation.method,
                operation.path,
                operation.summary,
                ", ".join(operation.tags),
            )

        console.print()
        console.print(operations_table)

    console.print("\n[dim]Next step:[/dim] loadplan-gen generate --spec " + spec)


@cli.command()
@click.option("--spec", required=True, type=click.Path(exists=True), help="OpenAPI/Swagger spec file")
@click.option("--output", type=click.Path(), help="Output JMX file path (default: <api-title>-test.jmx)")
@click.option("--endpoints", multiple=True, help="Filter by operationId (can be used multiple times)")
@load_options
@_handle_errors
def generate(
    spec: str,
    output: Optional[str],
    endpoints: Tuple[str, ...],
    config_path: Optional[str],
    base_url: Optional[str],
    threads: Optional[int],
    rampup: Optional[int],
    loops: Optional[int],
    duration: Optional[int],
    plan_name: Optional[str],
    group_by: Optional[str],
    no_assertions: bool,
    correlation: bool,
    csv_config: bool,
    reporting: bool,
):
    """Generate JMeter JMX test plan from OpenAPI specification.

    Parses the spec and creates a JMX file with one thread group per tag
    (or path segment) and one HTTP sampler per operation.

    Example:
        loadplan-gen generate --spec openapi.yaml
        loadplan-gen generate --spec openapi.yaml --output ./tests/api.jmx
        loadplan-gen generate --spec openapi.yaml --threads 50 --rampup 10 --duration 300
        loadplan-gen generate --spec openapi.yaml --group-by path --correlation
        loadplan-gen generate --spec openapi.yaml --endpoints getUsers --endpoints createUser
    """
    config = _build_config(
        config_path, threads, rampup, loops, duration, plan_name,
        group_by, no_assertions, correlation, csv_config, reporting,
    )

    console.print(f"[bold]Parsing OpenAPI specification:[/bold] {spec}")
    parsed = OpenAPIParser().parse(spec)
    console.print(f"[green]✓[/green] Parsed {parsed.title} v{parsed.version}")
    console.print(f"[dim]  Found {len(parsed.operations)} operation(s)[/dim]\n")

    final_base_url = _prompt_base_url(parsed, base_url)
    output = output or _safe_name(parsed.title, "-test.jmx")

    _generate_plan(parsed, output, config, final_base_url, endpoints)


@cli.command()
@click.option("--har", "har_path", required=True, type=click.Path(exists=True), help="HAR capture file")
@click.option("--output", type=click.Path(), help="Output JMX file path (default: har-capture-test.jmx)")
@click.option("--include-static", is_flag=True, help="Keep requests for scripts, styles, images and fonts")
@load_options
@_handle_errors
def har(
    har_path: str,
    output: Optional[str],
    include_static: bool,
    config_path: Optional[str],
    base_url: Optional[str],
    threads: Optional[int],
    rampup: Optional[int],
    loops: Optional[int],
    duration: Optional[int],
    plan_name: Optional[str],
    group_by: Optional[str],
    no_assertions: bool,
    correlation: bool,
    csv_config: bool,
    reporting: bool,
):
    """Generate JMeter JMX test plan from a HAR capture.

    Each recorded request becomes an HTTP sampler; with the default tag
    grouping there is one thread group per host.

    Example:
        loadplan-gen har --har session.har
        loadplan-gen har --har session.har --include-static --threads 5
    """
    config = _build_config(
        config_path, threads, rampup, loops, duration, plan_name,
        group_by, no_assertions, correlation, csv_config, reporting,
    )

    console.print(f"[bold]Parsing HAR capture:[/bold] {har_path}")
    parsed = HARParser(include_static=include_static).parse(har_path)
    console.print(f"[green]✓[/green] Converted {len(parsed.operations)} request(s)\n")

    output = output or "har-capture-test.jmx"
    _generate_plan(parsed, output, config, base_url or parsed.base_url)


@cli.command()
@click.option("--spec", required=True, type=click.Path(exists=True), help="OpenAPI/Swagger spec file")
@click.option("--output", type=click.Path(), help="Output CSV file path (default: <api-title>-test-cases.csv)")
@click.option("--prompt", help="Free-text instructions; mentioning roles adds role-based cases")
@_handle_errors
def testcases(spec: str, output: Optional[str], prompt: Optional[str]):
    """Generate a CSV sheet of functional test cases from a specification.

    Example:
        loadplan-gen testcases --spec openapi.yaml
        loadplan-gen testcases --spec openapi.yaml --prompt "Test as admin and guest"
    """
    console.print(f"[bold]Parsing OpenAPI specification:[/bold] {spec}")
    parsed = OpenAPIParser().parse(spec)

    output = output or _safe_name(parsed.title, "-test-cases.csv")
    result = CsvTestCaseSynthesizer().write(parsed, output, prompt=prompt)

    panel = Panel(
        f"[bold green]✓ Test cases generated successfully![/bold green]\n\n"
        f"[cyan]File:[/cyan] {result['csv_path']}\n"
        f"[cyan]Operations:[/cyan] {result['operations']}\n"
        f"[cyan]Test Cases:[/cyan] {result['rows_created']}",
        title="Test Cases Complete",
        border_style="green",
    )
    console.print(panel)


@cli.command()
@click.argument("jmx_path", type=click.Path(exists=True))
@_handle_errors
def validate(jmx_path: str):
    """Validate JMX test plan structure and configuration.

    Checks the JMX file for required elements, valid configuration,
    and provides recommendations for improvements.

    Example:
        loadplan-gen validate test.jmx
    """
    console.print(f"\n[bold]Validating JMX file:[/bold] {jmx_path}\n")

    result = JMXValidator().validate(jmx_path)

    if result["valid"]:
        console.print(Panel("[bold green]✓ JMX file is valid![/bold green]", border_style="green"))
    else:
        console.print(
            Panel(
                f"[bold red]✗ JMX file has {len(result['issues'])} issue(s)[/bold red]",
                border_style="red",
            )
        )
        console.print("\n[bold red]Issues Found:[/bold red]")
        for i, issue in enumerate(result["issues"], 1):
            console.print(f"  {i}. {issue}")

    if result["recommendations"]:
        console.print("\n[bold yellow]Recommendations:[/bold yellow]")
        for i, rec in enumerate(result["recommendations"], 1):
            console.print(f"  {i}. {rec}")

    console.print()

    if not result["valid"]:
        sys.exit(1)


def main():
    """Entry point for CLI application."""
    cli()


if __name__ == "__main__":
    main()
