"""CLI command for executing flow files."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import click

from restflow.config import ConfigLoadError, RestflowConfig
from restflow.flows import FlowExecutor, FlowResult
from restflow.reporting import REPORTERS, create_reporter

FLOW_EXTENSION = ".flow"
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def get_flow_files(path: Path) -> list[Path]:
    """Collect flow files from a file or a directory tree.

    Raises:
        click.ClickException: If no flow file can be found.
    """
    if path.is_file():
        if path.suffix != FLOW_EXTENSION:
            raise click.ClickException(f"File is not a {FLOW_EXTENSION} file: {path}")
        return [path]

    files = sorted(p for p in path.rglob(f"*{FLOW_EXTENSION}") if p.is_file())
    if not files:
        raise click.ClickException(f"No {FLOW_EXTENSION} files found in directory: {path}")
    return files


def parse_variables(values: tuple[str, ...]) -> dict[str, Any]:
    variables: dict[str, Any] = {}
    for item in values:
        if "=" not in item:
            raise click.BadParameter(f"Expected NAME=VALUE, got '{item}'", param_hint="--var")
        key, value = item.split("=", 1)
        variables[key.strip()] = value.strip()
    return variables


@click.command(name="run")
@click.argument("path", type=click.Path(exists=True, path_type=Path))
@click.option("--env", "-e", "env_file", type=click.Path(exists=True, dir_okay=False), help="Environment (.env) file")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(list(REPORTERS)),
    default="pretty",
    show_default=True,
    help="Output format",
)
@click.option("--json", "json_output", is_flag=True, help="Shortcut for --format json")
@click.option("--timeout", type=click.IntRange(min=1), help="Request timeout in milliseconds")
@click.option("--var", "-v", multiple=True, help="Variable to inject (format: 'name=value')")
@click.option(
    "--config",
    "-c",
    "config_file",
    type=click.Path(exists=True, dir_okay=False),
    help="YAML configuration file",
)
@click.option("--verbose", is_flag=True, help="Show detailed output")
@click.option("--show-headers", is_flag=True, help="Show response headers")
@click.option("--show-body", is_flag=True, help="Show request and response bodies")
@click.option("--no-color", is_flag=True, help="Disable colored output")
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Logging level for diagnostic output",
)
def run_command(
    path: Path,
    env_file: str | None,
    output_format: str,
    json_output: bool,
    timeout: int | None,
    var: tuple[str, ...],
    config_file: str | None,
    verbose: bool,
    show_headers: bool,
    show_body: bool,
    no_color: bool,
    log_level: str,
) -> None:
    """Run flow files from a file or directory."""
    logging.basicConfig(level=log_level.upper(), format="%(levelname)s %(name)s: %(message)s")
    variables = parse_variables(var)

    try:
        config = RestflowConfig.from_file(config_file) if config_file else RestflowConfig()
    except ConfigLoadError as e:
        raise click.ClickException(str(e))
    config = config.merge(timeout=timeout, variables=variables)

    files = get_flow_files(path)
    reporter = create_reporter(
        "json" if json_output else output_format,
        verbose=verbose,
        show_headers=show_headers,
        show_body=show_body,
        colors=not no_color,
    )

    executor = FlowExecutor(config=config)
    results: list[FlowResult] = []
    has_failures = False

    for index, flow_file in enumerate(files):
        if len(files) > 1 and reporter.format_name != "json":
            click.echo(f"\n[{index + 1}/{len(files)}] Executing: {flow_file}")

        try:
            content = flow_file.read_text(encoding="utf-8")
        except OSError as e:
            click.secho(f"Failed to read {flow_file}: {e}", fg="red", err=True)
            has_failures = True
            continue

        result = executor.execute_flow(content, env_file, name=flow_file.stem)
        results.append(result)
        reporter.report(result)

        if not result.success:
            has_failures = True

    if len(results) > 1 and reporter.format_name != "json":
        _print_overall_summary(results)

    if has_failures:
        raise SystemExit(1)


def _print_overall_summary(results: list[FlowResult]) -> None:
    total_steps = sum(r.total_steps for r in results)
    passed_steps = sum(r.passed_steps for r in results)
    total_directives = sum(r.total_directives for r in results)
    passed_directives = sum(r.passed_directives for r in results)
    total_duration = sum(r.duration_ms for r in results)
    passed_flows = sum(1 for r in results if r.success)

    click.echo(f"\n{'=' * 60}")
    click.echo("SUMMARY")
    click.echo("=" * 60)
    click.echo(f"Flows: {passed_flows}/{len(results)} passed")
    click.echo(f"Steps: {passed_steps}/{total_steps} | Directives: {passed_directives}/{total_directives}")
    click.echo(f"Duration: {total_duration:.0f}ms")
