"""Command-line interface for sewer-line gradient and compliance checks.

This module provides the main CLI interface using Click for evaluating a
single pipe run, listing the pipe catalog and printing project schedules.
"""

import json
import logging
import traceback
from pathlib import Path
from typing import Any

import click

from .analyze import ComplianceEvaluator
from .catalog import PipeCatalog
from .config import ConfigurationHandler, sample_config
from .io import (
    JsonExporter,
    ProfileDxfWriter,
    format_node_snippet,
    format_project_schedule,
    format_segment_report,
)
from .models import BranchDrop, CalculationMode, CalculationResult, build_input
from .session import Session

EXIT_INCOMPLETE = 1
EXIT_NOT_COMPLIANT = 3

MODE_CHOICES = [mode.value for mode in CalculationMode]
BRANCH_DROP_CHOICES = ["0", "0.075", "0.1"]


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _load_configuration(config: Path | None, verbose: bool) -> ConfigurationHandler:
    if verbose and config is not None:
        click.echo(f"Loading configuration from: {config.resolve().as_posix()}")
    handler = ConfigurationHandler(config)
    handler.load_config()
    return handler


def _fail(e: Exception, verbose: bool) -> click.ClickException:
    message = f"Processing failed: {e}"
    if verbose:
        message += "\n" + traceback.format_exc()
    return click.ClickException(message)


@click.group()
@click.version_option(package_name="sewerline")
def main() -> None:
    """Sewer-line gradient and invert level calculator.

    Derives missing invert levels or the gradient of a pipe run between two
    inspection chambers and checks it against the code of practice.
    """
    pass


@main.command()
@click.option(
    "--mode",
    "-m",
    type=click.Choice(MODE_CHOICES, case_sensitive=False),
    default=CalculationMode.DOWNSTREAM.value,
    show_default=True,
    help="DOWNSTREAM derives the end IL, UPSTREAM the start IL, VERIFY the gradient",
)
@click.option("--start-id", type=str, help="Upstream chamber id")
@click.option("--end-id", type=str, help="Downstream chamber id")
@click.option("--start-tl", type=float, help="Upstream top level")
@click.option("--start-il", type=float, help="Upstream invert level (DOWNSTREAM, VERIFY)")
@click.option("--end-tl", type=float, help="Downstream top level")
@click.option("--end-il", type=float, help="Downstream invert level (UPSTREAM, VERIFY)")
@click.option("--distance", "-d", type=float, help="Run length in meters")
@click.option("--gradient", "-g", type=float, help="Gradient denominator X of 1:X (DOWNSTREAM, UPSTREAM)")
@click.option("--pipe", "-p", "pipe_id", type=str, help="Pipe id, see the 'pipes' command")
@click.option(
    "--pumping-main",
    type=bool,
    is_flag=True,
    flag_value=True,
    help="Evaluate as pumping main (allows 100mm pipes). (Default False)",
)
@click.option(
    "--branch-drop",
    type=click.Choice(BRANCH_DROP_CHOICES),
    default="0",
    show_default=True,
    help="Branch inlet offset at the upstream chamber in meters (UPSTREAM)",
)
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    help="JSON configuration with standards and pipes",
)
@click.option("--json", "json_output", type=click.Path(path_type=Path), help="Write the result to a JSON file")
@click.option("--dxf", "dxf_output", type=click.Path(path_type=Path), help="Write the long section to a DXF file")
@click.option(
    "--strict",
    type=bool,
    is_flag=True,
    flag_value=True,
    help=f"Exit with code {EXIT_NOT_COMPLIANT} if the run is not compliant",
)
@click.option(
    "--verbose",
    "-v",
    type=bool,
    is_flag=True,
    flag_value=True,
    help="Print configuration details and debug logging. (Default False)",
)
@click.pass_context
def check(
    ctx: click.Context,
    mode: str,
    start_id: str | None,
    end_id: str | None,
    start_tl: float | None,
    start_il: float | None,
    end_tl: float | None,
    end_il: float | None,
    distance: float | None,
    gradient: float | None,
    pipe_id: str | None,
    pumping_main: bool,
    branch_drop: str,
    config: Path | None,
    json_output: Path | None,
    dxf_output: Path | None,
    strict: bool,
    verbose: bool,
) -> None:
    """Evaluate a pipe run between two inspection chambers.

    Prints the segment report with the derived levels, velocity and all
    compliance issues.
    """
    _setup_logging(verbose)
    try:
        handler = _load_configuration(config, verbose)
        pipe = handler.catalog.lookup_by_id(pipe_id or handler.defaults.pipe_id, pumping_main)
        calc_input = build_input(
            mode,
            pipe,
            start_id=start_id or handler.defaults.start_id,
            end_id=end_id or handler.defaults.end_id,
            start_top_level=start_tl,
            start_invert_level=start_il,
            end_top_level=end_tl,
            end_invert_level=end_il,
            distance=distance,
            gradient=gradient,
            is_pumping_main=pumping_main,
            branch_drop=BranchDrop.from_value(branch_drop),
        )
        session = Session(ComplianceEvaluator(standards=handler.standards))
        result = session.update(calc_input)
        if result is not None:
            start_node = session.display_start_node()
            click.echo(format_segment_report(result, start_node=start_node), nl=False)
            if verbose:
                click.echo("")
                click.echo(format_node_snippet(start_node or result.start_node))
                click.echo(format_node_snippet(result.end_node))
            if json_output is not None:
                JsonExporter(json_output).export_results([result])
                click.echo(f"JSON written to: {json_output}")
            if dxf_output is not None:
                ProfileDxfWriter(dxf_output).write(result)
                click.echo(f"DXF written to: {dxf_output}")
    except Exception as e:
        raise _fail(e, verbose) from e

    if result is None:
        click.echo(f"Enter data: required input for {calc_input.mode.value} mode is missing or zero.")
        ctx.exit(EXIT_INCOMPLETE)
    if strict and not result.is_compliant:
        ctx.exit(EXIT_NOT_COMPLIANT)


@main.command()
@click.option(
    "--pumping-main",
    type=bool,
    is_flag=True,
    flag_value=True,
    help="Include pipes only allowed for pumping mains",
)
@click.option("--material", type=str, help="Only list pipes of this material")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    help="JSON configuration with additional pipes",
)
def pipes(pumping_main: bool, material: str | None, config: Path | None) -> None:
    """List the pipe catalog."""
    try:
        handler = _load_configuration(config, verbose=False)
    except Exception as e:
        raise _fail(e, verbose=False) from e
    _print_catalog(handler.catalog, pumping_main, material)


def _print_catalog(catalog: PipeCatalog, pumping_main: bool, material: str | None) -> None:
    header_line = f"{'Id':<12} {'Label':<22} {'Material':<14} {'Diameter':>9} {'n':>7} {'Min 1:X':>8}"
    header_length = len(header_line)
    click.echo("=" * header_length)
    click.echo("PIPE CATALOG" + (" (PUMPING MAIN)" if pumping_main else ""))
    click.echo("=" * header_length)
    click.echo(header_line)
    click.echo("-" * header_length)

    materials = [material] if material else catalog.materials(pumping_main)
    for name in materials:
        for pipe in catalog.list_by_material(name, include_pumping=pumping_main):
            click.echo(
                f"{pipe.id:<12} {pipe.label:<22} {pipe.material:<14} {pipe.diameter_mm:>7}mm "
                f"{pipe.mannings_n:>7.3f} {pipe.min_gradient:>8}"
            )
    click.echo("-" * header_length)


def _read_runs(runs_file: Path) -> list[dict[str, Any]]:
    with open(runs_file, encoding="utf-8") as f:
        runs = json.load(f)
    if not isinstance(runs, list):
        raise ValueError(f"Runs file must contain a list of runs: {runs_file}")
    return runs


@main.command()
@click.argument(
    "runs_file",
    type=click.Path(exists=True, path_type=Path),
)
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    help="JSON configuration with standards and pipes",
)
@click.option("--json", "json_output", type=click.Path(path_type=Path), help="Write the results to a JSON file")
@click.option(
    "--verbose",
    "-v",
    type=bool,
    is_flag=True,
    flag_value=True,
    help="Print the issues of every run. (Default False)",
)
def schedule(runs_file: Path, config: Path | None, json_output: Path | None, verbose: bool) -> None:
    """Evaluate pipe runs and print the project schedule.

    RUNS_FILE is a JSON list of runs, each with a "mode", a "pipe_id" and the
    input fields of that mode (e.g. "start_invert_level", "distance",
    "gradient").
    """
    _setup_logging(verbose)
    try:
        handler = _load_configuration(config, verbose)
        session = Session(ComplianceEvaluator(standards=handler.standards))
        for index, run in enumerate(_read_runs(runs_file), start=1):
            values = dict(run)
            mode = values.pop("mode", CalculationMode.DOWNSTREAM.value)
            is_pumping_main = bool(values.get("is_pumping_main", False))
            pipe = handler.catalog.lookup_by_id(str(values.pop("pipe_id", handler.defaults.pipe_id)), is_pumping_main)
            result = session.update(build_input(mode, pipe, **values))
            if result is None:
                click.echo(f"Run {index} skipped: input incomplete")
                continue
            session.save()
            if verbose and not result.is_compliant:
                for message in result.compliance_issues:
                    click.echo(f"Run {index}: {message}")

        results: list[CalculationResult] = [entry.result for entry in session.history]
        click.echo(format_project_schedule(results), nl=False)
        failed = sum(1 for result in results if not result.is_compliant)
        click.echo(f"{len(results)} run(s), {failed} not compliant")
        if json_output is not None:
            JsonExporter(json_output).export_results(results)
            click.echo(f"JSON written to: {json_output}")
    except Exception as e:
        raise _fail(e, verbose) from e


@main.command()
@click.argument("config_file", type=click.Path(path_type=Path))
def create_config(config_file: Path) -> None:
    """Create a sample configuration file.

    Parameters
    ----------
    config_file
        Path to the JSON configuration file
    """
    try:
        with open(config_file, "w", encoding="utf-8") as f:
            json.dump(sample_config(), f, indent=2, ensure_ascii=False)

        click.echo(f"Sample configuration created: {config_file}")
        click.echo("Edit this file to match your code of practice.")

    except OSError as e:
        raise click.ClickException(f"Cannot create configuration file: {e}") from e


if __name__ == "__main__":
    main()
