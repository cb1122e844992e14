"""CLI entrypoint.

Commands:
- ilm steps   list and validate a step chain
- ilm run     run one step invocation against an in-memory cluster

CONTRACT
- Inputs: Command line arguments (parsed by Typer)
- Outputs (required):
  - `run` exits 0 when the step completed, 1 when incomplete, 2 when it failed
  - Console tables describing the chain / the cluster after the step
- Invariants:
  - Files are schema-validated before any step is built
  - Exactly one step invocation per `run`
- Failure:
  - Invalid arguments or files raise typer.BadParameter (exit 2)
"""

from __future__ import annotations

import sys
from pathlib import Path

import typer
from loguru import logger
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .chain import build_steps
from .client.memory import InMemoryAdminClient, InMemoryCluster
from .config import load_cluster_file, load_steps_file
from .errors import LifecycleError, StepConfigurationError
from .outcome import run_step
from .steps.async_action import AsyncActionStep
from .steps.base import StepKey
from .util.events import EventLog

app = typer.Typer(add_completion=False, help="Index lifecycle step runner (single invocation).")
console = Console()

EXIT_INCOMPLETE = 1
EXIT_FAILED = 2


def _version_callback(value: bool):
    if value:
        from . import __version__

        console.print(f"ilm version: {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "WARNING")


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version."
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Debug logging to stderr."),
):
    _configure_logging(verbose)


_STEPS_FILE_OPTION = typer.Option(..., "--steps-file", help="Steps YAML file.")
_CLUSTER_FILE_OPTION = typer.Option(..., "--cluster-file", help="Cluster YAML file (indices).")
_INDEX_OPTION = typer.Option(..., "--index", help="Index the step acts on.")
_STEP_OPTION = typer.Option(..., "--step", help="Step key as phase/action/name.")
_TIMEOUT_OPTION = typer.Option(30.0, "--timeout", help="Seconds to wait for the outcome.")
_EVENTS_OPTION = typer.Option(None, "--events", help="Append the outcome to this JSONL file.")


def _load_steps_or_fail(steps_file: Path):
    if not steps_file.exists():
        raise typer.BadParameter(f"Steps file not found: {steps_file}")
    try:
        return load_steps_file(steps_file)
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e


@app.command("steps")
def list_steps(steps_file: Path = _STEPS_FILE_OPTION) -> None:
    """Validate a step chain and print it."""
    cfg = _load_steps_or_fail(steps_file)
    with InMemoryAdminClient(max_workers=1) as client:
        try:
            steps = build_steps(cfg, client)
        except StepConfigurationError as e:
            raise typer.BadParameter(str(e)) from e

    table = Table(title="ilm steps")
    table.add_column("Key")
    table.add_column("Next")
    table.add_column("Type")
    table.add_column("Retryable")
    for key in sorted(steps):
        step = steps[key]
        nxt = step.next_step_key
        table.add_row(str(key), str(nxt) if nxt else "-", type(step).__name__, str(step.is_retryable()))
    console.print(table)


@app.command("run")
def run(
    steps_file: Path = _STEPS_FILE_OPTION,
    cluster_file: Path = _CLUSTER_FILE_OPTION,
    index: str = _INDEX_OPTION,
    step: str = _STEP_OPTION,
    timeout: float = _TIMEOUT_OPTION,
    events: Path | None = _EVENTS_OPTION,
) -> None:
    """Run one step against one index and report the outcome."""
    cfg = _load_steps_or_fail(steps_file)
    if not cluster_file.exists():
        raise typer.BadParameter(f"Cluster file not found: {cluster_file}")
    try:
        key = StepKey.parse(step)
        cluster = InMemoryCluster(load_cluster_file(cluster_file), shards_acknowledged=cfg.client.shards_acknowledged)
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e

    with InMemoryAdminClient(cluster, max_workers=cfg.client.max_workers) as client:
        try:
            steps = build_steps(cfg, client)
            target = cluster.get(index)
        except LifecycleError as e:
            raise typer.BadParameter(str(e)) from e
        if key not in steps:
            raise typer.BadParameter(f"Unknown step: {key}")
        selected = steps[key]
        if not isinstance(selected, AsyncActionStep):
            raise typer.BadParameter(f"Step {key} has no action to perform")
        try:
            outcome = run_step(selected, target, timeout=timeout)
        except StepConfigurationError as e:
            console.print(f"[red]Step {key} rejected index {escape(index)}:[/red] {escape(str(e))}")
            raise typer.Exit(code=EXIT_FAILED) from e
        except TimeoutError as e:
            console.print(f"[red]Timed out[/red] after {timeout}s waiting for step {key} on {escape(index)}")
            raise typer.Exit(code=EXIT_FAILED) from e

    if events:
        EventLog(events).emit_outcome(outcome)

    color = {"COMPLETE": "green", "INCOMPLETE": "yellow", "FAILED": "red"}[outcome.status]
    console.print(f"[{color}]{outcome.status}[/{color}] {outcome.key} on {escape(outcome.index)}")
    if outcome.next_step_key:
        console.print(f"Next step: {outcome.next_step_key}")
    if outcome.error:
        console.print(f"Error: {escape(outcome.error)} (retryable={outcome.retryable})")

    table = Table(title="cluster")
    table.add_column("Index")
    table.add_column("Shards")
    table.add_column("Replicas")
    table.add_column("Aliases")
    for name in cluster.indices():
        im = cluster.get(name)
        table.add_row(name, str(im.number_of_shards), str(im.number_of_replicas), ", ".join(sorted(im.aliases)))
    console.print(table)

    if outcome.status == "INCOMPLETE":
        raise typer.Exit(code=EXIT_INCOMPLETE)
    if outcome.status == "FAILED":
        raise typer.Exit(code=EXIT_FAILED)


if __name__ == "__main__":
    app()
