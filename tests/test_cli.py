import json

from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from ilm.cli import EXIT_FAILED, app
from ilm.util.events import EventLog

runner = CliRunner()

STEPS = """
steps:
  - key: warm/shrink/shrink
    next: completed/completed/completed
    type: shrink
    params: {shrunken_index_name: shrink-logs-000001}
  - key: hot/rollover/rollover
    next: warm/shrink/shrink
    type: rollover
    params: {alias: logs, max_docs: 1000}
"""

CLUSTER = """
indices:
  - name: logs-000001
    number_of_shards: 2
    number_of_replicas: 1
    docs_count: 5
    aliases:
      logs: {is_write_index: true}
"""


@pytest.fixture
def files(tmp_path):
    steps = tmp_path / "steps.yaml"
    steps.write_text(STEPS)
    cluster = tmp_path / "cluster.yaml"
    cluster.write_text(CLUSTER)
    return steps, cluster


def test_cli_help():
    res = runner.invoke(app, ["--help"])
    assert res.exit_code == 0
    assert "lifecycle" in res.stdout


def test_cli_version():
    res = runner.invoke(app, ["--version"])
    assert res.exit_code == 0
    assert "ilm version" in res.stdout


def test_steps_lists_chain(files):
    steps, _ = files
    res = runner.invoke(app, ["steps", "--steps-file", str(steps)])
    assert res.exit_code == 0
    assert "ShrinkStep" in res.stdout
    assert "TerminalStep" in res.stdout


def test_steps_missing_file(tmp_path):
    res = runner.invoke(app, ["steps", "--steps-file", str(tmp_path / "nope.yaml")])
    assert res.exit_code == 2


@pytest.mark.timeout(10)
def test_run_complete_writes_event(files, tmp_path):
    steps, cluster = files
    events = tmp_path / "events.jsonl"
    res = runner.invoke(
        app,
        [
            "run",
            "--steps-file", str(steps),
            "--cluster-file", str(cluster),
            "--index", "logs-000001",
            "--step", "warm/shrink/shrink",
            "--events", str(events),
        ],
    )
    assert res.exit_code == 0, res.stdout
    assert "COMPLETE" in res.stdout
    record = json.loads(events.read_text().splitlines()[0])
    assert record["event"] == "step_outcome"
    assert record["status"] == "COMPLETE"
    assert record["next_step_key"] == "completed/completed/completed"
    assert "ts_ms" in record
    (outcome,) = EventLog(events).outcomes()
    assert outcome.complete
    assert outcome.index == "logs-000001"


@pytest.mark.timeout(10)
def test_run_incomplete_exit_code(files):
    steps, cluster = files
    res = runner.invoke(
        app,
        [
            "run",
            "--steps-file", str(steps),
            "--cluster-file", str(cluster),
            "--index", "logs-000001",
            "--step", "hot/rollover/rollover",
        ],
    )
    assert res.exit_code == 1
    assert "INCOMPLETE" in res.stdout


@pytest.mark.timeout(10)
def test_run_failure_exit_code(files, tmp_path):
    steps, _ = files
    cluster = tmp_path / "collide.yaml"
    cluster.write_text(CLUSTER + "  - name: shrink-logs-000001\n")
    res = runner.invoke(
        app,
        [
            "run",
            "--steps-file", str(steps),
            "--cluster-file", str(cluster),
            "--index", "logs-000001",
            "--step", "warm/shrink/shrink",
        ],
    )
    assert res.exit_code == 2
    assert "FAILED" in res.stdout
    assert "ResourceAlreadyExistsError" in res.stdout


def test_run_unknown_step(files):
    steps, cluster = files
    res = runner.invoke(
        app,
        [
            "run",
            "--steps-file", str(steps),
            "--cluster-file", str(cluster),
            "--index", "logs-000001",
            "--step", "cold/freeze/freeze",
        ],
    )
    assert res.exit_code == 2


def test_run_terminal_step_rejected(files):
    steps, cluster = files
    res = runner.invoke(
        app,
        [
            "run",
            "--steps-file", str(steps),
            "--cluster-file", str(cluster),
            "--index", "logs-000001",
            "--step", "completed/completed/completed",
        ],
    )
    assert res.exit_code == 2


@pytest.mark.timeout(10)
def test_run_timeout_exit_code(files):
    steps, cluster = files
    with patch("ilm.cli.run_step", side_effect=TimeoutError()):
        res = runner.invoke(
            app,
            [
                "run",
                "--steps-file", str(steps),
                "--cluster-file", str(cluster),
                "--index", "logs-000001",
                "--step", "warm/shrink/shrink",
                "--timeout", "0.5",
            ],
        )
    assert res.exit_code == EXIT_FAILED
    assert "Timed out" in res.stdout
    assert "Traceback" not in res.stdout
