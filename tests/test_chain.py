from datetime import timedelta
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from ilm.chain import build_steps, step_for_config, validate_chain
from ilm.config import StepConfig, load_cluster_file, load_steps_file
from ilm.errors import StepConfigurationError
from ilm.steps.base import TERMINAL_STEP_KEY, StepKey, TerminalStep
from ilm.steps.rollover import RolloverStep
from ilm.steps.shrink import ShrinkStep

STEPS_YAML = """
client:
  max_workers: 2
  shards_acknowledged: false
steps:
  - key: hot/rollover/rollover
    next: warm/shrink/shrink
    type: rollover
    params:
      alias: logs
      max_age: 7d
      max_size: 50gb
  - key: warm/shrink/shrink
    next: delete/delete/delete
    type: shrink
    params:
      shrunken_index_name: shrink-logs
  - key: delete/delete/delete
    next: completed/completed/completed
    type: delete
"""


def _write(tmp_path: Path, text: str, name: str = "steps.yaml") -> Path:
    p = tmp_path / name
    p.write_text(text)
    return p


def test_load_steps_file(tmp_path):
    cfg = load_steps_file(_write(tmp_path, STEPS_YAML))
    assert cfg.client.max_workers == 2
    assert cfg.client.shards_acknowledged is False
    assert [s.type for s in cfg.steps] == ["rollover", "shrink", "delete"]
    assert cfg.steps[0].key == StepKey("hot", "rollover", "rollover")
    assert cfg.steps[2].next_key == TERMINAL_STEP_KEY


def test_load_steps_file_invalid_schema(tmp_path):
    bad = _write(tmp_path, "steps:\n  - key: not-a-key\n    type: shrink\n")
    with pytest.raises(ValueError, match="Invalid steps file schema"):
        load_steps_file(bad)


def test_load_steps_file_unknown_type(tmp_path):
    bad = _write(tmp_path, "steps:\n  - key: a/b/c\n    type: freeze\n")
    with pytest.raises(ValueError, match="Invalid steps file schema"):
        load_steps_file(bad)


def test_build_steps_shares_client_and_adds_terminal(tmp_path):
    client = MagicMock()
    steps = build_steps(load_steps_file(_write(tmp_path, STEPS_YAML)), client)

    assert isinstance(steps[TERMINAL_STEP_KEY], TerminalStep)
    rollover = steps[StepKey("hot", "rollover", "rollover")]
    assert isinstance(rollover, RolloverStep)
    assert rollover.max_age == timedelta(days=7)
    assert rollover.max_size == 50 * 1024**3
    shrink = steps[StepKey("warm", "shrink", "shrink")]
    assert isinstance(shrink, ShrinkStep)
    assert shrink.client is client
    assert rollover.client is client


def test_build_steps_rejects_dangling_next(tmp_path):
    text = "steps:\n  - key: a/b/c\n    next: a/b/missing\n    type: delete\n"
    with pytest.raises(StepConfigurationError, match="undefined step"):
        build_steps(load_steps_file(_write(tmp_path, text)), MagicMock())


def test_build_steps_rejects_duplicates(tmp_path):
    text = (
        "steps:\n"
        "  - {key: a/b/c, next: completed/completed/completed, type: delete}\n"
        "  - {key: a/b/c, next: completed/completed/completed, type: delete}\n"
    )
    with pytest.raises(StepConfigurationError, match="Duplicate"):
        build_steps(load_steps_file(_write(tmp_path, text)), MagicMock())


def test_build_steps_rejects_cycles(tmp_path):
    text = (
        "steps:\n"
        "  - {key: a/b/one, next: a/b/two, type: delete}\n"
        "  - {key: a/b/two, next: a/b/one, type: delete}\n"
    )
    with pytest.raises(StepConfigurationError, match="loops"):
        build_steps(load_steps_file(_write(tmp_path, text)), MagicMock())


def test_missing_next_for_action_step_rejected():
    cfg = StepConfig(key=StepKey("a", "b", "c"), next_key=None, type="delete")
    with pytest.raises(StepConfigurationError):
        step_for_config(cfg, MagicMock())


def test_missing_required_param_rejected():
    cfg = StepConfig(key=StepKey("a", "b", "c"), next_key=TERMINAL_STEP_KEY, type="shrink")
    with pytest.raises(StepConfigurationError):
        step_for_config(cfg, MagicMock())


def test_unknown_params_are_dropped():
    cfg = StepConfig(
        key=StepKey("a", "b", "c"),
        next_key=TERMINAL_STEP_KEY,
        type="shrink",
        params={"shrunken_index_name": "s", "number_of_shards": 1},
    )
    step = step_for_config(cfg, MagicMock())
    assert step == ShrinkStep(StepKey("a", "b", "c"), TERMINAL_STEP_KEY, MagicMock(), "s")


def test_validate_chain_key_mismatch():
    step = TerminalStep()
    with pytest.raises(StepConfigurationError):
        validate_chain({StepKey("x", "y", "z"): step})


def test_load_cluster_file(tmp_path):
    text = (
        "indices:\n"
        "  - name: logs-000001\n"
        "    number_of_shards: 3\n"
        "    number_of_replicas: 0\n"
        "    creation_date: 42\n"
        "    aliases:\n"
        "      logs: {is_write_index: true}\n"
    )
    [im] = load_cluster_file(_write(tmp_path, text, "cluster.yaml"))
    assert im.name == "logs-000001"
    assert im.number_of_shards == 3
    assert im.number_of_replicas == 0
    assert im.lifecycle_date == 42
    assert im.aliases["logs"].is_write_index is True
