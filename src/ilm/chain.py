"""Step chain resolution.

CONTRACT
- Inputs: StepsFileConfig, a shared AdminClient
- Outputs (required):
  - dict[StepKey, Step] with the terminal step always present
- Invariants:
  - Keys are unique
  - Every next_step_key resolves to a defined step or the terminal marker
  - Following next_step_key from any step reaches the terminal step (no cycles)
  - All async steps share the same client instance
- Failure:
  - Raises StepConfigurationError on any violation
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import fields as dataclass_fields
from typing import Any

from loguru import logger

from .client.base import AdminClient
from .config import StepConfig, StepsFileConfig
from .errors import StepConfigurationError
from .steps.async_action import AsyncActionStep
from .steps.base import TERMINAL_STEP_KEY, Step, StepKey, TerminalStep
from .steps.delete import DeleteStep
from .steps.rollover import RolloverStep
from .steps.shrink import ShrinkStep
from .steps.update_settings import UpdateSettingsStep
from .util.units import parse_byte_size, parse_time_value

_ASYNC_STEP_TYPES: dict[str, type[AsyncActionStep]] = {
    "shrink": ShrinkStep,
    "rollover": RolloverStep,
    "update_settings": UpdateSettingsStep,
    "delete": DeleteStep,
}


def _filter_step_kwargs(cls: type, key: StepKey, params: dict[str, Any]) -> dict[str, Any]:
    reserved = {"key", "next_step_key", "client"}
    allowed = {f.name for f in dataclass_fields(cls)} - reserved
    dropped = sorted(set(params) - allowed)
    if dropped:
        logger.warning(f"Step {key}: ignoring unknown params {dropped}")
    return {k: v for k, v in params.items() if k in allowed}


def _coerce_rollover_params(params: dict[str, Any]) -> dict[str, Any]:
    out = dict(params)
    if out.get("max_size") is not None:
        out["max_size"] = parse_byte_size(out["max_size"])
    if out.get("max_age") is not None:
        out["max_age"] = parse_time_value(out["max_age"])
    if out.get("max_docs") is not None:
        out["max_docs"] = int(out["max_docs"])
    return out


def step_for_config(cfg: StepConfig, client: AdminClient) -> Step:
    if cfg.type == "terminal":
        return TerminalStep(key=cfg.key)
    cls = _ASYNC_STEP_TYPES.get(cfg.type)
    if cls is None:
        raise StepConfigurationError(f"Unknown step type: {cfg.type}")
    params = _filter_step_kwargs(cls, cfg.key, cfg.params)
    try:
        if cls is RolloverStep:
            params = _coerce_rollover_params(params)
        return cls(key=cfg.key, next_step_key=cfg.next_key, client=client, **params)
    except StepConfigurationError:
        raise
    except (TypeError, ValueError) as exc:
        raise StepConfigurationError(f"Invalid step {cfg.key}: {exc}") from exc


def build_steps(config: StepsFileConfig, client: AdminClient) -> dict[StepKey, Step]:
    steps: dict[StepKey, Step] = {}
    for cfg in config.steps:
        if cfg.key in steps:
            raise StepConfigurationError(f"Duplicate step key: {cfg.key}")
        steps[cfg.key] = step_for_config(cfg, client)
    if TERMINAL_STEP_KEY not in steps:
        steps[TERMINAL_STEP_KEY] = TerminalStep()
    validate_chain(steps)
    return steps


def validate_chain(steps: Mapping[StepKey, Step]) -> None:
    for key, step in steps.items():
        if step.key != key:
            raise StepConfigurationError(f"Step registered under {key} reports key {step.key}")
        nxt = step.next_step_key
        if nxt is not None and nxt not in steps and nxt != TERMINAL_STEP_KEY:
            raise StepConfigurationError(f"Step {key} points at undefined step {nxt}")

    for start in steps:
        seen: set[StepKey] = set()
        current: StepKey | None = start
        while current is not None and current in steps:
            if current in seen:
                raise StepConfigurationError(f"Step chain starting at {start} loops back to {current}")
            seen.add(current)
            current = steps[current].next_step_key
