"""Blocking step execution and outcome records.

CONTRACT
- Inputs: AsyncActionStep, IndexMetadata, optional timeout (seconds)
- Outputs:
  - StepOutcome: COMPLETE (advance to next_step_key), INCOMPLETE (stay on key),
    FAILED (error text, retryable flag copied from the step)
- Invariants:
  - Exactly one perform_action call per run_step
- Failure:
  - StepConfigurationError propagates (fatal precondition)
  - concurrent.futures.TimeoutError propagates when the wait exceeds timeout
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel

from .metadata import IndexMetadata
from .steps.async_action import AsyncActionStep, perform_action_future

Status = Literal["COMPLETE", "INCOMPLETE", "FAILED"]


class StepOutcome(BaseModel):
    schema_version: int = 1
    key: str
    index: str
    status: Status
    next_step_key: str | None = None
    retryable: bool = False
    error: str | None = None

    @property
    def complete(self) -> bool:
        return self.status == "COMPLETE"


def run_step(step: AsyncActionStep, index_metadata: IndexMetadata, timeout: float | None = None) -> StepOutcome:
    future = perform_action_future(step, index_metadata)
    exc = future.exception(timeout=timeout)
    if exc is not None:
        return StepOutcome(
            key=str(step.key),
            index=index_metadata.name,
            status="FAILED",
            retryable=step.is_retryable(),
            error=f"{type(exc).__name__}: {exc}",
        )
    if future.result():
        nxt = step.next_step_key
        return StepOutcome(
            key=str(step.key),
            index=index_metadata.name,
            status="COMPLETE",
            next_step_key=str(nxt) if nxt is not None else None,
            retryable=step.is_retryable(),
        )
    return StepOutcome(
        key=str(step.key),
        index=index_metadata.name,
        status="INCOMPLETE",
        next_step_key=str(step.key),
        retryable=step.is_retryable(),
    )
