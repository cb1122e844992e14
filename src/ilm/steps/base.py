"""Step identity and base contract.

CONTRACT
- StepKey: (phase, action, name), all non-empty; structural equality and ordering
- Step: key + next_step_key + class-level retryable flag
- Invariants:
  - A step never points at itself (key != next_step_key)
  - Only TerminalStep has next_step_key None
  - Equality and hash cover key, next_step_key and subclass fields; never client handles
- Failure:
  - Raises ValueError on empty key parts, self loops or a missing next key
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar


@dataclass(frozen=True, order=True)
class StepKey:
    phase: str
    action: str
    name: str

    def __post_init__(self) -> None:
        for part in ("phase", "action", "name"):
            value = getattr(self, part)
            if not isinstance(value, str) or not value:
                raise ValueError(f"StepKey.{part} must be a non-empty string, got {value!r}")

    def __str__(self) -> str:
        return f"{self.phase}/{self.action}/{self.name}"

    @classmethod
    def parse(cls, text: str) -> StepKey:
        parts = text.split("/")
        if len(parts) != 3:
            raise ValueError(f"Invalid step key {text!r}: expected phase/action/name")
        return cls(*parts)


TERMINAL_STEP_KEY = StepKey("completed", "completed", "completed")


@dataclass(frozen=True)
class Step:
    key: StepKey
    next_step_key: StepKey | None

    retryable: ClassVar[bool] = False

    def __post_init__(self) -> None:
        if self.next_step_key is None:
            raise ValueError(f"Step {self.key} has no next step key")
        if self.key == self.next_step_key:
            raise ValueError(f"Step {self.key} cannot name itself as its next step")

    def is_retryable(self) -> bool:
        return self.retryable


@dataclass(frozen=True)
class TerminalStep(Step):
    """End of every chain. Runners stop here."""

    key: StepKey = TERMINAL_STEP_KEY
    next_step_key: StepKey | None = None

    def __post_init__(self) -> None:
        if self.next_step_key is not None:
            raise ValueError("TerminalStep cannot have a next step")
