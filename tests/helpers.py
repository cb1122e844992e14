"""Shared test helpers (not collected)."""

from __future__ import annotations

import random
import string
import threading

from ilm.steps.base import StepKey


def random_alpha(length: int) -> str:
    return "".join(random.choice(string.ascii_lowercase) for _ in range(length))


def random_step_key() -> StepKey:
    return StepKey(random_alpha(10), random_alpha(10), random_alpha(10))


class RecordingListener:
    """Listener that records every callback it receives."""

    def __init__(self) -> None:
        self.responses: list[bool] = []
        self.failures: list[Exception] = []
        self.done = threading.Event()

    def on_response(self, complete: bool) -> None:
        self.responses.append(complete)
        self.done.set()

    def on_failure(self, exc: Exception) -> None:
        self.failures.append(exc)
        self.done.set()

    @property
    def calls(self) -> int:
        return len(self.responses) + len(self.failures)
