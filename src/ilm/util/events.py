"""Step outcome journal.

CONTRACT
- Inputs: StepOutcome records (or arbitrary fields via emit)
- Outputs:
  - One JSON line per record appended to the journal path
  - outcomes() replays the step_outcome lines as StepOutcome models
- Invariants:
  - Adds `ts_ms` timestamp automatically
  - Adds `run_id` when configured and not already present
  - Lines with another `event` are skipped on replay
- Failure:
  - Raises OSError if the journal path is not writable
  - Raises pydantic.ValidationError on replay of a corrupt step_outcome line
"""

from __future__ import annotations

import json
import time
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ..outcome import StepOutcome

STEP_OUTCOME_EVENT = "step_outcome"


@dataclass
class EventLog:
    path: Path
    run_id: str | None = None

    def emit(self, **event: Any) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        event.setdefault("ts_ms", int(time.time() * 1000))
        if self.run_id and "run_id" not in event:
            event["run_id"] = self.run_id
        with self.path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(event, ensure_ascii=False) + "\n")

    def emit_outcome(self, outcome: StepOutcome) -> None:
        self.emit(event=STEP_OUTCOME_EVENT, **outcome.model_dump(mode="json"))

    def outcomes(self) -> Iterator[StepOutcome]:
        if not self.path.exists():
            return
        with self.path.open(encoding="utf-8") as f:
            for line in f:
                if not line.strip():
                    continue
                record = json.loads(line)
                if record.get("event") != STEP_OUTCOME_EVENT:
                    continue
                yield StepOutcome.model_validate(
                    {k: v for k, v in record.items() if k in StepOutcome.model_fields}
                )
