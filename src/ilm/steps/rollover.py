"""Rollover step.

CONTRACT
- Inputs: IndexMetadata of the current write index, Listener
- Outputs (required):
  - One RolloverRequest for the configured alias with the configured conditions
- Invariants:
  - At least one of max_size / max_age / max_docs is configured
  - complete == response.rolled_over (conditions not met yet -> retry later)
- Failure:
  - StepConfigurationError on missing conditions or when the index does not carry the alias
  - Admin errors forwarded verbatim to listener.on_failure
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from ..client.requests import RolloverConditions, RolloverRequest, RolloverResponse
from ..errors import StepConfigurationError
from ..listeners import Listener
from ..metadata import IndexMetadata
from .async_action import AsyncActionStep


@dataclass(frozen=True)
class RolloverStep(AsyncActionStep):
    alias: str
    max_size: int | None = None
    max_age: timedelta | None = None
    max_docs: int | None = None

    def __post_init__(self) -> None:
        super().__post_init__()
        if not self.alias:
            raise StepConfigurationError(f"Step {self.key} needs a rollover alias")
        if self.conditions.is_empty():
            raise StepConfigurationError(
                f"Step {self.key} needs at least one of max_size, max_age, max_docs"
            )

    @property
    def conditions(self) -> RolloverConditions:
        return RolloverConditions(max_size=self.max_size, max_age=self.max_age, max_docs=self.max_docs)

    def build_request(self, index_metadata: IndexMetadata) -> RolloverRequest:
        if self.alias not in index_metadata.aliases:
            raise StepConfigurationError(
                f"index [{index_metadata.name}] is not the write index for alias [{self.alias}]"
            )
        return RolloverRequest(
            alias=self.alias,
            conditions=self.conditions,
        )

    def perform_action(self, index_metadata: IndexMetadata, listener: Listener) -> None:
        request = self.build_request(index_metadata)
        self._submit(self.client.indices.rollover_index, request, _rolled_over, listener)


def _rolled_over(response: RolloverResponse) -> bool:
    return response.rolled_over
