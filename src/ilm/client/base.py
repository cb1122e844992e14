"""Admin client protocol definition.

CONTRACT
- Inputs: one request model and one ActionListener per call
- Outputs:
  - Exactly one ActionListener callback per call, possibly on another thread
- Invariants:
  - Calls return after submission; they do not wait for the outcome
  - The client is a shared capability handle; steps never mutate it
- Failure:
  - Rejected operations are delivered through on_failure (AdminClientError)
  - May also raise synchronously if the request cannot be submitted at all
"""

from __future__ import annotations

from typing import Protocol

from ..listeners import ActionListener
from .requests import (
    AcknowledgedResponse,
    DeleteIndexRequest,
    ResizeRequest,
    ResizeResponse,
    RolloverRequest,
    RolloverResponse,
    UpdateSettingsRequest,
)


class IndicesAdminClient(Protocol):
    def resize_index(self, request: ResizeRequest, listener: ActionListener[ResizeResponse]) -> None: ...

    def rollover_index(
        self, request: RolloverRequest, listener: ActionListener[RolloverResponse]
    ) -> None: ...

    def update_settings(
        self, request: UpdateSettingsRequest, listener: ActionListener[AcknowledgedResponse]
    ) -> None: ...

    def delete_index(
        self, request: DeleteIndexRequest, listener: ActionListener[AcknowledgedResponse]
    ) -> None: ...


class AdminClient(Protocol):
    @property
    def indices(self) -> IndicesAdminClient: ...
