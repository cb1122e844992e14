"""Delete step."""

from __future__ import annotations

from dataclasses import dataclass

from ..client.requests import AcknowledgedResponse, DeleteIndexRequest
from ..listeners import Listener
from ..metadata import IndexMetadata
from .async_action import AsyncActionStep


@dataclass(frozen=True)
class DeleteStep(AsyncActionStep):
    def perform_action(self, index_metadata: IndexMetadata, listener: Listener) -> None:
        request = DeleteIndexRequest(indices=(index_metadata.name,))
        self._submit(self.client.indices.delete_index, request, _acknowledged, listener)


def _acknowledged(response: AcknowledgedResponse) -> bool:
    return response.acknowledged
