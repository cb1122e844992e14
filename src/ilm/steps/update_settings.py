"""Update-settings step: apply a fixed settings map to the index."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from ..client.requests import AcknowledgedResponse, UpdateSettingsRequest
from ..errors import StepConfigurationError
from ..listeners import Listener
from ..metadata import IndexMetadata
from .async_action import AsyncActionStep


@dataclass(frozen=True)
class UpdateSettingsStep(AsyncActionStep):
    settings: Mapping[str, Any] = field(hash=False)

    def __post_init__(self) -> None:
        super().__post_init__()
        if not self.settings:
            raise StepConfigurationError(f"Step {self.key} has no settings to apply")
        object.__setattr__(self, "settings", MappingProxyType(dict(self.settings)))

    def perform_action(self, index_metadata: IndexMetadata, listener: Listener) -> None:
        request = UpdateSettingsRequest(indices=(index_metadata.name,), settings=dict(self.settings))
        self._submit(self.client.indices.update_settings, request, _acknowledged, listener)


def _acknowledged(response: AcknowledgedResponse) -> bool:
    return response.acknowledged
