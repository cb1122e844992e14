"""Shrink step.

CONTRACT
- Inputs: IndexMetadata of the source index, Listener
- Outputs (required):
  - One ResizeRequest: source -> shrunken_index_name, carrying the source's
    shard count, replica count, lifecycle date and aliases
- Invariants:
  - complete == acknowledged AND shards_acknowledged
  - Name collisions are not checked here; the admin client reports them
- Failure:
  - StepConfigurationError if shards < 1, replicas < 0 or the lifecycle date is
    not numeric (raised before submission)
  - Admin errors forwarded verbatim to listener.on_failure
"""

from __future__ import annotations

import json
from dataclasses import dataclass

from ..client.requests import Alias, CreateIndexRequest, ResizeRequest, ResizeResponse
from ..errors import StepConfigurationError
from ..listeners import Listener
from ..metadata import (
    LIFECYCLE_INDEX_CREATION_DATE,
    SETTING_NUMBER_OF_REPLICAS,
    SETTING_NUMBER_OF_SHARDS,
    AliasMetadata,
    IndexMetadata,
)
from .async_action import AsyncActionStep


@dataclass(frozen=True)
class ShrinkStep(AsyncActionStep):
    shrunken_index_name: str

    def __post_init__(self) -> None:
        super().__post_init__()
        if not self.shrunken_index_name:
            raise StepConfigurationError(f"Step {self.key} needs a shrunken index name")

    def build_request(self, index_metadata: IndexMetadata) -> ResizeRequest:
        if index_metadata.number_of_shards < 1:
            raise StepConfigurationError(
                f"index [{index_metadata.name}] has invalid shard count {index_metadata.number_of_shards}"
            )
        if index_metadata.number_of_replicas < 0:
            raise StepConfigurationError(
                f"index [{index_metadata.name}] has invalid replica count {index_metadata.number_of_replicas}"
            )
        try:
            lifecycle_date = index_metadata.lifecycle_date
        except (TypeError, ValueError) as exc:
            raise StepConfigurationError(
                f"index [{index_metadata.name}] has an invalid {LIFECYCLE_INDEX_CREATION_DATE} setting: {exc}"
            ) from exc
        settings = {
            SETTING_NUMBER_OF_SHARDS: index_metadata.number_of_shards,
            SETTING_NUMBER_OF_REPLICAS: index_metadata.number_of_replicas,
            LIFECYCLE_INDEX_CREATION_DATE: lifecycle_date,
        }
        aliases = frozenset(_to_alias(a) for a in index_metadata.aliases.values())
        return ResizeRequest(
            source_index=index_metadata.name,
            target_index_request=CreateIndexRequest(
                index=self.shrunken_index_name, settings=settings, aliases=aliases
            ),
        )

    def perform_action(self, index_metadata: IndexMetadata, listener: Listener) -> None:
        request = self.build_request(index_metadata)
        self._submit(self.client.indices.resize_index, request, _is_complete, listener)


def _is_complete(response: ResizeResponse) -> bool:
    return response.acknowledged and response.shards_acknowledged


def _to_alias(alias: AliasMetadata) -> Alias:
    return Alias(
        name=alias.name,
        filter=None if alias.filter is None else json.dumps(dict(alias.filter), sort_keys=True),
        index_routing=alias.index_routing,
        search_routing=alias.search_routing,
    )
