"""Admin request / response models.

CONTRACT
- Inputs: pydantic models built by steps (requests) or by admin clients (responses)
- Outputs:
  - Validated, immutable objects with structural equality
- Invariants:
  - Aliases compare by name, filter and routing
  - Responses carry independent acknowledgement flags
- Failure:
  - Raises ValidationError on schema mismatch
"""

from __future__ import annotations

from datetime import timedelta
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class Alias(_Frozen):
    name: str
    filter: str | None = None  # JSON-encoded query, kept as text so the model stays hashable
    index_routing: str | None = None
    search_routing: str | None = None
    is_write_index: bool | None = None


class CreateIndexRequest(_Frozen):
    index: str
    settings: dict[str, Any] = Field(default_factory=dict)
    aliases: frozenset[Alias] = Field(default_factory=frozenset)


class ResizeRequest(_Frozen):
    source_index: str
    target_index_request: CreateIndexRequest


class ResizeResponse(_Frozen):
    acknowledged: bool
    shards_acknowledged: bool
    index: str


class RolloverConditions(_Frozen):
    max_size: int | None = None
    max_age: timedelta | None = None
    max_docs: int | None = None

    def is_empty(self) -> bool:
        return self.max_size is None and self.max_age is None and self.max_docs is None


class RolloverRequest(_Frozen):
    alias: str
    conditions: RolloverConditions
    new_index_name: str | None = None
    dry_run: bool = False


class RolloverResponse(_Frozen):
    old_index: str
    new_index: str
    rolled_over: bool
    dry_run: bool = False
    acknowledged: bool = False
    shards_acknowledged: bool = False
    condition_status: dict[str, bool] = Field(default_factory=dict)


class UpdateSettingsRequest(_Frozen):
    indices: tuple[str, ...]
    settings: dict[str, Any]


class DeleteIndexRequest(_Frozen):
    indices: tuple[str, ...]


class AcknowledgedResponse(_Frozen):
    acknowledged: bool
