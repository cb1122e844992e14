"""Index metadata snapshot.

CONTRACT
- Inputs: cluster state for one index (or a plain dict, see from_dict)
- Outputs:
  - IndexMetadata: frozen, read-only view handed to each step invocation
- Invariants:
  - settings and aliases are exposed as read-only mappings
  - lifecycle_date falls back to creation_date when the lifecycle setting is absent
- Failure:
  - from_dict raises KeyError / ValueError on malformed input
"""

from __future__ import annotations

import time
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any

SETTING_NUMBER_OF_SHARDS = "index.number_of_shards"
SETTING_NUMBER_OF_REPLICAS = "index.number_of_replicas"
LIFECYCLE_INDEX_CREATION_DATE = "index.lifecycle.date"
LIFECYCLE_NAME = "index.lifecycle.name"


@dataclass(frozen=True)
class AliasMetadata:
    name: str
    filter: Mapping[str, Any] | None = None
    index_routing: str | None = None
    search_routing: str | None = None
    is_write_index: bool | None = None


@dataclass(frozen=True)
class IndexMetadata:
    name: str
    number_of_shards: int
    number_of_replicas: int
    creation_date: int = field(default_factory=lambda: int(time.time() * 1000))
    settings: Mapping[str, Any] = field(default_factory=dict)
    aliases: Mapping[str, AliasMetadata] = field(default_factory=dict)
    docs_count: int = 0
    size_in_bytes: int = 0

    def __post_init__(self) -> None:
        # Freeze the mappings so a snapshot can't be written through.
        object.__setattr__(self, "settings", MappingProxyType(dict(self.settings)))
        object.__setattr__(self, "aliases", MappingProxyType(dict(self.aliases)))

    @property
    def lifecycle_date(self) -> int:
        value = self.settings.get(LIFECYCLE_INDEX_CREATION_DATE)
        return int(value) if value is not None else self.creation_date

    def with_changes(self, **changes: Any) -> IndexMetadata:
        return replace(self, **changes)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> IndexMetadata:
        aliases: dict[str, AliasMetadata] = {}
        for alias_name, alias_raw in (data.get("aliases") or {}).items():
            alias_raw = alias_raw or {}
            aliases[alias_name] = AliasMetadata(
                name=alias_name,
                filter=alias_raw.get("filter"),
                index_routing=alias_raw.get("index_routing"),
                search_routing=alias_raw.get("search_routing"),
                is_write_index=alias_raw.get("is_write_index"),
            )
        kwargs: dict[str, Any] = {}
        if "creation_date" in data:
            kwargs["creation_date"] = int(data["creation_date"])
        return cls(
            name=str(data["name"]),
            number_of_shards=int(data.get("number_of_shards", 1)),
            number_of_replicas=int(data.get("number_of_replicas", 1)),
            settings=dict(data.get("settings") or {}),
            aliases=aliases,
            docs_count=int(data.get("docs_count", 0)),
            size_in_bytes=int(data.get("size_in_bytes", 0)),
            **kwargs,
        )
