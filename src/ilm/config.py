"""Configuration models.

CONTRACT
- Inputs: YAML file path (steps.yaml) or dictionary data
- Outputs (required):
  - Validated StepsFileConfig, StepConfig, ClientConfig objects
- Invariants:
  - Step keys are `phase/action/name` with non-empty parts
  - Default values are safe (small worker pool, shards acknowledged)
- Failure:
  - Raises ValueError on invalid schema or keys
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import jsonschema
import yaml

from .metadata import IndexMetadata
from .steps.base import StepKey

STEP_TYPES = ("shrink", "rollover", "update_settings", "delete", "terminal")

_KEY_PATTERN = "^[^/]+/[^/]+/[^/]+$"


@dataclass(frozen=True)
class ClientConfig:
    max_workers: int = 4
    shards_acknowledged: bool = True


@dataclass(frozen=True)
class StepConfig:
    key: StepKey
    next_key: StepKey | None
    type: str
    params: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class StepsFileConfig:
    steps: list[StepConfig]
    client: ClientConfig = field(default_factory=ClientConfig)


STEPS_SCHEMA = {
    "type": "object",
    "properties": {
        "client": {
            "type": "object",
            "properties": {
                "max_workers": {"type": "integer", "minimum": 1},
                "shards_acknowledged": {"type": "boolean"},
            },
        },
        "steps": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "key": {"type": "string", "pattern": _KEY_PATTERN},
                    "next": {"type": ["string", "null"], "pattern": _KEY_PATTERN},
                    "type": {"type": "string", "enum": list(STEP_TYPES)},
                    "params": {"type": "object"},
                },
                "required": ["key", "type"],
            },
        },
    },
    "required": ["steps"],
}

CLUSTER_SCHEMA = {
    "type": "object",
    "properties": {
        "indices": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string", "minLength": 1},
                    "number_of_shards": {"type": "integer"},
                    "number_of_replicas": {"type": "integer"},
                    "creation_date": {"type": "integer"},
                    "settings": {"type": "object"},
                    "aliases": {"type": "object"},
                    "docs_count": {"type": "integer"},
                    "size_in_bytes": {"type": "integer"},
                },
                "required": ["name"],
            },
        },
    },
    "required": ["indices"],
}


def _load_yaml(path: Path, schema: dict[str, Any], label: str) -> dict[str, Any]:
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    try:
        jsonschema.validate(instance=data, schema=schema)
    except jsonschema.ValidationError as e:
        raise ValueError(f"Invalid {label} schema: {e.message}") from e
    return data


def parse_steps(data: dict[str, Any]) -> StepsFileConfig:
    steps: list[StepConfig] = []
    for s in data.get("steps", []):
        nxt = s.get("next")
        steps.append(
            StepConfig(
                key=StepKey.parse(str(s["key"])),
                next_key=StepKey.parse(str(nxt)) if nxt else None,
                type=str(s["type"]),
                params=dict(s.get("params", {}) or {}),
            )
        )
    client_raw = data.get("client", {}) or {}
    return StepsFileConfig(
        steps=steps,
        client=ClientConfig(
            max_workers=int(client_raw.get("max_workers", 4)),
            shards_acknowledged=bool(client_raw.get("shards_acknowledged", True)),
        ),
    )


def load_steps_file(path: Path) -> StepsFileConfig:
    return parse_steps(_load_yaml(path, STEPS_SCHEMA, "steps file"))


def load_cluster_file(path: Path) -> list[IndexMetadata]:
    data = _load_yaml(path, CLUSTER_SCHEMA, "cluster file")
    return [IndexMetadata.from_dict(raw) for raw in data["indices"]]


if __name__ == "__main__":
    import argparse
    import sys

    parser = argparse.ArgumentParser(description="Steps file loader")
    parser.add_argument("--steps", required=True, help="Path to steps.yaml")
    args = parser.parse_args()

    try:
        cfg = load_steps_file(Path(args.steps))
        print(f"Loaded {len(cfg.steps)} steps.")
        print(f"Client: {cfg.client}")
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
