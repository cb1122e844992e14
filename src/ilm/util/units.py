"""Human-readable unit parsing.

CONTRACT
- Inputs: strings like "30d", "12h", "5gb", or plain numbers
- Outputs:
  - parse_time_value() -> timedelta
  - parse_byte_size() -> int bytes
- Invariants:
  - Plain integers are seconds (time) or bytes (size)
- Failure:
  - Raises ValueError on unknown units or negative values
"""

from __future__ import annotations

import re
from datetime import timedelta

_VALUE_RE = re.compile(r"^\s*(?P<num>\d+(?:\.\d+)?)\s*(?P<unit>[a-zA-Z]*)\s*$")

_TIME_UNITS = {
    "ms": timedelta(milliseconds=1),
    "s": timedelta(seconds=1),
    "m": timedelta(minutes=1),
    "h": timedelta(hours=1),
    "d": timedelta(days=1),
    "": timedelta(seconds=1),
}

_SIZE_UNITS = {
    "b": 1,
    "kb": 1024,
    "mb": 1024**2,
    "gb": 1024**3,
    "tb": 1024**4,
    "pb": 1024**5,
    "": 1,
}


def _split(value: str | int | float) -> tuple[float, str]:
    if isinstance(value, (int, float)):
        if value < 0:
            raise ValueError(f"negative value: {value}")
        return float(value), ""
    m = _VALUE_RE.match(value)
    if not m:
        raise ValueError(f"cannot parse {value!r}")
    return float(m.group("num")), m.group("unit").lower()


def parse_time_value(value: str | int | float) -> timedelta:
    num, unit = _split(value)
    if unit not in _TIME_UNITS:
        raise ValueError(f"unknown time unit {unit!r} in {value!r}")
    return _TIME_UNITS[unit] * num


def parse_byte_size(value: str | int | float) -> int:
    num, unit = _split(value)
    if unit not in _SIZE_UNITS:
        raise ValueError(f"unknown size unit {unit!r} in {value!r}")
    return int(num * _SIZE_UNITS[unit])
