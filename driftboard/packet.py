"""The position packet exchanged between clients and the relay server."""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field, replace
from typing import Any

_FIELDS = ("id", "color", "x", "y")


class PacketError(ValueError):
    """Raised when a packet cannot be decoded or encoded."""


def _reject_constant(name: str) -> Any:
    raise PacketError(f"invalid JSON number: {name}")


def _number(data: dict, key: str) -> float:
    if key not in data:
        raise PacketError(f"missing field `{key}`")
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise PacketError(f"field `{key}` must be a number")
    return float(value)


def _string(data: dict, key: str) -> str:
    if key not in data:
        raise PacketError(f"missing field `{key}`")
    value = data[key]
    if not isinstance(value, str):
        raise PacketError(f"field `{key}` must be a string")
    return value


@dataclass(frozen=True)
class Packet:
    """A cursor position in normalised coordinates, plus any extra fields."""

    id: str
    color: str
    x: float
    y: float
    extra: dict[str, Any] = field(default_factory=dict)

    def to_json(self) -> str:
        """Encode as a flat JSON object; extra fields sit beside the known ones."""
        data: dict[str, Any] = {"id": self.id, "color": self.color, "x": self.x, "y": self.y}
        for key, value in self.extra.items():
            if key not in data:
                data[key] = value
        try:
            return json.dumps(data, separators=(",", ":"), allow_nan=False)
        except (TypeError, ValueError) as exc:
            raise PacketError(str(exc)) from exc

    @classmethod
    def from_json(cls, text: str) -> Packet:
        """Decode a packet; unknown keys are kept in ``extra``."""
        try:
            data = json.loads(text, parse_constant=_reject_constant)
        except json.JSONDecodeError as exc:
            raise PacketError(f"invalid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise PacketError("packet must be a JSON object")
        return cls(
            id=_string(data, "id"),
            color=_string(data, "color"),
            x=_number(data, "x"),
            y=_number(data, "y"),
            extra={k: v for k, v in data.items() if k not in _FIELDS},
        )

    def with_id(self, new_id: str) -> Packet:
        """Return a copy carrying a different sender id."""
        return replace(self, id=new_id)


def is_finite(packet: Packet) -> bool:
    """Whether both coordinates are finite numbers."""
    return math.isfinite(packet.x) and math.isfinite(packet.y)