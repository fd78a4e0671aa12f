from __future__ import annotations

import math
from dataclasses import dataclass, asdict, fields
from typing import Any

# ------------------------------------------------------------------ Field names (wire keys)

FIELD_ENABLED = "timeshift_enabled"
FIELD_ONDEMAND = "timeshift_ondemand"
FIELD_PATH = "timeshift_path"
FIELD_MAX_PERIOD = "timeshift_max_period"
FIELD_UNLIMITED_PERIOD = "timeshift_unlimited_period"
FIELD_MAX_SIZE = "timeshift_max_size"
FIELD_UNLIMITED_SIZE = "timeshift_unlimited_size"

# numeric field -> the unlimited flag that gates it
GATED_FIELDS: dict[str, str] = {
    FIELD_MAX_PERIOD: FIELD_UNLIMITED_PERIOD,
    FIELD_MAX_SIZE: FIELD_UNLIMITED_SIZE,
}

_TRUE_STRINGS = {"1", "true", "on", "yes"}


# ------------------------------------------------------------------ Record

@dataclass
class TimeshiftConfig:
    timeshift_enabled: bool = False
    timeshift_ondemand: bool = False
    timeshift_path: str = ""
    timeshift_unlimited_period: bool = False
    timeshift_max_period: int | float | None = None
    timeshift_unlimited_size: bool = False
    timeshift_max_size: int | float | None = None

    @classmethod
    def field_names(cls) -> list[str]:
        return [f.name for f in fields(cls)]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TimeshiftConfig":
        """Build a record from a loadSettings payload. Missing keys keep defaults."""
        return cls(
            timeshift_enabled=to_bool(data.get(FIELD_ENABLED)),
            timeshift_ondemand=to_bool(data.get(FIELD_ONDEMAND)),
            timeshift_path=str(data.get(FIELD_PATH) or ""),
            timeshift_unlimited_period=to_bool(data.get(FIELD_UNLIMITED_PERIOD)),
            timeshift_max_period=to_number(data.get(FIELD_MAX_PERIOD)),
            timeshift_unlimited_size=to_bool(data.get(FIELD_UNLIMITED_SIZE)),
            timeshift_max_size=to_number(data.get(FIELD_MAX_SIZE)),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def to_form_params(self) -> dict[str, str]:
        """Encode all seven fields as saveSettings form parameters."""
        return {
            FIELD_ENABLED: _encode_bool(self.timeshift_enabled),
            FIELD_ONDEMAND: _encode_bool(self.timeshift_ondemand),
            FIELD_PATH: self.timeshift_path,
            FIELD_UNLIMITED_PERIOD: _encode_bool(self.timeshift_unlimited_period),
            FIELD_MAX_PERIOD: _encode_number(self.timeshift_max_period),
            FIELD_UNLIMITED_SIZE: _encode_bool(self.timeshift_unlimited_size),
            FIELD_MAX_SIZE: _encode_number(self.timeshift_max_size),
        }


# ------------------------------------------------------------------ Coercion

def to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return False


def to_number(value: Any) -> int | float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        number = value
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    # nan/inf count as blank
    if not math.isfinite(number):
        return None
    return int(number) if number.is_integer() else number


def _encode_bool(value: bool) -> str:
    return "1" if value else "0"


def _encode_number(value: int | float | None) -> str:
    number = to_number(value)
    if number is None:
        return ""
    return str(number)
