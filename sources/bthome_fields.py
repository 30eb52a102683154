# bthome_fields.py
"""
Static BTHome v2 object table for the fields a WS90 station broadcasts.

Each entry maps the one‑byte object id to its semantic name, the integer
encoding on the air and an optional multiplicative factor.  The table is
built once at import time and exposed read‑only.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional


class ValueType(Enum):
    """Integer encodings used by BTHome objects: (byte size, signed)."""
    uint8 = (1, False)
    int8 = (1, True)
    uint16 = (2, False)
    int16 = (2, True)
    uint24 = (3, False)
    int24 = (3, True)

    @property
    def byte_size(self) -> int:
        return self.value[0]

    @property
    def signed(self) -> bool:
        return self.value[1]


@dataclass(frozen=True)
class FieldDefinition:
    field_id: int
    name: str
    value_type: ValueType
    factor: Optional[float] = None
    alias: Optional[str] = None     # name used for the 2nd occurrence


_FIELDS = (
    # Packet type 1 (wind / light)
    FieldDefinition(0x00, "pid", ValueType.uint8),
    FieldDefinition(0x05, "illuminance", ValueType.uint24, 0.01),        # lux
    FieldDefinition(0x20, "rain_status", ValueType.uint8),               # 0/1
    FieldDefinition(0x44, "wind_speed", ValueType.uint16, 0.01,          # m/s
                    alias="gust_speed"),
    FieldDefinition(0x46, "uv", ValueType.uint8, 0.1),                   # UV index
    FieldDefinition(0x5E, "wind_direction", ValueType.uint16, 0.01),     # degrees

    # Packet type 2 (climate / rain)
    FieldDefinition(0x01, "battery", ValueType.uint8),                   # %
    FieldDefinition(0x04, "pressure", ValueType.uint24, 0.01),           # hPa
    FieldDefinition(0x08, "dew_point", ValueType.int16, 0.01),           # °C
    FieldDefinition(0x0C, "capacitor_voltage", ValueType.uint16, 0.001), # V
    FieldDefinition(0x2E, "humidity", ValueType.uint8),                  # %
    FieldDefinition(0x45, "temperature", ValueType.int16, 0.1),          # °C
    FieldDefinition(0x5F, "precipitation", ValueType.uint16, 0.1),       # mm
)

BTHOME_FIELDS: Mapping[int, FieldDefinition] = MappingProxyType(
    {f.field_id: f for f in _FIELDS}
)


def lookup(field_id: int) -> Optional[FieldDefinition]:
    """Return the definition for *field_id*, or ``None`` when unknown."""
    return BTHOME_FIELDS.get(field_id)
