# bthome_decoder.py
"""
BTHome v2 payload decoder.

Turns the service data of a BTHome advertisement into a ``{name: value}``
mapping using the object table in :mod:`bthome_fields`.  Malformed input
never raises: a bad header is reported through :class:`DecodeError`, and a
payload that ends early or carries an unknown object id yields whatever
was decoded up to that point.
"""

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Mapping, Optional, Union

from app_logger import log_debug
from bthome_fields import BTHOME_FIELDS, FieldDefinition
from hex_helper import HexHelper

# ----------------------------------------------------------------------
# Header byte ("device information byte") layout
# ----------------------------------------------------------------------
SUPPORTED_VERSION = 2
VERSION_SHIFT = 5          # bits 5‑7
ENCRYPTION_FLAG = 0x01     # bit 0


class DecodeError(Enum):
    EMPTY = "empty payload"
    UNSUPPORTED_VERSION = "unsupported BTHome version"
    ENCRYPTED = "encrypted payload"


@dataclass
class DecodeResult:
    """
    Outcome of :func:`decode`.

    ``error`` is set only for hard failures, in which case ``values`` is
    empty.  ``truncated`` flags a field that ran past the end of the
    payload; the fields before it are still in ``values``.
    """
    values: Dict[str, Union[int, float]] = field(default_factory=dict)
    error: Optional[DecodeError] = None
    truncated: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None


def occurrence_name(definition: FieldDefinition, occurrence: int) -> str:
    """
    Name under which the *occurrence*‑th copy of a field is stored.

    WS90 sends object 0x44 twice per packet: average wind first, gust
    second.  Anything beyond the alias gets an index suffix so no value is
    overwritten.
    """
    if occurrence == 1:
        return definition.name
    if occurrence == 2 and definition.alias:
        return definition.alias
    return f"{definition.name}_{occurrence}"


def decode(
    data: bytes, fields: Mapping[int, FieldDefinition] = BTHOME_FIELDS
) -> DecodeResult:
    """
    Decode a raw BTHome v2 payload (header byte followed by objects).

    Parameters
    ----------
    data : bytes
        Service data for UUID 0xFCD2, header byte included.
    fields : Mapping[int, FieldDefinition], optional
        Object table, defaults to the WS90 table.
    """
    if not data:
        return DecodeResult(error=DecodeError.EMPTY)

    dib = data[0]
    if dib >> VERSION_SHIFT != SUPPORTED_VERSION:
        return DecodeResult(error=DecodeError.UNSUPPORTED_VERSION)
    if dib & ENCRYPTION_FLAG:
        return DecodeResult(error=DecodeError.ENCRYPTED)

    result = DecodeResult()
    seen: Counter = Counter()
    pos = 1

    while len(data) - pos > 1:
        field_id = data[pos]
        definition = fields.get(field_id)
        if definition is None:
            log_debug("unknown object id 0x%02x at offset %d, stopping", field_id, pos)
            break
        pos += 1

        size = definition.value_type.byte_size
        raw = data[pos:pos + size]
        if len(raw) < size:
            log_debug(
                "object 0x%02x needs %d bytes, only %d left: %s",
                field_id, size, len(raw), HexHelper.to_hex_string(data),
            )
            result.truncated = True
            break

        value: Union[int, float] = int.from_bytes(
            raw, "little", signed=definition.value_type.signed
        )
        if definition.factor is not None:
            value *= definition.factor

        seen[field_id] += 1
        result.values[occurrence_name(definition, seen[field_id])] = value
        pos += size

    return result
