# models.py
"""
Dataclasses shared by the decoder, the rain history and the controller.
They are deliberately tiny – only the fields the pipeline needs.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

Number = Union[int, float]


# ----------------------------------------------------------------------
# Dataclasses
# ----------------------------------------------------------------------
@dataclass
class HistoryEntry:
    """One downsampled rain sample – stored in the device blob."""
    ts: int                                 # unix seconds
    value: float                            # cumulative precipitation, mm

    def to_dict(self) -> Dict[str, Any]:
        return {"ts": self.ts, "value": self.value}

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "HistoryEntry":
        return cls(ts=int(d["ts"]), value=float(d["value"]))


@dataclass
class DecodedReading:
    """A decoded, de‑duplicated advertisement. Never persisted."""
    values: Dict[str, Number]
    rssi: Optional[int] = None
    ts: int = 0                             # unix seconds at reception


@dataclass
class SensorSession:
    """Per‑address radio bookkeeping kept by the scanner."""
    address: str
    last_pid: Optional[Number] = None
    packet_count: int = 0
    duplicate_count: int = 0
    last_packet_ts: Optional[float] = None
    first_seen_ts: float = 0.0

    def is_duplicate(self, pid: Optional[Number]) -> bool:
        return pid is not None and pid == self.last_pid
