# rain_history.py
"""
Rolling, persisted history of the WS90 cumulative rain counter.

The station reports precipitation as a running total.  We keep one sample
per minute for the last 25 hours, which is enough to answer "how much
since an hour ago / a day ago / midnight" while keeping the stored blob
around 1500 entries.  A drop in the counter means the station restarted
(or the uint16 rolled over) and throws the whole history away.
"""

import math
import sqlite3
from typing import Any, Iterator, List, Optional, Protocol

from app_logger import logger
from models import HistoryEntry
from weather_math import is_number

DOWNSAMPLE_INTERVAL_S = 60          # at most one stored sample per minute
RETENTION_S = 25 * 3600             # keep 25 hours
STORE_KEY = "rainHistory"


class BlobStore(Protocol):
    def get(self, key: str) -> Optional[Any]: ...
    def set(self, key: str, value: Any) -> None: ...


class RainHistory:
    """
    Owns the ordered rain samples of one station.

    Parameters
    ----------
    store : BlobStore
        Durable storage; the history is read once here and rewritten
        wholesale after every structural change.
    key : str, optional
        Name of the blob inside *store*.
    """

    def __init__(self, store: BlobStore, key: str = STORE_KEY):
        self.store = store
        self.key = key
        self.entries: List[HistoryEntry] = []
        self.last_stored_ts: int = 0
        self.last_precipitation: Optional[float] = None
        self.load()

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[HistoryEntry]:
        return iter(self.entries)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------
    def load(self) -> None:
        """Restore entries from the store and derive the counters from the newest one."""
        try:
            raw = self.store.get(self.key) or []
            entries = sorted(
                (HistoryEntry.from_dict(d) for d in raw), key=lambda e: e.ts
            )
        except (sqlite3.Error, ValueError, KeyError, TypeError) as exc:
            logger.error("could not restore %s, starting empty: %s", self.key, exc)
            entries = []

        self.entries = entries
        if entries:
            self.last_stored_ts = entries[-1].ts
            self.last_precipitation = entries[-1].value
        else:
            self.last_stored_ts = 0
            self.last_precipitation = None
        logger.info("restored %d rain samples from %s", len(entries), self.key)

    def persist(self) -> None:
        """Write the full history. A failed write keeps the in‑memory state."""
        try:
            self.store.set(self.key, [e.to_dict() for e in self.entries])
        except sqlite3.Error as exc:
            logger.error("failed to persist %s: %s", self.key, exc)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------
    def clear(self) -> None:
        self.entries = []
        self.last_stored_ts = 0

    def prune_before(self, cutoff: float) -> int:
        """Drop entries older than *cutoff*; returns how many were removed."""
        keep = 0
        while keep < len(self.entries) and self.entries[keep].ts < cutoff:
            keep += 1
        if keep:
            del self.entries[:keep]
        return keep

    def ingest(self, ts: int, value: float) -> bool:
        """
        Feed one counter reading taken at *ts* (unix seconds).

        Returns ``True`` when the stored history changed (append, reset or
        prune), in which case it was also persisted.
        """
        if not is_number(ts) or not is_number(value):
            logger.warning("ignoring rain sample ts=%r value=%r", ts, value)
            return False

        changed = False
        if self.last_precipitation is not None and value < self.last_precipitation:
            logger.warning(
                "rain counter reset detected (%s -> %s), clearing history",
                self.last_precipitation, value,
            )
            self.clear()
            changed = True
        self.last_precipitation = value

        if not self.entries or ts - self.last_stored_ts >= DOWNSAMPLE_INTERVAL_S:
            self.entries.append(HistoryEntry(ts=int(ts), value=float(value)))
            self.last_stored_ts = int(ts)
            changed = True

        if self.prune_before(ts - RETENTION_S):
            changed = True
        if changed:
            self.persist()
        return changed

    # ------------------------------------------------------------------
    # Queries (linear scans, history is capped at ~1500 entries)
    # ------------------------------------------------------------------
    def closest_value(self, target_ts: float) -> Optional[float]:
        """Value of the sample nearest to *target_ts*; earliest wins a tie."""
        best: Optional[HistoryEntry] = None
        best_diff = math.inf
        for entry in self.entries:
            diff = abs(entry.ts - target_ts)
            if diff < best_diff:
                best, best_diff = entry, diff
        return best.value if best else None

    def first_value_at_or_after(self, target_ts: float) -> Optional[float]:
        """Value of the oldest sample taken at or after *target_ts*."""
        for entry in self.entries:
            if entry.ts >= target_ts:
                return entry.value
        return None
