import sqlite3
from typing import Any, Dict, Optional

from models import HistoryEntry
from rain_history import RETENTION_S, STORE_KEY, RainHistory


class MemoryStore:
    """Stand‑in for a DeviceStore that keeps blobs in a dict."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self.data: Dict[str, Any] = dict(initial or {})
        self.writes = 0

    def get(self, key: str) -> Optional[Any]:
        return self.data.get(key)

    def set(self, key: str, value: Any) -> None:
        self.writes += 1
        self.data[key] = list(value)


class FailingStore(MemoryStore):
    def set(self, key: str, value: Any) -> None:
        raise sqlite3.OperationalError("database is locked")


def test_samples_closer_than_a_minute_are_not_stored() -> None:
    history = RainHistory(MemoryStore())
    assert history.ingest(1000, 10.0)
    assert not history.ingest(1025, 10.2)
    assert not history.ingest(1050, 10.5)

    assert history.entries == [HistoryEntry(1000, 10.0)]
    assert history.last_precipitation == 10.5

    assert history.ingest(1060, 10.6)
    assert [e.ts for e in history] == [1000, 1060]
    assert history.last_stored_ts == 1060


def test_counter_drop_clears_history() -> None:
    store = MemoryStore()
    history = RainHistory(store)
    for i, value in enumerate([20.0, 35.5, 50.0]):
        history.ingest(1000 + i * 120, value)
    assert len(history) == 3

    assert history.ingest(1400, 3.0)
    assert history.entries == [HistoryEntry(1400, 3.0)]
    assert history.last_precipitation == 3.0
    assert store.data[STORE_KEY] == [{"ts": 1400, "value": 3.0}]


def test_reset_within_downsample_window_still_stores_new_baseline() -> None:
    history = RainHistory(MemoryStore())
    history.ingest(1000, 50.0)
    history.ingest(1010, 2.0)
    assert history.entries == [HistoryEntry(1010, 2.0)]


def test_nothing_older_than_retention_survives() -> None:
    history = RainHistory(MemoryStore())
    for hour in range(0, 31):
        ts = hour * 3600
        history.ingest(ts, float(hour))
        assert all(e.ts >= ts - RETENTION_S for e in history)
    assert len(history) == 26
    assert history.entries[0].ts == 5 * 3600


def test_entry_exactly_at_cutoff_is_kept() -> None:
    history = RainHistory(MemoryStore())
    history.ingest(0, 1.0)
    history.ingest(RETENTION_S, 2.0)
    assert [e.ts for e in history] == [0, RETENTION_S]
    history.ingest(RETENTION_S + 60, 2.0)
    assert [e.ts for e in history] == [RETENTION_S, RETENTION_S + 60]


def test_sample_that_is_not_stored_still_prunes() -> None:
    store = MemoryStore()
    history = RainHistory(store)
    history.ingest(0, 1.0)
    history.ingest(RETENTION_S, 2.0)
    writes = store.writes

    # too close to the last stored sample to be appended
    assert history.ingest(RETENTION_S + 30, 2.0)
    assert [e.ts for e in history] == [RETENTION_S]
    assert store.writes == writes + 1
    assert store.data[STORE_KEY] == [{"ts": RETENTION_S, "value": 2.0}]


def test_sample_without_structural_change_is_not_written() -> None:
    store = MemoryStore()
    history = RainHistory(store)
    history.ingest(1000, 1.0)
    assert not history.ingest(1030, 1.1)
    assert store.writes == 1
    assert history.last_precipitation == 1.1


def test_history_is_persisted_and_restored() -> None:
    store = MemoryStore()
    history = RainHistory(store)
    history.ingest(1000, 1.0)
    history.ingest(1030, 1.1)      # not stored, no write
    history.ingest(1100, 1.2)
    assert store.writes == 2

    restored = RainHistory(store)
    assert restored.entries == history.entries
    assert restored.last_stored_ts == 1100
    assert restored.last_precipitation == 1.2

    # the restored counter still detects a reset
    restored.ingest(1200, 0.4)
    assert restored.entries == [HistoryEntry(1200, 0.4)]


def test_restore_sorts_entries() -> None:
    store = MemoryStore({STORE_KEY: [{"ts": 200, "value": 2.0}, {"ts": 100, "value": 1.0}]})
    history = RainHistory(store)
    assert [e.ts for e in history] == [100, 200]
    assert history.last_precipitation == 2.0


def test_corrupt_blob_starts_empty() -> None:
    history = RainHistory(MemoryStore({STORE_KEY: [{"ts": "soon"}]}))
    assert len(history) == 0
    assert history.last_precipitation is None
    assert history.last_stored_ts == 0


def test_failed_write_keeps_memory_state() -> None:
    history = RainHistory(FailingStore())
    assert history.ingest(1000, 4.2)
    assert history.entries == [HistoryEntry(1000, 4.2)]


def test_non_numeric_sample_is_ignored() -> None:
    history = RainHistory(MemoryStore())
    assert not history.ingest(1000, float("nan"))
    assert not history.ingest(None, 1.0)
    assert len(history) == 0
    assert history.last_precipitation is None


def test_closest_value() -> None:
    history = RainHistory(MemoryStore())
    assert history.closest_value(100) is None

    history.ingest(100, 1.0)
    history.ingest(200, 2.0)
    history.ingest(400, 4.0)
    assert history.closest_value(0) == 1.0
    assert history.closest_value(190) == 2.0
    assert history.closest_value(150) == 1.0     # tie → earliest
    assert history.closest_value(10_000) == 4.0


def test_first_value_at_or_after() -> None:
    history = RainHistory(MemoryStore())
    assert history.first_value_at_or_after(0) is None

    history.ingest(100, 1.0)
    history.ingest(200, 2.0)
    assert history.first_value_at_or_after(50) == 1.0
    assert history.first_value_at_or_after(100) == 1.0
    assert history.first_value_at_or_after(101) == 2.0
    assert history.first_value_at_or_after(201) is None


def test_prune_before() -> None:
    history = RainHistory(MemoryStore())
    for ts in (100, 200, 300):
        history.ingest(ts, 1.0)
    assert history.prune_before(250) == 2
    assert [e.ts for e in history] == [300]
    assert history.prune_before(0) == 0
