#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
File: history_db.py
Description:
    Low‑level DAO (Data‑Access‑Object)
    A lightweight wrapper around an embedded SQLite database holding the
    persisted state of every weather station we listen to.  State is kept
    as named JSON blobs, one row per (device address, key), and every write
    replaces the whole blob.

    Key features:
        • Automatic schema creation (device_store table)
        • Parameterised SQL statements (SQL‑injection safe)
        • Upsert on write, so callers never care whether a row exists
        • `DeviceStore` view bound to a single device address
"""
import json
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, List, Optional


# ----------------------------------------------------------------------
# Core wrapper
# ----------------------------------------------------------------------
class HistoryDB:
    """Key/value store for per‑device blobs."""

    def __init__(self, db_path: str | Path = "ws90.db"):
        self.conn = sqlite3.connect(str(db_path))
        self.conn.row_factory = sqlite3.Row
        self._ensure_schema()

    # --------------------------------------------------------------
    # Schema creation
    # --------------------------------------------------------------
    def _ensure_schema(self) -> None:
        cur = self.conn.cursor()
        cur.executescript(
            """
            CREATE TABLE IF NOT EXISTS device_store (
                device_address TEXT      NOT NULL,
                key            TEXT      NOT NULL,
                value          TEXT      NOT NULL,
                updated_at     TEXT      NOT NULL,
                PRIMARY KEY (device_address, key)
            );
            """
        )
        self.conn.commit()

    # ==============================================================
    #                     STORE CRUD
    # ==============================================================

    def get_store_value(self, device_address: str, key: str) -> Optional[Any]:
        """
        Return the decoded JSON value stored under ``key``, or ``None``.

        Raises
        ------
        json.JSONDecodeError
            If the stored text is not valid JSON.
        """
        cur = self.conn.execute(
            "SELECT value FROM device_store WHERE device_address = ? AND key = ?;",
            (device_address, key),
        )
        row = cur.fetchone()
        return json.loads(row["value"]) if row else None

    def set_store_value(self, device_address: str, key: str, value: Any) -> None:
        sql = """
            INSERT INTO device_store (device_address, key, value, updated_at)
            VALUES (?, ?, ?, ?)
            ON CONFLICT (device_address, key)
            DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at;
        """
        self.conn.execute(
            sql, (device_address, key, json.dumps(value), datetime.now(timezone.utc).isoformat())
        )
        self.conn.commit()

    def unset_store_value(self, device_address: str, key: str) -> int:
        """Delete one blob. Returns the number of rows removed (0 or 1)."""
        cur = self.conn.execute(
            "DELETE FROM device_store WHERE device_address = ? AND key = ?;",
            (device_address, key),
        )
        self.conn.commit()
        return cur.rowcount

    def list_keys(self, device_address: str) -> List[str]:
        cur = self.conn.execute(
            "SELECT key FROM device_store WHERE device_address = ? ORDER BY key;",
            (device_address,),
        )
        return [r["key"] for r in cur]

    def list_devices(self) -> List[str]:
        cur = self.conn.execute(
            "SELECT DISTINCT device_address FROM device_store ORDER BY device_address;"
        )
        return [r["device_address"] for r in cur]

    # ------------------------------------------------------------------
    # Clean shutdown
    # ------------------------------------------------------------------
    def close(self) -> None:
        self.conn.close()


class DeviceStore:
    """
    The slice of :class:`HistoryDB` that belongs to one device.
    Exposes the ``get``/``set`` pair :class:`rain_history.RainHistory` needs.
    """

    def __init__(self, db: HistoryDB, device_address: str):
        self.db = db
        self.device_address = device_address

    def get(self, key: str) -> Optional[Any]:
        return self.db.get_store_value(self.device_address, key)

    def set(self, key: str, value: Any) -> None:
        self.db.set_store_value(self.device_address, key, value)

    def unset(self, key: str) -> int:
        return self.db.unset_store_value(self.device_address, key)
