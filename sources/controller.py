# controller.py
"""
Glue between the scanner and the output sink.  Keeps one
:class:`ws90_device.WS90Device` per station address, runs every reading
through it and hands the result to ``publish(address, payload)``.
"""

import time
from datetime import tzinfo
from typing import Any, Callable, Dict, Optional

from app_logger import READING_PREFIX, logger
from history_db import DeviceStore, HistoryDB
from models import DecodedReading
from ws90_device import WS90Device

Publisher = Callable[[str, Dict[str, Any]], None]

WATCHDOG_TIMEOUT_S = 600    # warn when nothing arrived for 10 minutes


class WeatherController:
    def __init__(self, db: HistoryDB, publish: Publisher, tz: Optional[tzinfo] = None):
        self.db = db
        self.publish = publish
        self.tz = tz
        self.devices: Dict[str, WS90Device] = {}
        self.packet_count = 0
        self.last_packet_time: Optional[float] = None
        self.started_at = time.time()

    def get_device(self, address: str) -> WS90Device:
        """Return the device for *address*, restoring its history on first use."""
        device = self.devices.get(address)
        if device is None:
            device = WS90Device(address, DeviceStore(self.db, address), tz=self.tz)
            self.devices[address] = device
            logger.info("tracking station %s", address)
        return device

    def handle_reading(self, reading: DecodedReading, address: str) -> Dict[str, Any]:
        device = self.get_device(address)
        payload = device.update(reading)

        self.packet_count += 1
        self.last_packet_time = time.time()

        try:
            self.publish(address, payload)
        except Exception as exc:
            logger.error("[%s] publish failed: %s", address, exc)

        # log the record
        logger.info(
            READING_PREFIX + " %s – pid=%s, T=%s, wind=%s, rain=%s, rssi=%s",
            address,
            payload.get("pid"),
            payload.get("temperature"),
            payload.get("wind_speed"),
            payload.get("precipitation"),
            payload.get("rssi"),
        )
        return payload

    # ------------------------------------------------------------------
    # Health
    # ------------------------------------------------------------------
    def health(self, now: Optional[float] = None) -> Dict[str, Any]:
        now = time.time() if now is None else now
        last_seen = None
        if self.last_packet_time is not None:
            last_seen = round(now - self.last_packet_time)
        return {
            "packets": self.packet_count,
            "last_seen_sec": last_seen,
            "uptime_sec": round(now - self.started_at),
            "devices": sorted(self.devices),
        }

    def check_watchdog(self, now: Optional[float] = None,
                       timeout: float = WATCHDOG_TIMEOUT_S) -> bool:
        """Return ``False`` (and warn) when no packet arrived within *timeout*."""
        now = time.time() if now is None else now
        reference = self.last_packet_time or self.started_at
        if now - reference > timeout:
            logger.warning("no WS90 packet for %d s", int(now - reference))
            return False
        return True
