#!/usr/bin/env python3
"""bthome_scanner.py
BTHome v2 scanner using bleak.
Listens for BLE advertisements, extracts the BTHome service data of a WS90
weather station and hands every new reading to the controller.

Contains the :class:`BTHomeScanner` class that filters advertisements,
drops radio repeats (same packet id) and exposes a callback suitable for
``BleakScanner``.

Only the scanning / de‑duplication logic lives here.
Decoding is done by :mod:`bthome_decoder`; derived values are computed by
the ``WeatherController``.
"""
import time
from typing import Dict, Optional

import asyncio
from bleak import BLEDevice, AdvertisementData

from app_logger import logger
from bthome_decoder import decode
from controller import WeatherController
from hex_helper import HexHelper
from models import DecodedReading, SensorSession

# ----------------------------------------------------------------------
# Constants
# ----------------------------------------------------------------------
BTHOME_SERVICE_UUID = "0000fcd2-0000-1000-8000-00805f9b34fb"


class BTHomeScanner:
    """
    High‑level wrapper around Bleak that extracts BTHome advertisements.

    Parameters
    ----------
    controller : WeatherController
        Receives every decoded, non‑duplicate reading.

    address : str, optional
        MAC address of the station we are interested in (case does not
        matter).  ``None`` accepts every BTHome sender.
    """

    def __init__(self, controller: WeatherController, address: Optional[str] = None):
        self.controller = controller
        self.address = address.upper() if address else None
        # One session per sender, so two stations never share a packet id.
        self.sessions: Dict[str, SensorSession] = {}

    def session(self, device_address: str) -> SensorSession:
        session = self.sessions.get(device_address)
        if session is None:
            session = SensorSession(address=device_address, first_seen_ts=time.time())
            self.sessions[device_address] = session
        return session

    # ------------------------------------------------------------------
    # 1. Parse a single advertisement
    # ------------------------------------------------------------------
    def parse_advertisement(
        self, device_address: str, advertisement: AdvertisementData
    ) -> Optional[DecodedReading]:
        """
        Look for BTHome service data, decode it and forward it to the
        controller unless it repeats the previous packet id.

        Returns the reading that was forwarded, or ``None``.
        """
        data = advertisement.service_data.get(BTHOME_SERVICE_UUID)
        if data is None:
            return None

        result = decode(data)
        if not result.ok:
            logger.debug(
                "[%s] dropped payload (%s): %s",
                device_address, result.error.value, HexHelper.to_hex_string(data),
            )
            return None

        session = self.session(device_address)
        pid = result.values.get("pid")
        if session.is_duplicate(pid):
            session.duplicate_count += 1
            return None
        session.last_pid = pid

        now = time.time()
        session.packet_count += 1
        session.last_packet_ts = now

        reading = DecodedReading(
            values=result.values, rssi=advertisement.rssi, ts=int(now)
        )
        # ---------- Hand over to the controller ----------
        self.controller.handle_reading(reading, device_address)
        return reading

    # ------------------------------------------------------------------
    # 2. Callback required by BleakScanner
    # ------------------------------------------------------------------
    def detection_callback(self, device: BLEDevice, advertisement_data: AdvertisementData) -> None:
        """
        This method is passed directly to ``BleakScanner``.  It filters
        devices by address and forwards matching advertisements to
        :meth:`parse_advertisement`.
        """
        try:
            if self.address is None or device.address.upper() == self.address:
                self.parse_advertisement(device.address.upper(), advertisement_data)
        except asyncio.CancelledError:
            # Propagate cancellation so the outer event loop can shut down cleanly.
            raise
