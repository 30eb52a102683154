# ws90_device.py
"""
State and derived values for one WS90 station.

The WS90 splits its data over two advertisement types: wind and light in
one, temperature, humidity and rain in the other.  The device therefore
remembers the last temperature and wind speed it saw so the apparent
temperature can be computed from whichever packet arrives.
"""

from datetime import tzinfo
from typing import Any, Dict, Optional

from app_logger import logger
from models import DecodedReading
from rain_aggregator import rain_totals
from rain_history import RainHistory
from weather_math import feels_like, is_number


class WS90Device:
    """
    Public API used by the controller for one station address.

    Parameters
    ----------
    address : str
        BLE address, used only for logging.
    store : BlobStore
        Durable storage for this station (see :class:`history_db.DeviceStore`).
    tz : tzinfo, optional
        Time zone that defines "today"; defaults to the host's.
    """

    def __init__(self, address: str, store, tz: Optional[tzinfo] = None):
        self.address = address
        self.tz = tz
        self.rain_history = RainHistory(store)
        self.last_temperature: Optional[float] = None
        self.last_wind_speed: Optional[float] = None

    def update(self, reading: DecodedReading) -> Dict[str, Any]:
        """
        Fold *reading* into the device state and return the output mapping:
        decoded fields, ``rssi``, ``ts`` and whatever could be derived.
        """
        output: Dict[str, Any] = {}
        for key, value in reading.values.items():
            if is_number(value):
                output[key] = value
            else:
                logger.warning("[%s] invalid numeric value for %s: %r", self.address, key, value)
        output["rssi"] = reading.rssi
        output["ts"] = reading.ts

        if "rain_status" in output:
            output["rain_alarm"] = output["rain_status"] == 1

        apparent = self._update_feels_like(output)
        if apparent is not None:
            output["apparent_temperature"] = apparent

        if "precipitation" in output and is_number(reading.ts):
            precipitation = output["precipitation"]
            self.rain_history.ingest(reading.ts, precipitation)
            totals = rain_totals(self.rain_history, reading.ts, precipitation, self.tz)
            output.update(totals.as_payload())

        return output

    def _update_feels_like(self, values: Dict[str, Any]) -> Optional[float]:
        if "temperature" in values:
            self.last_temperature = values["temperature"]
        if "wind_speed" in values:
            self.last_wind_speed = values["wind_speed"]

        return feels_like(self.last_temperature, self.last_wind_speed)
