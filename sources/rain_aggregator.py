# rain_aggregator.py
"""
Rolling rain totals derived from a :class:`rain_history.RainHistory`.

Every total is "current counter minus a baseline sample", clamped at zero
(a baseline from before a counter reset is already gone from the history)
and rounded to one decimal.
"""

from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import Dict, Optional

from rain_history import RainHistory
from weather_math import round_tenth

HOUR_S = 3600
DAY_S = 24 * HOUR_S


@dataclass(frozen=True)
class RainTotals:
    hour: float = 0.0       # rolling last 60 minutes
    day: float = 0.0        # rolling last 24 hours
    today: float = 0.0      # since local midnight

    def as_payload(self) -> Dict[str, float]:
        return {"rain_hour": self.hour, "rain_24h": self.day, "rain_today": self.today}


def local_midnight(ts: float, tz: Optional[tzinfo] = None) -> float:
    """
    Unix timestamp of 00:00 on the calendar day containing *ts*.

    ``tz=None`` uses the host's local time zone.
    """
    moment = datetime.fromtimestamp(ts, tz)
    return moment.replace(hour=0, minute=0, second=0, microsecond=0).timestamp()


def _delta(value: float, baseline: Optional[float]) -> float:
    if baseline is None:
        return 0.0
    return round_tenth(max(0.0, value - baseline))


def rain_totals(
    history: RainHistory, ts: float, value: float, tz: Optional[tzinfo] = None
) -> RainTotals:
    """
    Compute the three totals for the counter *value* read at *ts*.

    Call after ``history.ingest(ts, value)`` so the history reflects any reset.
    """
    return RainTotals(
        hour=_delta(value, history.closest_value(ts - HOUR_S)),
        day=_delta(value, history.closest_value(ts - DAY_S)),
        today=_delta(value, history.first_value_at_or_after(local_midnight(ts, tz))),
    )
