# app_logger.py
"""
A small wrapper around the standard library `logging` module.
All parts of the program import `logger` from here, so we have a single
source of truth for log configuration.
"""

import logging
from collections import deque
from datetime import datetime
from typing import Any, Deque, Dict, Optional

# ----------------------------------------------------------------------
# 1️⃣ Configure the root logger once
# ----------------------------------------------------------------------
LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)

logger = logging.getLogger("WS90Logger")   # use a dedicated namespace
logger.setLevel(logging.DEBUG)
logger.propagate = False               # prevent propagation to the root logger

# ----------------------------------------------------------------------
# 2️⃣ In‑memory handler – stores the last N log records
# ----------------------------------------------------------------------
MAX_LOG_RECORDS = 150   # same depth as the station's debug log

# Messages logged with this prefix count as received readings.
READING_PREFIX = "reading from"


class MemoryHandler(logging.Handler):
    """
    Simple handler that keeps the newest N formatted log strings in a
    deque.  Newest record is at the right end.
    """
    def __init__(self, capacity: int = MAX_LOG_RECORDS):
        super().__init__()
        self.capacity = capacity
        self.buffer: Deque[str] = deque(maxlen=capacity)

    def emit(self, record: logging.LogRecord) -> None:
        msg = self.format(record)
        self.buffer.append(msg)


class LogStats(logging.Handler):
    """
    Counts errors and received readings as they go through the logger.
    """
    def __init__(self):
        super().__init__(level=logging.DEBUG)
        self.errors = 0
        self.readings_received = 0
        self.last_reading_time: Optional[datetime] = None

    def emit(self, record: logging.LogRecord) -> None:
        if record.levelno >= logging.ERROR:
            self.errors += 1
        if isinstance(record.msg, str) and record.msg.startswith(READING_PREFIX):
            self.readings_received += 1
            self.last_reading_time = datetime.fromtimestamp(record.created)

    def summary(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        now = now or datetime.now()
        last_seen = None
        if self.last_reading_time is not None:
            last_seen = int((now - self.last_reading_time).total_seconds())
        return {
            "errors": self.errors,
            "readings_received": self.readings_received,
            "last_reading_time": (
                self.last_reading_time.isoformat() if self.last_reading_time else None
            ),
            "last_seen_sec": last_seen,
            "entry_count": len(log_buffer),
        }


formatter = logging.Formatter(LOG_FORMAT)

# Create the handler, attach it to our logger, and expose it for readers.
memory_handler = MemoryHandler()
memory_handler.setFormatter(formatter)
memory_handler.setLevel(logging.INFO)     # DEBUG stays in the file only
logger.addHandler(memory_handler)

log_stats = LogStats()
logger.addHandler(log_stats)

# Write to file instead of stdout
file_handler = logging.FileHandler("ws90.log", encoding="utf-8")
file_handler.setLevel(logging.DEBUG)      # capture everything
file_handler.setFormatter(formatter)
logger.addHandler(file_handler)

# Export the buffer so readers don't need to import the whole logger.
log_buffer = memory_handler.buffer


def clear_log_buffer() -> None:
    """Drop every buffered line, then note that we did."""
    log_buffer.clear()
    logger.info("Log cleared")


def log_debug(msg: str, *args, **kwargs) -> None:
    """Shortcut for `logger.debug(msg, *args, **kwargs)`."""
    logger.debug(msg, *args, **kwargs)
