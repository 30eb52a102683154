#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""main.py
Minimal executable that launches the asynchronous BLE scanner to capture
BTHome advertisements from a WS90 weather station, or decodes a single
payload given as hex.  Every reading (with rolling rain totals and the
apparent temperature) is printed as one JSON line.
It also uses the HistoryDB wrapper defined in history_db.py.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import asyncio
from bleak import BleakScanner

from app_logger import log_stats, logger
from bthome_decoder import decode
from bthome_scanner import BTHomeScanner
from controller import WATCHDOG_TIMEOUT_S, WeatherController
from hex_helper import HexHelper
from history_db import HistoryDB

# ----------------------------------------------------------------------
# Configuration – change only if your deployment differs
# ----------------------------------------------------------------------
WS90_ADDRESS = None               # e.g. "08:B9:5F:D3:62:38", None = any sender
DB_FILE = Path("ws90.db")         # SQLite file location
HEALTH_INTERVAL_S = 300           # 5 min


def print_payload(address: str, payload: Dict[str, Any]) -> None:
    print(json.dumps({"address": address, **payload}), flush=True)


def build_components(db_path: Path, address: Optional[str]) -> BTHomeScanner:
    """
    Build the whole stack and return a ready‑to‑use scanner instance.
    """
    # 1️⃣  Persistence layer
    db = HistoryDB(db_path=db_path)

    # 2️⃣  Controller – devices + output sink
    controller = WeatherController(db, print_payload)

    # 3️⃣  Scanner wired with the controller
    return BTHomeScanner(controller, address=address)


async def scan(db_path: Path, address: Optional[str], health_interval: float) -> None:
    """
    Async part of the program – runs the Bleak scanner.
    """
    scanner = build_components(db_path, address)
    controller = scanner.controller

    # ``BleakScanner`` expects a callable with the signature
    # (device: BLEDevice, advertisement_data: AdvertisementData)
    async with BleakScanner(scanner.detection_callback):
        logger.info("WS90 BTHome scanner started (address=%s)", address or "any")
        try:
            while True:
                await asyncio.sleep(health_interval)
                controller.check_watchdog(timeout=WATCHDOG_TIMEOUT_S)
                logger.info("health %s %s", controller.health(), log_stats.summary())
        finally:
            controller.db.close()

    logger.info("Scanning stopped.")


def decode_hex(hex_payload: str) -> int:
    try:
        data = HexHelper.from_hex_string(hex_payload)
    except ValueError as exc:
        print(f"invalid hex payload: {exc}", file=sys.stderr)
        return 2

    result = decode(data)
    if not result.ok:
        print(f"decode failed: {result.error.value}", file=sys.stderr)
        return 1
    print(json.dumps({"values": result.values, "truncated": result.truncated}))
    return 0


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="WS90 BTHome listener with rolling rain totals."
    )
    sub = parser.add_subparsers(dest="command", required=True)

    scan_p = sub.add_parser("scan", help="Listen for WS90 advertisements")
    scan_p.add_argument(
        "-a",
        "--address",
        default=WS90_ADDRESS,
        help="MAC address of the station (default: accept any BTHome sender)",
    )
    scan_p.add_argument(
        "-d",
        "--db",
        type=Path,
        default=DB_FILE,
        help="Path to the SQLite database (e.g. ./ws90.db)",
    )
    scan_p.add_argument(
        "-i",
        "--health-interval",
        type=float,
        default=HEALTH_INTERVAL_S,
        help="Seconds between health log lines",
    )

    decode_p = sub.add_parser("decode", help="Decode one hex payload and exit")
    decode_p.add_argument("payload", help="Service data as hex, e.g. '40 00 01 45 d5 00'")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    if args.command == "decode":
        return decode_hex(args.payload)
    try:
        asyncio.run(scan(args.db, args.address, args.health_interval))
    except KeyboardInterrupt:
        # Graceful shutdown path if the user hits Ctrl‑C
        print("\nProgram terminated by user.")
    return 0


# ----------------------------------------------------------------------
# Main entry point
# ----------------------------------------------------------------------
if __name__ == "__main__":
    sys.exit(main())
