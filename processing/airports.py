"""
Static airport reference table for arrival estimation.
"""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

# Default path - packaged alongside this module
DEFAULT_AIRPORTS_FILE = Path(__file__).parent / "data" / "uk_airports.json"
AIRPORTS_FILE = os.getenv("AIRPORTS_FILE", str(DEFAULT_AIRPORTS_FILE))


@dataclass(frozen=True)
class AirportCoordinate:
    icao: str
    lat: float
    lon: float


def build_airport_table(entries) -> Mapping[str, AirportCoordinate]:
    """
    Build a read-only ICAO -> coordinate mapping.

    Later entries for the same code override earlier ones.
    """
    table = {}
    for entry in entries:
        icao = entry["icao"].upper()
        table[icao] = AirportCoordinate(icao=icao, lat=float(entry["lat"]), lon=float(entry["lon"]))
    return MappingProxyType(table)


def load_airport_table(path: str = AIRPORTS_FILE) -> Mapping[str, AirportCoordinate]:
    with open(path) as f:
        entries = json.load(f)
    table = build_airport_table(entries)
    logger.info(f"Loaded {len(table)} airports from {path}")
    return table


# Singleton instance
_airport_table: Optional[Mapping[str, AirportCoordinate]] = None

def get_airport_table() -> Mapping[str, AirportCoordinate]:
    global _airport_table
    if _airport_table is None:
        _airport_table = load_airport_table()
    return _airport_table
