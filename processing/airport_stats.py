"""
Per-airport arrival and departure counts.

Departures are aircraft sitting on the ground at a regional aerodrome they
filed out of. Arrivals are airborne aircraft inbound to a regional aerodrome
with an estimated time to arrival inside the arrival window. Both are
recomputed from scratch on every pass.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional

from contracts.constants import (
    ARRIVAL_WINDOW_MINUTES,
    BUSY_DEPARTURES_THRESHOLD,
    GROUND_ALTITUDE_THRESHOLD_FT,
    GROUND_SPEED_THRESHOLD_KTS,
    MISSING_KINEMATIC_SENTINEL,
    REGION_ICAO_PREFIX,
)
from contracts.validation import PilotRecord
from processing.airports import AirportCoordinate
from processing.geo import distance_km, minutes_to_arrival
from processing.metrics import AGGREGATION_LATENCY, AGGREGATION_PASSES, AIRPORTS_WITH_TRAFFIC
from processing.participants import has_usable_flight_plan

logger = logging.getLogger(__name__)


@dataclass
class AirportStats:
    icao: str
    arrivals: int = 0
    departures: int = 0

    @property
    def total(self) -> int:
        return self.arrivals + self.departures

    @property
    def busy(self) -> bool:
        return self.departures > BUSY_DEPARTURES_THRESHOLD


def _with_sentinel(value: Optional[float]) -> float:
    return MISSING_KINEMATIC_SENTINEL if value is None else value


# The two predicates below are deliberately not complements: altitude exactly
# at the threshold is neither on the ground nor airborne.

def is_on_ground(groundspeed: Optional[float], altitude: Optional[float]) -> bool:
    """Slow or low. Missing values count as fast and high."""
    return (
        _with_sentinel(groundspeed) < GROUND_SPEED_THRESHOLD_KTS
        or _with_sentinel(altitude) < GROUND_ALTITUDE_THRESHOLD_FT
    )


def is_airborne(groundspeed: Optional[float], altitude: Optional[float]) -> bool:
    """Fast and high. Missing values count as fast and high."""
    return (
        _with_sentinel(groundspeed) >= GROUND_SPEED_THRESHOLD_KTS
        and _with_sentinel(altitude) > GROUND_ALTITUDE_THRESHOLD_FT
    )


def calculate_airport_stats(
    pilots: Iterable[PilotRecord],
    airport_table: Mapping[str, AirportCoordinate],
    region_prefix: str = REGION_ICAO_PREFIX,
    arrival_window_minutes: float = ARRIVAL_WINDOW_MINUTES,
) -> Dict[str, AirportStats]:
    """
    Count departures and arrivals per regional airport.

    Only airports that received at least one increment are returned, in the
    order they were first incremented.
    """
    with AGGREGATION_LATENCY.time():
        stats: Dict[str, AirportStats] = {}

        for pilot in pilots:
            if not has_usable_flight_plan(pilot):
                continue

            departure = pilot.flight_plan.departure.upper()
            arrival = pilot.flight_plan.arrival.upper()
            # Sentinel applies to the ETA as well: a missing speed is treated as fast
            groundspeed = _with_sentinel(pilot.groundspeed)

            if departure.startswith(region_prefix) and is_on_ground(pilot.groundspeed, pilot.altitude):
                stats.setdefault(departure, AirportStats(icao=departure)).departures += 1

            if not arrival.startswith(region_prefix):
                continue

            airport = airport_table.get(arrival)
            if airport is None:
                continue

            if not is_airborne(pilot.groundspeed, pilot.altitude):
                continue

            distance = distance_km(pilot.latitude, pilot.longitude, airport.lat, airport.lon)
            if minutes_to_arrival(distance, groundspeed) <= arrival_window_minutes:
                stats.setdefault(arrival, AirportStats(icao=arrival)).arrivals += 1

    AGGREGATION_PASSES.inc()
    AIRPORTS_WITH_TRAFFIC.set(len(stats))
    logger.debug(f"Computed stats for {len(stats)} airports")
    return stats


def sort_airport_stats(stats: Mapping[str, AirportStats]) -> List[AirportStats]:
    """Busiest first by arrivals + departures; ties keep encounter order."""
    return sorted(stats.values(), key=lambda s: s.total, reverse=True)


def filter_airport_stats(stats: Mapping[str, AirportStats], term: str) -> Dict[str, AirportStats]:
    """Case-insensitive ICAO substring filter."""
    term = term.lower()
    return {icao: s for icao, s in stats.items() if term in icao.lower()}
