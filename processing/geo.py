"""
Great-circle geometry and time-to-arrival estimation.
"""

import math
from typing import Optional

from contracts.constants import EARTH_RADIUS_KM, KNOT_TO_KM_PER_MIN

# Returned when no estimate can be made (no forward speed)
UNREACHABLE = math.inf


def distance_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Haversine distance in km between two points given in degrees."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    # a can round slightly above 1 near antipodes
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(max(0.0, 1 - a)))
    return EARTH_RADIUS_KM * c


def minutes_to_arrival(distance: float, groundspeed_knots: Optional[float]) -> float:
    """
    Estimate minutes to cover ``distance`` km at the given ground speed.

    Returns UNREACHABLE when ground speed is missing, zero or negative.
    """
    if groundspeed_knots is None or groundspeed_knots <= 0:
        return UNREACHABLE
    speed_km_per_min = groundspeed_knots * KNOT_TO_KM_PER_MIN
    return distance / speed_km_per_min
