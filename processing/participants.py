"""
Controller and pilot filtering for the region of interest.
"""

from enum import Enum
from typing import Iterable, List, Sequence

from contracts.constants import (
    BADGE_APPROACH,
    BADGE_CENTER,
    BADGE_GROUND,
    BADGE_TOWER,
    BADGE_UNKNOWN,
    CALLSIGN_DELIMITER,
    CONTROLLER_PREFIXES,
    EXCLUDED_CONTROLLER_PREFIX,
    EXCLUDED_CONTROLLER_TOKEN,
)
from contracts.validation import ControllerRecord, PilotRecord


class BadgeCategory(str, Enum):
    GROUND = BADGE_GROUND
    TOWER = BADGE_TOWER
    APPROACH = BADGE_APPROACH
    CENTER = BADGE_CENTER
    UNKNOWN = BADGE_UNKNOWN


# Checked in order; first match wins
_BADGE_RULES = (
    (("GND", "DEL"), BadgeCategory.GROUND),
    (("TWR",), BadgeCategory.TOWER),
    (("APP", "DEP"), BadgeCategory.APPROACH),
    (("CTR",), BadgeCategory.CENTER),
)


def filter_controllers(
    controllers: Iterable[ControllerRecord],
    allowed_prefixes: Sequence[str] = CONTROLLER_PREFIXES,
    excluded_prefix: str = EXCLUDED_CONTROLLER_PREFIX,
    excluded_token: str = EXCLUDED_CONTROLLER_TOKEN,
) -> List[ControllerRecord]:
    """
    Keep controllers inside the region.

    A callsign must start with one of ``allowed_prefixes``, must not start
    with ``excluded_prefix`` and must not contain ``excluded_token``.
    Input order is preserved.
    """
    prefixes = tuple(allowed_prefixes)
    return [
        controller for controller in controllers
        if controller.callsign.startswith(prefixes)
        and not controller.callsign.startswith(excluded_prefix)
        and excluded_token not in controller.callsign
    ]


def has_usable_flight_plan(pilot: PilotRecord) -> bool:
    plan = pilot.flight_plan
    return bool(plan and plan.departure and plan.arrival)


def filter_pilots(pilots: Iterable[PilotRecord]) -> List[PilotRecord]:
    """Keep pilots that filed both a departure and an arrival aerodrome."""
    return [pilot for pilot in pilots if has_usable_flight_plan(pilot)]


def badge_category(callsign: str) -> BadgeCategory:
    for tokens, category in _BADGE_RULES:
        if any(token in callsign for token in tokens):
            return category
    return BadgeCategory.UNKNOWN


def position_label(callsign: str) -> str:
    """Last position token of a callsign, e.g. ``TWR`` for ``EGLL_N_TWR``."""
    return callsign.split(CALLSIGN_DELIMITER)[-1]


def matches_controller_search(controller: ControllerRecord, term: str) -> bool:
    """Case-insensitive substring match against callsign or name."""
    term = term.lower()
    if term in controller.callsign.lower():
        return True
    return bool(controller.name) and term in controller.name.lower()
