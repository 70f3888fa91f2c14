"""
Validation library for the VATSIM snapshot contract.

Provides Pydantic models for the inbound data feed. The feed is untyped
external data, so only the fields the board relies on are declared and every
other field is ignored.
"""

from typing import Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator


# ============================================================================
# Participant Records
# ============================================================================

class ControllerRecord(BaseModel):
    """A connected air-traffic controller."""
    model_config = ConfigDict(frozen=True)

    callsign: str = Field(min_length=1, description="Facility/position tokens, e.g. EGLL_N_TWR")
    name: Optional[str] = None
    frequency: Optional[str] = None


class FlightPlan(BaseModel):
    """Filed departure and arrival aerodromes."""
    model_config = ConfigDict(frozen=True)

    departure: Optional[str] = None
    arrival: Optional[str] = None


class PilotRecord(BaseModel):
    """A connected pilot and their last reported kinematic state."""
    model_config = ConfigDict(frozen=True)

    callsign: Optional[str] = None
    latitude: float = Field(ge=-90, le=90, description="Latitude in degrees")
    longitude: float = Field(ge=-180, le=180, description="Longitude in degrees")
    groundspeed: Optional[float] = Field(None, description="Ground speed in knots")
    altitude: Optional[float] = Field(None, description="Altitude in feet")
    flight_plan: Optional[FlightPlan] = None


# ============================================================================
# Snapshot Document
# ============================================================================

class SnapshotDocument(BaseModel):
    """One validated snapshot of the network."""
    model_config = ConfigDict(frozen=True)

    update_timestamp: Optional[datetime] = None
    controllers: tuple[ControllerRecord, ...] = ()
    pilots: tuple[PilotRecord, ...] = ()
    rejected_controllers: int = 0
    rejected_pilots: int = 0


# ============================================================================
# Validation Functions
# ============================================================================

def _parse_timestamp(value) -> Optional[datetime]:
    """Parse ISO 8601 datetime string, tolerating a trailing Z."""
    if not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def validate_controller_record(data: dict) -> tuple[bool, Optional[ControllerRecord], Optional[str]]:
    """
    Validate ControllerRecord.

    Returns:
        (is_valid, record_or_none, error_message_or_none)
    """
    try:
        record = ControllerRecord(**data)
        return True, record, None
    except Exception as e:
        return False, None, str(e)


def validate_pilot_record(data: dict) -> tuple[bool, Optional[PilotRecord], Optional[str]]:
    """
    Validate PilotRecord.

    Returns:
        (is_valid, record_or_none, error_message_or_none)
    """
    try:
        record = PilotRecord(**data)
        return True, record, None
    except Exception as e:
        return False, None, str(e)


def validate_snapshot_document(data: dict) -> tuple[bool, Optional[SnapshotDocument], Optional[str]]:
    """
    Validate a raw snapshot document.

    The top-level ``controllers`` and ``pilots`` collections must be lists.
    Individual records that fail validation are dropped and counted in
    ``rejected_controllers`` / ``rejected_pilots`` rather than failing the
    whole document.

    Returns:
        (is_valid, document_or_none, error_message_or_none)
    """
    if not isinstance(data, dict):
        return False, None, f"Snapshot must be an object, got {type(data).__name__}"

    raw_controllers = data.get("controllers")
    raw_pilots = data.get("pilots")
    if not isinstance(raw_controllers, list):
        return False, None, "Snapshot is missing the 'controllers' list"
    if not isinstance(raw_pilots, list):
        return False, None, "Snapshot is missing the 'pilots' list"

    controllers = []
    rejected_controllers = 0
    for item in raw_controllers:
        is_valid, record, _ = validate_controller_record(item) if isinstance(item, dict) else (False, None, None)
        if is_valid:
            controllers.append(record)
        else:
            rejected_controllers += 1

    pilots = []
    rejected_pilots = 0
    for item in raw_pilots:
        is_valid, record, _ = validate_pilot_record(item) if isinstance(item, dict) else (False, None, None)
        if is_valid:
            pilots.append(record)
        else:
            rejected_pilots += 1

    general = data.get("general") or {}
    update_timestamp = _parse_timestamp(general.get("update_timestamp")) if isinstance(general, dict) else None

    document = SnapshotDocument(
        update_timestamp=update_timestamp,
        controllers=tuple(controllers),
        pilots=tuple(pilots),
        rejected_controllers=rejected_controllers,
        rejected_pilots=rejected_pilots,
    )
    return True, document, None
