"""
UK ATC Board Contracts Package

Provides shared constants and validation for the snapshot feed contract.
"""

from contracts.constants import *
from contracts.validation import (
    ControllerRecord,
    FlightPlan,
    PilotRecord,
    SnapshotDocument,
    validate_controller_record,
    validate_pilot_record,
    validate_snapshot_document,
)

__all__ = [
    # Constants
    "VATSIM_DATA_URL",
    "MODE_LIVE",
    "MODE_REPLAY",
    "REGION_ICAO_PREFIX",
    "CONTROLLER_PREFIXES",
    "EXCLUDED_CONTROLLER_PREFIX",
    "EXCLUDED_CONTROLLER_TOKEN",
    "VIEW_CONTROLLERS",
    "VIEW_AIRPORTS",
    "VIEW_AUTO",
    "WS_MESSAGE_TYPE_VIEW",
    "WS_MESSAGE_TYPE_ERROR",
    # Models
    "ControllerRecord",
    "FlightPlan",
    "PilotRecord",
    "SnapshotDocument",
    # Validators
    "validate_controller_record",
    "validate_pilot_record",
    "validate_snapshot_document",
]
