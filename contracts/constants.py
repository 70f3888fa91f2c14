"""
Shared constants for the UK ATC Board services.

This module provides a single source of truth for:
- Feed endpoint and snapshot modes
- Regional filtering rules
- Classification thresholds
- Timer periods
- WebSocket message types

All services should import from this module to ensure consistency.
"""

# Snapshot feed
VATSIM_DATA_URL = "https://data.vatsim.net/v3/vatsim-data.json"

# Snapshot modes
MODE_LIVE = "live"
MODE_REPLAY = "replay"

# Region of interest
REGION_ICAO_PREFIX = "EG"
REGION_NAME = "VATSIM UK"
CONTROLLER_PREFIXES = ("EG", "LON", "MAN", "LTC", "STC", "THAMES", "ESSEX", "SCO")
EXCLUDED_CONTROLLER_PREFIX = "EGTT"
EXCLUDED_CONTROLLER_TOKEN = "OBS"
CALLSIGN_DELIMITER = "_"

# Kinematic thresholds
GROUND_SPEED_THRESHOLD_KTS = 20
GROUND_ALTITUDE_THRESHOLD_FT = 100
MISSING_KINEMATIC_SENTINEL = 9999
ARRIVAL_WINDOW_MINUTES = 90
BUSY_DEPARTURES_THRESHOLD = 25

# Geometry
EARTH_RADIUS_KM = 6371.0
KNOT_TO_KM_PER_MIN = 1.852 / 60

# Timers
REFRESH_INTERVAL_SECONDS = 60
ROTATE_INTERVAL_SECONDS = 15
SEARCH_DEBOUNCE_MS = 300

# View modes
VIEW_CONTROLLERS = "controllers"
VIEW_AIRPORTS = "airports"
VIEW_AUTO = "auto"

# WebSocket message types
WS_MESSAGE_TYPE_VIEW = "view"
WS_MESSAGE_TYPE_ERROR = "error"

# Badge categories
BADGE_GROUND = "ground"
BADGE_TOWER = "tower"
BADGE_APPROACH = "approach"
BADGE_CENTER = "center"
BADGE_UNKNOWN = "unknown"

# Presentation text
NO_CONTROLLERS_PLACEHOLDER = "No controllers found."
NO_AIRPORTS_PLACEHOLDER = "No airport stats available."
FETCH_ERROR_MESSAGE = "Error fetching data. Please try again later."
