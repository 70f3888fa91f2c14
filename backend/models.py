"""
View-models and WebSocket messages published by the board.
"""

from typing import Literal, Optional
from pydantic import BaseModel


class ControllerCard(BaseModel):
    """One controller in the roster view."""
    callsign: str
    name: Optional[str] = None
    frequency: Optional[str] = None
    position: str  # last callsign token, e.g. TWR
    badge: str  # ground, tower, approach, center, unknown


class AirportCard(BaseModel):
    """Arrival/departure counts for one airport."""
    icao: str
    arrivals: int
    departures: int
    busy: bool = False


class ViewMessage(BaseModel):
    """WebSocket view message (sent on every render pass)."""
    type: Literal["view"] = "view"
    timestamp: str
    active_view: Literal["controllers", "airports", "auto"]
    displayed_view: Literal["controllers", "airports"]
    search: str = ""
    caption: str
    last_updated: Optional[str] = None
    count: int
    controllers: list[ControllerCard] = []
    airports: list[AirportCard] = []
    placeholder: Optional[str] = None  # set when the result is empty


class ErrorMessage(BaseModel):
    """WebSocket error message (sent when a refresh fails)."""
    type: Literal["error"] = "error"
    timestamp: str
    message: str
    last_updated: Optional[str] = None


class ClientCommand(BaseModel):
    """Inbound command from a board client."""
    action: Literal["select_view", "search"]
    view: Optional[Literal["controllers", "airports", "auto"]] = None
    term: Optional[str] = None


class SearchRequest(BaseModel):
    term: str = ""
