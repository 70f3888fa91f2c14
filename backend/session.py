"""
Session state shared by the scheduler, view controller and publisher.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

from contracts.constants import VIEW_AIRPORTS, VIEW_AUTO, VIEW_CONTROLLERS
from contracts.validation import ControllerRecord, PilotRecord


class ViewMode(str, Enum):
    CONTROLLERS = VIEW_CONTROLLERS
    AIRPORTS = VIEW_AIRPORTS
    AUTO = VIEW_AUTO


@dataclass
class SessionState:
    """
    Everything the board knows about the current session.

    ``active_view`` is what the user selected; ``displayed_view`` is what is
    actually on screen, which differs from it only while ``active_view`` is
    AUTO. Participant lists are replaced wholesale on each refresh.
    """
    controllers: List[ControllerRecord] = field(default_factory=list)
    pilots: List[PilotRecord] = field(default_factory=list)
    active_view: ViewMode = ViewMode.CONTROLLERS
    displayed_view: ViewMode = ViewMode.CONTROLLERS
    search_term: str = ""
    last_updated: Optional[datetime] = None
    last_error: Optional[str] = None

    def replace_participants(self, controllers: List[ControllerRecord], pilots: List[PilotRecord],
                             updated_at: datetime):
        self.controllers = list(controllers)
        self.pilots = list(pilots)
        self.last_updated = updated_at
        self.last_error = None
