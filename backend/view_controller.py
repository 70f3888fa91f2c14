"""
View state machine for the board.

Three modes: controllers, airports and auto. Auto is never displayed itself;
it alternates the displayed view between controllers and airports on a timer.
The rotation timer and the search debounce timer are asyncio tasks owned by
the controller, so switching mode cancels stale callbacks outright.
"""

import os
import asyncio
import logging
from datetime import datetime, timezone
from typing import Iterable, List, Mapping, Optional

from contracts.constants import (
    NO_AIRPORTS_PLACEHOLDER,
    NO_CONTROLLERS_PLACEHOLDER,
    REGION_ICAO_PREFIX,
    REGION_NAME,
    ROTATE_INTERVAL_SECONDS,
    SEARCH_DEBOUNCE_MS,
)
from contracts.validation import ControllerRecord, PilotRecord
from processing.airports import AirportCoordinate
from processing.airport_stats import calculate_airport_stats, filter_airport_stats, sort_airport_stats
from processing.participants import badge_category, matches_controller_search, position_label
from backend.models import AirportCard, ControllerCard, ErrorMessage, ViewMessage
from backend.metrics import RENDER_PASSES, VIEW_SELECTIONS
from backend.session import SessionState, ViewMode

logger = logging.getLogger(__name__)

REGION_PREFIX = os.getenv("REGION_ICAO_PREFIX", REGION_ICAO_PREFIX)
ROTATE_INTERVAL = float(os.getenv("ROTATE_INTERVAL_SECONDS", str(ROTATE_INTERVAL_SECONDS)))
SEARCH_DEBOUNCE_SECONDS = int(os.getenv("SEARCH_DEBOUNCE_MS", str(SEARCH_DEBOUNCE_MS))) / 1000.0


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def normalize_search(term: Optional[str]) -> str:
    return (term or "").strip().lower()


def controller_cards(controllers: Iterable[ControllerRecord], term: str = "") -> List[ControllerCard]:
    """Controllers matching ``term``, as view-models."""
    return [
        ControllerCard(
            callsign=c.callsign,
            name=c.name,
            frequency=c.frequency,
            position=position_label(c.callsign),
            badge=badge_category(c.callsign).value,
        )
        for c in controllers
        if matches_controller_search(c, term)
    ]


def airport_cards(
    pilots: Iterable[PilotRecord],
    airport_table: Mapping[str, AirportCoordinate],
    term: str = "",
    region_prefix: str = REGION_PREFIX,
) -> List[AirportCard]:
    """Fresh airport statistics matching ``term``, busiest first."""
    stats = calculate_airport_stats(pilots, airport_table, region_prefix=region_prefix)
    filtered = filter_airport_stats(stats, term)
    return [
        AirportCard(icao=s.icao, arrivals=s.arrivals, departures=s.departures, busy=s.busy)
        for s in sort_airport_stats(filtered)
    ]


class ViewStateController:
    """Owns the view mode, search term and the timers that drive rendering."""

    def __init__(
        self,
        session: SessionState,
        publisher,
        airport_table: Mapping[str, AirportCoordinate],
        region_prefix: str = REGION_PREFIX,
        rotate_interval: float = ROTATE_INTERVAL,
        debounce_seconds: float = SEARCH_DEBOUNCE_SECONDS,
    ):
        """
        Args:
            session: Shared session state; read on every render pass
            publisher: Render boundary with an async ``publish(message)``
            airport_table: Static ICAO -> coordinate mapping
            region_prefix: ICAO prefix of the region of interest
            rotate_interval: Seconds between auto-mode view flips
            debounce_seconds: Quiet period before a search is applied
        """
        self.session = session
        self.publisher = publisher
        self.airport_table = airport_table
        self.region_prefix = region_prefix
        self.rotate_interval = rotate_interval
        self.debounce_seconds = debounce_seconds
        self._rotation_task: Optional[asyncio.Task] = None
        self._search_task: Optional[asyncio.Task] = None

    @property
    def rotating(self) -> bool:
        return self._rotation_task is not None and not self._rotation_task.done()

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    async def select_view(self, mode) -> ViewMessage:
        """Switch to ``mode`` and render immediately."""
        mode = ViewMode(mode)
        self._cancel_rotation()

        self.session.active_view = mode
        self.session.displayed_view = ViewMode.CONTROLLERS if mode is ViewMode.AUTO else mode
        VIEW_SELECTIONS.labels(view=mode.value).inc()
        logger.info(f"View selected: {mode.value}")

        # Registered before rendering so a selection made while publishing cancels it
        if mode is ViewMode.AUTO:
            self._rotation_task = asyncio.get_running_loop().create_task(self._rotation_loop())

        return await self.render()

    def set_search(self, term: Optional[str]):
        """Apply ``term`` after the debounce period, replacing any pending search."""
        if self._search_task is not None and not self._search_task.done():
            self._search_task.cancel()
        self._search_task = asyncio.get_running_loop().create_task(
            self._debounced_search(normalize_search(term))
        )

    async def rotate(self) -> ViewMessage:
        """One auto-mode step: flip the displayed view and render."""
        if self.session.displayed_view is ViewMode.CONTROLLERS:
            self.session.displayed_view = ViewMode.AIRPORTS
        else:
            self.session.displayed_view = ViewMode.CONTROLLERS
        logger.debug(f"Auto rotation -> {self.session.displayed_view.value}")
        return await self.render()

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    async def render(self) -> ViewMessage:
        """Build the message for the displayed view and publish it."""
        if self.session.displayed_view is ViewMode.AIRPORTS:
            message = self.build_airports_message()
        else:
            message = self.build_controllers_message()

        RENDER_PASSES.labels(view=message.displayed_view).inc()
        await self.publisher.publish(message)
        return message

    async def render_error(self, text: str) -> ErrorMessage:
        message = ErrorMessage(
            timestamp=_now_iso(),
            message=text,
            last_updated=self._last_updated_iso(),
        )
        await self.publisher.publish(message)
        return message

    def build_controllers_message(self) -> ViewMessage:
        cards = controller_cards(self.session.controllers, self.session.search_term)
        return ViewMessage(
            timestamp=_now_iso(),
            active_view=self.session.active_view.value,
            displayed_view=ViewMode.CONTROLLERS.value,
            search=self.session.search_term,
            caption=f"Showing controllers within {REGION_NAME} ({len(cards)})",
            last_updated=self._last_updated_iso(),
            count=len(cards),
            controllers=cards,
            placeholder=None if cards else NO_CONTROLLERS_PLACEHOLDER,
        )

    def build_airports_message(self) -> ViewMessage:
        cards = airport_cards(
            self.session.pilots,
            self.airport_table,
            self.session.search_term,
            region_prefix=self.region_prefix,
        )
        return ViewMessage(
            timestamp=_now_iso(),
            active_view=self.session.active_view.value,
            displayed_view=ViewMode.AIRPORTS.value,
            search=self.session.search_term,
            caption=f"Showing airport arrivals/departures within {REGION_NAME} ({len(cards)})",
            last_updated=self._last_updated_iso(),
            count=len(cards),
            airports=cards,
            placeholder=None if cards else NO_AIRPORTS_PLACEHOLDER,
        )

    def _last_updated_iso(self) -> Optional[str]:
        if self.session.last_updated is None:
            return None
        return self.session.last_updated.isoformat()

    # ------------------------------------------------------------------
    # Timers
    # ------------------------------------------------------------------

    async def _rotation_loop(self):
        logger.info(f"Starting auto rotation (interval: {self.rotate_interval}s)")
        while True:
            await asyncio.sleep(self.rotate_interval)
            try:
                await self.rotate()
            except Exception as e:
                logger.error(f"Error in auto rotation: {e}")

    async def _debounced_search(self, term: str):
        await asyncio.sleep(self.debounce_seconds)
        self.session.search_term = term
        logger.debug(f"Search applied: '{term}'")
        try:
            await self.render()
        except Exception as e:
            logger.error(f"Error rendering search results: {e}")

    def _cancel_rotation(self):
        if self._rotation_task is not None:
            self._rotation_task.cancel()
            self._rotation_task = None
            logger.info("Auto rotation stopped")

    def shutdown(self):
        """Cancel every timer owned by the controller."""
        self._cancel_rotation()
        if self._search_task is not None:
            self._search_task.cancel()
            self._search_task = None
