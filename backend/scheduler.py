"""
Periodic snapshot refresh.

Each cycle fetches a snapshot, filters it to the region of interest, replaces
the session's participant sets and renders the displayed view once. A failed
fetch leaves the session untouched and publishes an error message instead.
"""

import os
import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional

from contracts.constants import (
    CONTROLLER_PREFIXES,
    EXCLUDED_CONTROLLER_PREFIX,
    EXCLUDED_CONTROLLER_TOKEN,
    FETCH_ERROR_MESSAGE,
    REFRESH_INTERVAL_SECONDS,
)
from processing.participants import filter_controllers, filter_pilots
from backend.metrics import CONTROLLERS_TRACKED, PILOTS_TRACKED, REFRESHES
from backend.session import SessionState
from backend.view_controller import ViewStateController

logger = logging.getLogger(__name__)

REFRESH_INTERVAL = float(os.getenv("REFRESH_INTERVAL_SECONDS", str(REFRESH_INTERVAL_SECONDS)))
ALLOWED_PREFIXES = tuple(
    p.strip() for p in os.getenv("CONTROLLER_PREFIXES", ",".join(CONTROLLER_PREFIXES)).split(",") if p.strip()
)
EXCLUDED_PREFIX = os.getenv("EXCLUDED_CONTROLLER_PREFIX", EXCLUDED_CONTROLLER_PREFIX)
EXCLUDED_TOKEN = os.getenv("EXCLUDED_CONTROLLER_TOKEN", EXCLUDED_CONTROLLER_TOKEN)


class RefreshScheduler:
    """Re-fetches the snapshot on a fixed interval."""

    def __init__(
        self,
        source,
        session: SessionState,
        view_controller: ViewStateController,
        interval: float = REFRESH_INTERVAL,
    ):
        self.source = source
        self.session = session
        self.view_controller = view_controller
        self.interval = interval
        self._task: Optional[asyncio.Task] = None

    async def refresh_once(self) -> bool:
        """
        Run one fetch + render cycle.

        Returns:
            True if the session was updated, False if the fetch failed
        """
        try:
            # Blocking call, runs in a worker thread
            document = await asyncio.to_thread(self.source.fetch_snapshot)
        except Exception as e:
            logger.error(f"Unexpected error fetching snapshot: {e}")
            document = None

        if document is None:
            REFRESHES.labels(status="failed").inc()
            self.session.last_error = FETCH_ERROR_MESSAGE
            await self.view_controller.render_error(FETCH_ERROR_MESSAGE)
            return False

        controllers = filter_controllers(
            document.controllers,
            allowed_prefixes=ALLOWED_PREFIXES,
            excluded_prefix=EXCLUDED_PREFIX,
            excluded_token=EXCLUDED_TOKEN,
        )
        pilots = filter_pilots(document.pilots)

        self.session.replace_participants(controllers, pilots, datetime.now(timezone.utc))
        CONTROLLERS_TRACKED.set(len(controllers))
        PILOTS_TRACKED.set(len(pilots))
        REFRESHES.labels(status="success").inc()
        logger.info(
            f"Snapshot refreshed: {len(controllers)} controllers, {len(pilots)} pilots "
            f"(of {len(document.controllers)} / {len(document.pilots)})"
        )

        await self.view_controller.render()
        return True

    async def _refresh_loop(self):
        logger.info(f"Starting refresh loop (interval: {self.interval}s)")
        while True:
            await asyncio.sleep(self.interval)
            try:
                await self.refresh_once()
            except Exception as e:
                logger.error(f"Error in refresh loop: {e}")

    def start(self):
        """Start the periodic refresh. The initial fetch is the caller's job."""
        if self._task is None or self._task.done():
            self._task = asyncio.get_running_loop().create_task(self._refresh_loop())
            logger.info("Refresh loop started")

    def stop(self):
        if self._task is not None:
            self._task.cancel()
            self._task = None
            logger.info("Refresh loop stopped")
