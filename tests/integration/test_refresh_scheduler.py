"""
Integration test: Snapshot refresh cycle.

This test verifies:
1. A successful refresh replaces participant sets and renders once
2. A failed refresh leaves held data untouched and publishes an error
3. A refresh renders the displayed view without disturbing auto rotation
4. The periodic loop keeps running after failures
"""

import asyncio
import json
import pytest
from pathlib import Path
import sys

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from backend.models import ErrorMessage, ViewMessage
from backend.scheduler import RefreshScheduler
from backend.session import SessionState, ViewMode
from backend.view_controller import ViewStateController
from contracts.constants import FETCH_ERROR_MESSAGE
from contracts.validation import validate_snapshot_document
from processing.airports import get_airport_table


EXAMPLE_PATH = Path(__file__).parent.parent.parent / "contracts" / "examples" / "vatsim_snapshot.json"


def load_document():
    with open(EXAMPLE_PATH) as f:
        _, document, _ = validate_snapshot_document(json.load(f))
    return document


class RecordingPublisher:
    def __init__(self):
        self.messages = []

    async def publish(self, message):
        self.messages.append(message)


class ScriptedSource:
    """Returns queued results in order; exceptions are raised."""

    def __init__(self, *results):
        self.results = list(results)
        self.calls = 0

    def fetch_snapshot(self):
        self.calls += 1
        result = self.results.pop(0) if self.results else None
        if isinstance(result, Exception):
            raise result
        return result

    def close(self):
        pass


def make_scheduler(source, interval=60, rotate_interval=60):
    session = SessionState()
    publisher = RecordingPublisher()
    controller = ViewStateController(
        session, publisher, get_airport_table(), rotate_interval=rotate_interval, debounce_seconds=0.01
    )
    scheduler = RefreshScheduler(source, session, controller, interval=interval)
    return scheduler, session, publisher


def test_successful_refresh_replaces_data():
    """Test that a refresh filters the snapshot into the session and renders once."""
    scheduler, session, publisher = make_scheduler(ScriptedSource(load_document()))

    ok = asyncio.run(scheduler.refresh_once())

    assert ok
    assert [c.callsign for c in session.controllers] == [
        "EGLL_N_TWR", "EGKK_GND", "LON_S_CTR", "THAMES_APP", "EGCC_DEL",
    ]
    assert [p.callsign for p in session.pilots] == ["BAW1", "EZY2", "RYR3", "DLH4", "KLM5", "UNK6"]
    assert session.last_updated is not None
    assert session.last_error is None

    assert len(publisher.messages) == 1
    message = publisher.messages[0]
    assert isinstance(message, ViewMessage)
    assert message.displayed_view == "controllers"
    assert message.count == 5
    assert message.last_updated == session.last_updated.isoformat()


def test_failed_refresh_keeps_previous_data():
    """Test that a failed fetch is a no-op against held state."""
    scheduler, session, publisher = make_scheduler(ScriptedSource(load_document(), None))

    async def scenario():
        await scheduler.refresh_once()
        before = (list(session.controllers), list(session.pilots), session.last_updated)
        ok = await scheduler.refresh_once()
        return before, ok

    before, ok = asyncio.run(scenario())

    assert not ok
    assert (session.controllers, session.pilots, session.last_updated) == before
    assert session.last_error == FETCH_ERROR_MESSAGE

    error = publisher.messages[-1]
    assert isinstance(error, ErrorMessage)
    assert error.message == FETCH_ERROR_MESSAGE
    assert error.last_updated == session.last_updated.isoformat()


def test_source_exception_is_treated_as_failure():
    """Test that an unexpected exception from the source does not escape."""
    scheduler, session, publisher = make_scheduler(ScriptedSource(RuntimeError("boom")))

    ok = asyncio.run(scheduler.refresh_once())

    assert not ok
    assert session.controllers == []
    assert isinstance(publisher.messages[-1], ErrorMessage)


def test_recovery_clears_error():
    """Test that the next successful refresh clears the error state."""
    scheduler, session, _ = make_scheduler(ScriptedSource(None, load_document()))

    async def scenario():
        await scheduler.refresh_once()
        failed_error = session.last_error
        await scheduler.refresh_once()
        return failed_error

    failed_error = asyncio.run(scenario())

    assert failed_error == FETCH_ERROR_MESSAGE
    assert session.last_error is None
    assert len(session.controllers) == 5


def test_refresh_renders_displayed_view():
    """Test that a refresh renders the airports view when it is displayed."""
    scheduler, session, publisher = make_scheduler(ScriptedSource(load_document()))
    session.active_view = ViewMode.AIRPORTS
    session.displayed_view = ViewMode.AIRPORTS

    asyncio.run(scheduler.refresh_once())

    message = publisher.messages[-1]
    assert message.displayed_view == "airports"
    assert [(a.icao, a.arrivals, a.departures) for a in message.airports] == [
        ("EGLL", 1, 1),
        ("EGKK", 0, 1),
        ("EGSS", 1, 0),
    ]


def test_refresh_does_not_restart_rotation():
    """Test that a refresh during auto mode keeps the same rotation timer."""
    scheduler, session, _ = make_scheduler(ScriptedSource(load_document()), rotate_interval=60)

    async def scenario():
        await scheduler.view_controller.select_view(ViewMode.AUTO)
        task = scheduler.view_controller._rotation_task
        await scheduler.refresh_once()
        same = scheduler.view_controller._rotation_task is task
        scheduler.view_controller.shutdown()
        return same

    assert asyncio.run(scenario())
    assert session.active_view is ViewMode.AUTO


def test_periodic_loop_survives_failures():
    """Test that the loop keeps polling after a failed fetch."""
    source = ScriptedSource(None, None, load_document())
    scheduler, session, _ = make_scheduler(source, interval=0.01)

    async def scenario():
        scheduler.start()
        await asyncio.sleep(0.1)
        scheduler.stop()

    asyncio.run(scenario())

    assert source.calls >= 3
    assert len(session.controllers) == 5
