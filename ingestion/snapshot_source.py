"""
Snapshot sources - fetch the VATSIM data feed or replay a recorded copy.

Modes:
- live: GET the public VATSIM v3 data feed
- replay: read a recorded snapshot document from disk for demos/tests

Both sources return a validated SnapshotDocument, or None when the fetch or
parse failed. Failures are logged and counted, never raised.
"""

import os
import json
import logging
from pathlib import Path
from typing import Optional

import requests
from prometheus_client import Counter, Histogram

from contracts.constants import MODE_LIVE, MODE_REPLAY, VATSIM_DATA_URL
from contracts.validation import SnapshotDocument, validate_snapshot_document

# ============================================
# Configuration
# ============================================

SNAPSHOT_MODE = os.getenv("SNAPSHOT_MODE", MODE_LIVE)
DATA_URL = os.getenv("VATSIM_DATA_URL", VATSIM_DATA_URL)
REPLAY_FILE = os.getenv(
    "REPLAY_FILE", str(Path(__file__).parent.parent / "contracts" / "examples" / "vatsim_snapshot.json")
)
FETCH_TIMEOUT_SECONDS = float(os.getenv("FETCH_TIMEOUT_SECONDS", "30"))

logger = logging.getLogger(__name__)

# ============================================
# Prometheus Metrics
# ============================================

FETCHES_TOTAL = Counter('board_fetches_total', 'Snapshot fetch attempts', ['status'])
FETCH_LATENCY = Histogram('board_fetch_latency_seconds', 'Snapshot fetch duration')
RECORDS_REJECTED = Counter('board_records_rejected_total', 'Snapshot records failing validation', ['kind'])


def _accept_document(data) -> Optional[SnapshotDocument]:
    """Validate a decoded document and account for dropped records."""
    is_valid, document, error = validate_snapshot_document(data)
    if not is_valid:
        FETCHES_TOTAL.labels(status="invalid_document").inc()
        logger.error(f"Invalid snapshot document: {error}")
        return None

    if document.rejected_controllers:
        RECORDS_REJECTED.labels(kind="controller").inc(document.rejected_controllers)
        logger.warning(f"Dropped {document.rejected_controllers} invalid controller records")
    if document.rejected_pilots:
        RECORDS_REJECTED.labels(kind="pilot").inc(document.rejected_pilots)
        logger.warning(f"Dropped {document.rejected_pilots} invalid pilot records")

    FETCHES_TOTAL.labels(status="success").inc()
    return document


class VatsimClient:
    """Client for the public VATSIM data feed. No authentication."""

    def __init__(self, url: str = DATA_URL, timeout: float = FETCH_TIMEOUT_SECONDS,
                 session: Optional[requests.Session] = None):
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()

    def fetch_snapshot(self) -> Optional[SnapshotDocument]:
        """Fetch and validate one snapshot. Returns None on error."""
        try:
            with FETCH_LATENCY.time():
                response = self.session.get(self.url, timeout=self.timeout)

            if response.status_code != 200:
                FETCHES_TOTAL.labels(status=f"http_{response.status_code}").inc()
                logger.error(f"Feed error: HTTP {response.status_code}")
                return None

            data = response.json()

        except requests.exceptions.Timeout:
            FETCHES_TOTAL.labels(status="timeout").inc()
            logger.error("Feed timeout")
            return None

        except requests.exceptions.JSONDecodeError as e:
            FETCHES_TOTAL.labels(status="invalid_json").inc()
            logger.error(f"Failed to decode feed JSON: {e}")
            return None

        except requests.exceptions.RequestException as e:
            FETCHES_TOTAL.labels(status="connection_error").inc()
            logger.error(f"Connection error: {e}")
            return None

        return _accept_document(data)

    def close(self):
        self.session.close()


class ReplaySource:
    """Serves a recorded snapshot document from disk."""

    def __init__(self, filepath: str = REPLAY_FILE):
        self.filepath = filepath

    def fetch_snapshot(self) -> Optional[SnapshotDocument]:
        try:
            with open(self.filepath, 'r') as f:
                data = json.load(f)
        except FileNotFoundError:
            FETCHES_TOTAL.labels(status="replay_missing").inc()
            logger.error(f"Replay file not found: {self.filepath}")
            return None
        except json.JSONDecodeError as e:
            FETCHES_TOTAL.labels(status="invalid_json").inc()
            logger.error(f"Invalid JSON in replay file {self.filepath}: {e}")
            return None

        return _accept_document(data)

    def close(self):
        pass


def create_snapshot_source(mode: str = SNAPSHOT_MODE):
    """Build the source for the configured mode."""
    if mode == MODE_REPLAY:
        logger.info(f"Replay mode: reading snapshots from {REPLAY_FILE}")
        return ReplaySource(REPLAY_FILE)
    if mode != MODE_LIVE:
        logger.warning(f"Unknown SNAPSHOT_MODE '{mode}', falling back to {MODE_LIVE}")
    logger.info(f"Live mode: polling {DATA_URL}")
    return VatsimClient(DATA_URL)
