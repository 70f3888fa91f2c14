"""
Prometheus metrics for the backend service.
"""

import os
from fastapi.responses import Response
from prometheus_client import Counter, Gauge, generate_latest, CONTENT_TYPE_LATEST
from prometheus_client.multiprocess import MultiProcessCollector
from prometheus_client.registry import REGISTRY


CONTROLLERS_TRACKED = Gauge(
    'board_controllers_tracked',
    'Regional controllers in the current snapshot'
)

PILOTS_TRACKED = Gauge(
    'board_pilots_tracked',
    'Pilots with a usable flight plan in the current snapshot'
)

REFRESHES = Counter(
    'board_refreshes_total',
    'Refresh cycles',
    ['status']  # success, failed
)

RENDER_PASSES = Counter(
    'board_render_passes_total',
    'Render passes by displayed view',
    ['view']
)

VIEW_SELECTIONS = Counter(
    'board_view_selections_total',
    'Explicit view selections',
    ['view']
)

WEBSOCKET_CONNECTIONS = Gauge(
    'board_websocket_connections',
    'Active WebSocket connections'
)

WEBSOCKET_MESSAGES_SENT = Counter(
    'board_websocket_messages_sent_total',
    'Messages sent by type',
    ['type']  # view, error
)

HTTP_REQUESTS = Counter(
    'board_http_requests_total',
    'HTTP requests',
    ['method', 'path', 'status']
)


async def get_metrics():
    """FastAPI handler for /metrics endpoint."""
    if 'PROMETHEUS_MULTIPROC_DIR' in os.environ:
        # Multi-process mode (for production)
        registry = REGISTRY
        collector = MultiProcessCollector(registry)
        output = generate_latest(collector)
    else:
        # Single-process mode (for development)
        output = generate_latest()

    return Response(content=output, media_type=CONTENT_TYPE_LATEST)
