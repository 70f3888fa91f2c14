"""
FastAPI backend - UK ATC Board.

Serves:
- WebSocket endpoint pushing the rendered board view
- REST API for view selection, search, theme and direct data reads
- Prometheus metrics endpoint
"""

import os
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, WebSocket, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from ingestion.snapshot_source import create_snapshot_source
from processing.airports import get_airport_table
from backend.models import SearchRequest
from backend.metrics import get_metrics, HTTP_REQUESTS
from backend.scheduler import RefreshScheduler, REFRESH_INTERVAL
from backend.session import SessionState, ViewMode
from backend.theme import ThemePreferenceStore, THEME_FILE
from backend.view_controller import (
    ViewStateController,
    airport_cards,
    controller_cards,
    normalize_search,
    ROTATE_INTERVAL,
    SEARCH_DEBOUNCE_SECONDS,
)
from backend.websocket import ConnectionManager

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Configuration
BACKEND_HOST = os.getenv("BACKEND_HOST", "0.0.0.0")
BACKEND_PORT = int(os.getenv("BACKEND_PORT", "8000"))


# Global state
session: SessionState = None
connection_manager: ConnectionManager = None
view_controller: ViewStateController = None
scheduler: RefreshScheduler = None
theme: ThemePreferenceStore = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    global session, connection_manager, view_controller, scheduler, theme

    logger.info("=" * 50)
    logger.info("UK ATC Board Backend - Starting")
    logger.info("=" * 50)

    airport_table = get_airport_table()
    session = SessionState()
    connection_manager = ConnectionManager()
    view_controller = ViewStateController(
        session,
        connection_manager,
        airport_table,
        rotate_interval=ROTATE_INTERVAL,
        debounce_seconds=SEARCH_DEBOUNCE_SECONDS,
    )
    theme = ThemePreferenceStore(THEME_FILE)

    source = create_snapshot_source()
    scheduler = RefreshScheduler(source, session, view_controller, interval=REFRESH_INTERVAL)

    # Initial load, then the periodic loop
    await scheduler.refresh_once()
    scheduler.start()

    yield

    # Cleanup
    logger.info("Shutting down...")
    scheduler.stop()
    view_controller.shutdown()
    source.close()
    logger.info("Shutdown complete")


# Create FastAPI app
app = FastAPI(
    title="UK ATC Board API",
    description="Regional controller roster and airport traffic board",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify allowed origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def metrics_middleware(request: Request, call_next):
    """Middleware to track HTTP requests."""
    response = await call_next(request)
    HTTP_REQUESTS.labels(
        method=request.method,
        path=request.url.path,
        status=response.status_code
    ).inc()
    return response


def _not_ready() -> JSONResponse:
    return JSONResponse(
        status_code=503,
        content={"error": "Service not ready"}
    )


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": "UK ATC Board",
        "version": "1.0.0",
        "endpoints": {
            "websocket": "/ws/board",
            "view": "/view",
            "search": "/search",
            "controllers": "/controllers",
            "airports": "/airports",
            "theme": "/theme",
            "health": "/health",
            "metrics": "/metrics"
        }
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {
        "status": "healthy" if session and session.last_error is None else "degraded",
        "controllers": len(session.controllers) if session else 0,
        "pilots": len(session.pilots) if session else 0,
        "last_updated": session.last_updated.isoformat() if session and session.last_updated else None,
        "last_error": session.last_error if session else None,
        "connections": len(connection_manager.active_connections) if connection_manager else 0
    }


@app.get("/view")
async def get_view():
    """Latest rendered message (view or error)."""
    if not connection_manager or connection_manager.latest is None:
        return _not_ready()
    return connection_manager.latest.model_dump()


@app.post("/view/{mode}")
async def select_view(mode: ViewMode):
    """Switch view mode and return the freshly rendered view."""
    if not view_controller:
        return _not_ready()
    message = await view_controller.select_view(mode)
    return message.model_dump()


@app.post("/search")
async def search(request: SearchRequest):
    """Schedule a debounced search within the active view."""
    if not view_controller:
        return _not_ready()
    view_controller.set_search(request.term)
    return {"status": "scheduled", "term": normalize_search(request.term)}


@app.get("/controllers")
async def get_controllers(search: str = ""):
    """Regional controllers from the latest snapshot."""
    if not session:
        return _not_ready()
    cards = controller_cards(session.controllers, normalize_search(search))
    return {"count": len(cards), "controllers": [c.model_dump() for c in cards]}


@app.get("/airports")
async def get_airports(search: str = ""):
    """Airport arrivals/departures computed from the latest snapshot."""
    if not session:
        return _not_ready()
    cards = airport_cards(session.pilots, view_controller.airport_table, normalize_search(search))
    return {"count": len(cards), "airports": [a.model_dump() for a in cards]}


@app.get("/theme")
async def get_theme():
    if not theme:
        return _not_ready()
    return {"dark": theme.dark}


@app.post("/theme/toggle")
async def toggle_theme():
    if not theme:
        return _not_ready()
    return {"dark": theme.toggle()}


@app.websocket("/ws/board")
async def websocket_board(websocket: WebSocket):
    """
    WebSocket endpoint for the live board.

    Protocol:
    - On connect: sends the current view (or error) message
    - On every render pass: sends a view message
    - On refresh failure: sends an error message

    Client commands:
    - {"action": "select_view", "view": "controllers" | "airports" | "auto"}
    - {"action": "search", "term": "..."}
    """
    if not connection_manager:
        await websocket.close(code=1013, reason="Service not ready")
        return

    await connection_manager.handle_client(websocket, view_controller)


@app.get("/metrics")
async def metrics():
    """Prometheus metrics endpoint."""
    return await get_metrics()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "backend.main:app",
        host=BACKEND_HOST,
        port=BACKEND_PORT,
        log_level="info"
    )
