"""EcoTrack Server - Entry point.

Runs the MCP server and a small JSON/text API over HTTP.
Uses Starlette with the MCP HTTP app for maximum compatibility.
"""

import logging
import os
from datetime import datetime

import uvicorn
from pydantic import ValidationError
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse
from starlette.routing import Route, Mount

from .core.errors import StateInvariantViolation
from .core.report_text import format_text_report, report_filename
from .core.tracker import EcoTracker
from .shell.mcp_server import mcp, current_session_id, load_tracker, store_tracker


logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

SESSION_HEADER = "X-EcoTrack-Session"


# ==================== Route Handlers ====================


async def health_check(request: Request) -> JSONResponse:
    """Health check endpoint for Cloud Run."""
    return JSONResponse({"status": "healthy", "service": "ecotrack"})


async def get_state(request: Request) -> JSONResponse:
    """Export the session's full state for backup."""
    return JSONResponse(load_tracker().to_dict())


async def put_state(request: Request) -> JSONResponse:
    """Replace the session's state with a previously exported one."""
    try:
        body = await request.json()
    except ValueError:
        return JSONResponse({"error": "Request body must be JSON"}, status_code=400)

    try:
        tracker = EcoTracker.from_dict(body)
    except (ValidationError, StateInvariantViolation) as e:
        logger.warning("Rejected state import: %s", str(e))
        return JSONResponse({"error": "Invalid state", "detail": str(e)}, status_code=400)

    if not store_tracker(tracker):
        return JSONResponse({"error": "Failed to store state."}, status_code=500)

    return JSONResponse({"status": "imported", "days_saved": len(tracker.history())})


async def get_report(request: Request) -> PlainTextResponse:
    """Download the plaintext report."""
    report = load_tracker().build_report(datetime.now())
    filename = report_filename(report.generated_at)
    return PlainTextResponse(
        format_text_report(report),
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# ==================== Session Middleware ====================


class SessionMiddleware(BaseHTTPMiddleware):
    """Bind the session named in the X-EcoTrack-Session header to the request."""

    async def dispatch(self, request: Request, call_next):
        session_id = request.headers.get(SESSION_HEADER, "").strip()
        if session_id:
            token = current_session_id.set(session_id)
            try:
                return await call_next(request)
            finally:
                current_session_id.reset(token)
        return await call_next(request)


# ==================== Create ASGI App ====================


def create_app() -> Starlette:
    """Create the Starlette application with MCP at root.

    The MCP streamable_http_app() handles /mcp/ internally when mounted at root.
    We use its lifespan context to ensure proper initialization.
    """
    mcp_app = mcp.streamable_http_app()

    routes = [
        Route("/health", health_check, methods=["GET"]),
        Route("/api/state", get_state, methods=["GET"]),
        Route("/api/state", put_state, methods=["PUT"]),
        Route("/api/report", get_report, methods=["GET"]),
        # Mount MCP app at root - it handles /mcp/ path internally
        Mount("/", app=mcp_app),
    ]

    app = Starlette(
        routes=routes,
        middleware=[
            Middleware(
                CORSMiddleware,
                allow_origins=["http://localhost:5173"],
                allow_methods=["GET", "PUT", "POST", "OPTIONS"],
                allow_headers=["*"],
            ),
            Middleware(SessionMiddleware),
        ],
        lifespan=mcp_app.router.lifespan_context,
    )

    return app


# Create app at module level for Cloud Run
app = create_app()


def main() -> None:
    """Run the server."""
    port = int(os.environ.get("PORT", 8080))
    host = os.environ.get("HOST", "0.0.0.0")

    logger.info("Starting EcoTrack server on %s:%d", host, port)

    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
