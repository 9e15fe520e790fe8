"""MCP Server - Tool definitions for Claude integration.

Defines all MCP tools for footprint tracking. Each tool loads the current
session's tracker, runs one operation and stores the state back.
"""

import logging
import os
from contextvars import ContextVar
from datetime import date, datetime

from mcp.server.fastmcp import FastMCP
from mcp.server.transport_security import TransportSecuritySettings

from ..core.models import ResetLevel
from ..core.report_text import format_clipboard_summary, format_text_report, report_filename
from ..core.tracker import EcoTracker
from .export_sinks import ClipboardSink, FileDownloadSink, submit_export
from .firestore_client import FirestoreConfig, TrackerFirestoreClient
from .state_store import InMemoryTrackerStore, TrackerStore


logger = logging.getLogger(__name__)

DEFAULT_SESSION = "default"

# Context variable to store current session id per request
current_session_id: ContextVar[str] = ContextVar("current_session_id", default=DEFAULT_SESSION)

# Configure transport security for Cloud Run deployment
transport_security = TransportSecuritySettings(
    enable_dns_rebinding_protection=True,
    allowed_hosts=[
        "localhost:*",
        "127.0.0.1:*",
        "*.run.app:*",
        "*.run.app",
    ],
)

# Initialize FastMCP server with stateless HTTP for cloud deployments
mcp = FastMCP(
    "ecotrack",
    instructions="""EcoTrack - Daily carbon footprint tracker.

Use these tools to estimate the user's daily footprint from distance travelled,
electricity used and diet, save it to their history and review progress.

Call calculate_footprint whenever the user describes their day, then save_today
once they are happy with the numbers. Always ask before clear_history or
factory_reset and pass confirmed=true only after the user agreed.""",
    stateless_http=True,
    transport_security=transport_security,
)

# Lazy-initialized collaborators
_store: TrackerStore | None = None
_clipboards: dict[str, ClipboardSink] = {}


def get_store() -> TrackerStore:
    """Get or create the state store selected by STATE_BACKEND."""
    global _store
    if _store is None:
        backend = os.environ.get("STATE_BACKEND", "memory")
        if backend == "firestore":
            config = FirestoreConfig(
                database=os.environ.get("FIRESTORE_DATABASE", "ecotrack"),
            )
            _store = TrackerFirestoreClient(config)
        else:
            _store = InMemoryTrackerStore()
        logger.info("Using %s state backend", backend)
    return _store


def get_clipboard(session_id: str | None = None) -> ClipboardSink:
    """Get the clipboard of a session, creating it on first use."""
    session_id = session_id or current_session_id.get()
    return _clipboards.setdefault(session_id, ClipboardSink())


def get_download_sink() -> FileDownloadSink:
    return FileDownloadSink(os.environ.get("EXPORT_DIR", "exports"))


def load_tracker(session_id: str | None = None) -> EcoTracker:
    """Load a session's tracker, rolling its week forward to today."""
    session_id = session_id or current_session_id.get()
    tracker = EcoTracker(get_store().get_state(session_id))
    tracker.refresh_week(date.today())
    return tracker


def store_tracker(tracker: EcoTracker, session_id: str | None = None) -> bool:
    session_id = session_id or current_session_id.get()
    return get_store().save_state(session_id, tracker.to_state())


# ==================== Footprint Tools ====================


@mcp.tool()
def calculate_footprint(
    distance: float | str | None = None,
    electricity: float | str | None = None,
    diet_type: str = "mixed",
) -> dict:
    """Update today's inputs and compute the footprint.

    Missing or unreadable numbers count as zero.

    Args:
        distance: Distance travelled by car in km (e.g., 12.5)
        electricity: Electricity used in kWh (e.g., 6)
        diet_type: One of "vegetarian", "mixed", "non-veg"

    Returns:
        Breakdown, badges, tips and progress against the personal target
    """
    tracker = load_tracker()
    tracker.update_form(distance, electricity, diet_type)
    store_tracker(tracker)

    snapshot = tracker.snapshot()
    return {
        "input": snapshot.form.model_dump(mode="json"),
        "breakdown": snapshot.breakdown.model_dump(),
        "personal_target": snapshot.personal_target,
        "band": snapshot.band.value,
        "progress_pct": round(snapshot.progress_pct, 1),
        "target_gap": round(snapshot.target_gap, 1),
        "badges": [b.model_dump() for b in snapshot.badges],
        "tips": snapshot.tips,
    }


@mcp.tool()
def save_today() -> dict:
    """Save the current inputs as today's entry.

    Saving again on the same day replaces the earlier entry.

    Returns:
        The saved entry, status message and updated achievements
    """
    tracker = load_tracker()
    result = tracker.save_today(date.today())

    if not store_tracker(tracker):
        return {"error": "Failed to save. Please try again."}

    return {
        "entry": result.entry.model_dump(mode="json"),
        "message": result.message,
        "achievements": tracker.snapshot().achievements.model_dump(),
    }


@mcp.tool()
def get_dashboard() -> dict:
    """Get the full dashboard: inputs, breakdown, feedback, week and recent history."""
    return load_tracker().snapshot().model_dump(mode="json")


@mcp.tool()
def get_history(limit: int = 10) -> list[dict]:
    """List saved days, newest first.

    Args:
        limit: Maximum number of days to return

    Returns:
        List of saved entries
    """
    return [e.model_dump(mode="json") for e in load_tracker().history(limit)]


@mcp.tool()
def set_target(target: float | str) -> str:
    """Set the personal daily target in kg CO2.

    Args:
        target: New target (e.g., 12). Invalid values restore the default of 15.

    Returns:
        Confirmation message
    """
    tracker = load_tracker()
    value = tracker.set_target(target)
    if not store_tracker(tracker):
        return "Failed to save target. Please try again."
    return f"Personal target set to {value:g} kg CO₂ per day."


@mcp.tool()
def reset_tracker(level: str, confirmed: bool = False) -> dict:
    """Reset tracker data.

    Levels, least to most destructive:
        clear_form: clear today's inputs
        reset_today: clear inputs and remove today's saved entry
        clear_history: delete all history and achievements (needs confirmed=true)
        factory_reset: reset everything including the target (needs confirmed=true)

    Args:
        level: Reset level name
        confirmed: Whether the user confirmed a destructive reset

    Returns:
        Whether the reset was applied and a status message
    """
    try:
        reset_level = ResetLevel(level)
    except ValueError:
        return {"error": f"Unknown reset level: {level}"}

    tracker = load_tracker()
    result = tracker.reset(reset_level, confirmed=confirmed, today=date.today())

    if result.applied and not store_tracker(tracker):
        return {"error": "Failed to save reset. Please try again."}

    return result.model_dump(mode="json")


# ==================== Export Tools ====================


@mcp.tool()
async def export_report() -> dict:
    """Write the full text report to the download directory.

    Returns:
        Export status, file name and the report text
    """
    tracker = load_tracker()
    report = tracker.build_report(datetime.now())
    content = format_text_report(report)

    request = submit_export(get_download_sink(), report_filename(report.generated_at), content)
    result = await request.result()

    return {**result.model_dump(), "report": content}


@mcp.tool()
async def copy_report() -> dict:
    """Copy a short summary report to the clipboard.

    Returns:
        Copy status and the summary text
    """
    tracker = load_tracker()
    report = tracker.build_report(datetime.now())
    content = format_clipboard_summary(report)

    request = submit_export(get_clipboard(), report_filename(report.generated_at), content)
    result = await request.result()

    return {**result.model_dump(), "summary": content}


@mcp.tool()
def paste_report() -> dict:
    """Get the summary last copied in this session.

    Returns:
        The copied summary, or an error if nothing was copied yet
    """
    content = get_clipboard().content
    if content is None:
        return {"error": "Nothing copied yet. Use copy_report first."}
    return {"summary": content}
