"""State Store - Where serialized tracker sessions live between requests.

The core only knows how to turn a tracker into a TrackerState and back. Stores
keep those records per session id.
"""

import logging
from typing import Protocol

from ..core.models import TrackerState


logger = logging.getLogger(__name__)


class TrackerStore(Protocol):
    """Persistence interface used by the MCP tools and HTTP routes."""

    def get_state(self, session_id: str) -> TrackerState | None: ...

    def save_state(self, session_id: str, state: TrackerState) -> bool: ...

    def delete_state(self, session_id: str) -> bool: ...


class InMemoryTrackerStore:
    """Process-local store. State is lost on restart."""

    def __init__(self) -> None:
        self._states: dict[str, dict] = {}

    def get_state(self, session_id: str) -> TrackerState | None:
        data = self._states.get(session_id)
        if data is None:
            return None
        return TrackerState.model_validate(data)

    def save_state(self, session_id: str, state: TrackerState) -> bool:
        logger.debug("Storing state for session: %s", session_id[:8])
        self._states[session_id] = state.model_dump(mode="json")
        return True

    def delete_state(self, session_id: str) -> bool:
        return self._states.pop(session_id, None) is not None
