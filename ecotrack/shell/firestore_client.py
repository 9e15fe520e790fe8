"""Firestore Client - Persistence for tracker sessions.

This module handles all database I/O for tracker state.
All I/O is contained here; business logic is in the core module.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from google.cloud import firestore
from pydantic import ValidationError

from ..core.models import TrackerState


logger = logging.getLogger(__name__)


@dataclass
class FirestoreConfig:
    """Configuration for Firestore client.

    Attributes:
        project_id: GCP project ID (None for default)
        database: Firestore database name (None for default database)
    """

    project_id: str | None = None
    database: str | None = None


class TrackerFirestoreClient:
    """Client for persisting tracker sessions to Firestore.

    Document structure per session:
        sessions/{session_id}: { form, personal_target, history: [...],
                                 week: [...], achievements, updated_at }
    """

    def __init__(self, config: FirestoreConfig | None = None) -> None:
        """Initialize Firestore client.

        Args:
            config: Firestore configuration
        """
        self.config = config or FirestoreConfig()
        self._client: firestore.Client | None = None

    @property
    def client(self) -> firestore.Client:
        """Lazy initialization of Firestore client."""
        if self._client is None:
            kwargs: dict[str, Any] = {}
            if self.config.project_id:
                kwargs["project"] = self.config.project_id
            if self.config.database:
                kwargs["database"] = self.config.database
            self._client = firestore.Client(**kwargs)
        return self._client

    def _session_ref(self, session_id: str) -> firestore.DocumentReference:
        """Get reference to session document."""
        return self.client.collection("sessions").document(session_id)

    def get_state(self, session_id: str) -> TrackerState | None:
        """Fetch a session's tracker state.

        Args:
            session_id: The session's ID

        Returns:
            TrackerState if found and readable, None otherwise
        """
        logger.debug("Fetching state for session: %s", session_id[:8])
        try:
            doc = self._session_ref(session_id).get()
            if not doc.exists:
                return None
            data = doc.to_dict()
            data.pop("updated_at", None)
            return TrackerState.model_validate(data)
        except ValidationError as e:
            logger.error("Stored state is invalid for %s: %s", session_id[:8], str(e))
            return None
        except Exception as e:
            logger.error("Failed to fetch state: %s", str(e))
            return None

    def save_state(self, session_id: str, state: TrackerState) -> bool:
        """Save a session's tracker state.

        Args:
            session_id: The session's ID
            state: State to save

        Returns:
            True if successful
        """
        logger.info("Saving state for session: %s", session_id[:8])
        try:
            # Dates are stored as ISO strings
            data = state.model_dump(mode="json")
            data["updated_at"] = datetime.utcnow()
            self._session_ref(session_id).set(data)
            return True
        except Exception as e:
            logger.error("Failed to save state: %s", str(e))
            return False

    def delete_state(self, session_id: str) -> bool:
        """Delete a session's tracker state.

        Args:
            session_id: The session's ID

        Returns:
            True if successful
        """
        logger.info("Deleting state for session: %s", session_id[:8])
        try:
            self._session_ref(session_id).delete()
            return True
        except Exception as e:
            logger.error("Failed to delete state: %s", str(e))
            return False
