"""
Entity store - Holds tracked entities and persists their upstream state.
"""

import os
import json
import logging
from typing import Dict, Any, Iterable, List, Optional, Protocol
from threading import Lock

from models.entity import TrackedEntity, UpstreamConfig


class EntityStore(Protocol):
    """Interface the sentinel needs from an entity store."""

    def get_tracked_entities(self) -> List[TrackedEntity]: ...

    def update_entity(self, entity: TrackedEntity) -> None: ...


# Fields owned by the checker; everything else comes from configuration
STATE_FIELDS = ('latest_version', 'latest_url', 'checked_at', 'error')


class StateManager:
    """In-memory entity store backed by a JSON state file."""

    def __init__(self, entities: Iterable[TrackedEntity] = (), state_file: str = None):
        """
        Initialize state manager.

        Args:
            entities: Configured entities
            state_file: Path to state JSON file, None to keep state in memory only
        """
        self.state_file = state_file
        self.logger = logging.getLogger('StateManager')
        self._lock = Lock()
        self._entities: Dict[str, TrackedEntity] = {}

        saved = self._load_state()
        for entity in entities:
            self._restore(entity, saved.get(entity.id))
            self._entities[entity.id] = entity

    def _load_state(self) -> Dict[str, Any]:
        """Load state from file."""
        if not self.state_file:
            return {}
        try:
            if os.path.exists(self.state_file):
                with open(self.state_file, 'r', encoding='utf-8') as f:
                    state = json.load(f)
                if isinstance(state, dict):
                    return state
                self.logger.warning("Ignoring state file: expected a JSON object")
        except (json.JSONDecodeError, IOError) as e:
            self.logger.warning(f"Could not load state file: {e}")
        return {}

    def _save_state(self) -> None:
        """Save state to file."""
        if not self.state_file:
            return

        state = {
            entity_id: {
                key: value
                for key, value in entity.upstream.to_dict().items()
                if key in STATE_FIELDS
            }
            for entity_id, entity in self._entities.items()
            if entity.upstream
        }

        try:
            directory = os.path.dirname(self.state_file)
            if directory:
                os.makedirs(directory, exist_ok=True)

            with open(self.state_file, 'w', encoding='utf-8') as f:
                json.dump(state, f, indent=2, default=str)
        except IOError as e:
            self.logger.error(f"Error saving state file: {e}")

    def _restore(self, entity: TrackedEntity, saved: Optional[Dict[str, Any]]) -> None:
        """Merge persisted upstream state into a freshly configured entity."""
        if not saved or not entity.upstream:
            return

        try:
            restored = UpstreamConfig.from_dict(saved)
        except (ValueError, TypeError, AttributeError) as e:
            self.logger.warning(f"Ignoring saved state for {entity.id}: {e}")
            return

        for key in STATE_FIELDS:
            setattr(entity.upstream, key, getattr(restored, key))

    def get_tracked_entities(self) -> List[TrackedEntity]:
        """Get all entities with upstream tracking configured."""
        with self._lock:
            return [entity for entity in self._entities.values() if entity.is_tracked]

    def get_entities(self) -> List[TrackedEntity]:
        """Get all entities."""
        with self._lock:
            return list(self._entities.values())

    def get_entity(self, entity_id: str) -> Optional[TrackedEntity]:
        with self._lock:
            return self._entities.get(entity_id)

    def update_entity(self, entity: TrackedEntity) -> None:
        """
        Insert or replace an entity and persist the state.

        Args:
            entity: Entity to store, keyed by its id
        """
        with self._lock:
            self._entities[entity.id] = entity
            self._save_state()
