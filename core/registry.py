"""
Entity Registry - Loads tracked entities and application settings.
"""

import logging
import os
import yaml
from dotenv import load_dotenv
from typing import Dict, Any, List, Optional

from models.entity import TrackedEntity

DEFAULT_CRON = '0 */12 * * *'  # Every 12 hours


class EntityRegistry:
    """Registry that manages entity configurations and application settings."""

    def __init__(self, config_path: str = None, settings_path: str = None, env_file: str = None):
        """
        Initialize the registry with configuration files.

        Args:
            config_path: Path to entities.yaml
            settings_path: Path to settings.yaml
            env_file: Path to a .env file, searched upwards from this package when None
        """
        self.base_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
        self.logger = logging.getLogger('EntityRegistry')
        self.env_file = env_file

        if config_path is None:
            config_path = os.path.join(self.base_dir, 'config', 'entities.yaml')
        if settings_path is None:
            settings_path = os.path.join(self.base_dir, 'config', 'settings.yaml')

        self.entities = self._load_config(config_path)
        self.settings = self._apply_environment(self._load_config(settings_path))

    def _load_config(self, path: str) -> Dict[str, Any]:
        """Load YAML configuration file."""
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return yaml.safe_load(f) or {}
        except FileNotFoundError:
            self.logger.warning(f"Config file not found: {path}")
            return {}
        except yaml.YAMLError as e:
            self.logger.error(f"Error parsing YAML file {path}: {e}")
            return {}

    def _apply_environment(self, settings: Dict[str, Any]) -> Dict[str, Any]:
        """Overlay UPSTREAM_* environment variables on the upstream section."""
        load_dotenv(self.env_file)
        upstream = dict(settings.get('upstream') or {})

        token = os.getenv('UPSTREAM_TOKEN') or os.getenv('GITHUB_TOKEN')
        if token:
            upstream['token'] = token

        cron = os.getenv('UPSTREAM_CRON')
        if cron:
            upstream['cron'] = cron

        upstream.setdefault('cron', DEFAULT_CRON)
        return {**settings, 'upstream': upstream}

    def get_entity(self, entity_id: str) -> Optional[TrackedEntity]:
        """
        Get entity by id.

        Args:
            entity_id: Entity identifier

        Returns:
            TrackedEntity or None
        """
        data = self.entities.get(entity_id)
        if data is None:
            return None
        return TrackedEntity.from_dict(entity_id, data or {})

    def get_all_entities(self) -> List[TrackedEntity]:
        """Get all configured entities."""
        return [
            TrackedEntity.from_dict(entity_id, data or {})
            for entity_id, data in self.entities.items()
        ]

    def list_entities(self) -> list:
        """List all entity ids."""
        return list(self.entities.keys())

    def get_settings(self) -> Dict[str, Any]:
        """Get application settings."""
        return self.settings

    def get_upstream_settings(self) -> Dict[str, Any]:
        """Get the `upstream` settings section."""
        return self.settings.get('upstream', {})
