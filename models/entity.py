"""
Tracked entity models.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from dateutil.parser import isoparse


@dataclass(frozen=True)
class RepoRef:
    """Parsed "owner/repo" reference."""

    owner: str
    repo: str

    @classmethod
    def parse(cls, value: Optional[str]) -> 'RepoRef':
        """
        Parse an "owner/repo" string.

        Raises:
            ValueError: if the value is not exactly two non-empty segments
        """
        if not isinstance(value, str):
            raise ValueError(
                f'Invalid upstream repo format: {value!r} (expected "owner/repo")'
            )

        parts = value.split('/')
        if len(parts) != 2 or not parts[0] or not parts[1]:
            raise ValueError(
                f'Invalid upstream repo format: "{value}" (expected "owner/repo")'
            )
        return cls(owner=parts[0], repo=parts[1])

    def __str__(self) -> str:
        return f"{self.owner}/{self.repo}"


@dataclass(frozen=True)
class VersionResult:
    """Latest version of a repository, from a release or a tag."""

    tag: str
    url: str


@dataclass
class UpstreamConfig:
    """Upstream tracking configuration and last known state of an entity."""

    repo: str
    prerelease: bool = False
    current_version: Optional[str] = None
    latest_version: Optional[str] = None
    latest_url: Optional[str] = None
    checked_at: Optional[datetime] = None
    error: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> 'UpstreamConfig':
        """Create UpstreamConfig from a configuration or state dictionary."""
        checked_at = data.get('checked_at')
        if isinstance(checked_at, str):
            checked_at = isoparse(checked_at)

        return cls(
            repo=data.get('repo', ''),
            prerelease=_as_bool(data.get('prerelease', False)),
            current_version=data.get('version', data.get('current_version')),
            latest_version=data.get('latest_version'),
            latest_url=data.get('latest_url'),
            checked_at=checked_at,
            error=data.get('error'),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            'repo': self.repo,
            'prerelease': self.prerelease,
            'version': self.current_version,
            'latest_version': self.latest_version,
            'latest_url': self.latest_url,
            'checked_at': self.checked_at.isoformat() if self.checked_at else None,
            'error': self.error,
        }


@dataclass
class TrackedEntity:
    """An artifact (container, fork, service) whose upstream may be tracked."""

    id: str
    name: Optional[str] = None
    upstream: Optional[UpstreamConfig] = None

    @property
    def is_tracked(self) -> bool:
        return self.upstream is not None and bool(self.upstream.repo)

    @property
    def display_name(self) -> str:
        return self.name or self.id

    @classmethod
    def from_dict(cls, entity_id: str, data: dict) -> 'TrackedEntity':
        """Create TrackedEntity from configuration dictionary."""
        upstream = data.get('upstream')
        return cls(
            id=entity_id,
            name=data.get('name', entity_id),
            upstream=UpstreamConfig.from_dict(upstream) if upstream else None,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            'id': self.id,
            'name': self.name,
            'upstream': self.upstream.to_dict() if self.upstream else None,
        }


def _as_bool(value) -> bool:
    # YAML gives bools, environment-style config gives strings
    if isinstance(value, str):
        return value.strip().lower() in ('true', 'yes', '1')
    return bool(value)
