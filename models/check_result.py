"""
Check Report model.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from models.entity import TrackedEntity


@dataclass
class CheckReport:
    """Represents the result of checking one entity's upstream repository."""

    entity: TrackedEntity
    changed: bool = False
    previous_version: Optional[str] = None
    error: Optional[str] = None
    check_time: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __str__(self) -> str:
        status = "UPDATED" if self.changed else "NO CHANGE"
        if self.error:
            status = f"ERROR: {self.error}"

        upstream = self.entity.upstream
        return (
            f"[{status}] {self.entity.display_name} ({upstream.repo if upstream else '-'})\n"
            f"  Latest:   {self.latest_version}\n"
            f"  Previous: {self.previous_version}"
        )

    @property
    def latest_version(self) -> Optional[str]:
        upstream = self.entity.upstream
        return upstream.latest_version if upstream else None

    @property
    def is_success(self) -> bool:
        """Check if the operation was successful."""
        return self.error is None

    @property
    def status(self) -> str:
        """Get status string."""
        if self.error:
            return 'error'
        return 'updated' if self.changed else 'unchanged'

    @property
    def is_behind(self) -> bool:
        """True when the artifact is based on an older version than the latest known one."""
        upstream = self.entity.upstream
        if not upstream or not upstream.current_version or not upstream.latest_version:
            return False
        return upstream.current_version != upstream.latest_version

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        upstream = self.entity.upstream
        return {
            'id': self.entity.id,
            'name': self.entity.name,
            'repo': upstream.repo if upstream else None,
            'current_version': upstream.current_version if upstream else None,
            'previous_version': self.previous_version,
            'latest_version': self.latest_version,
            'latest_url': upstream.latest_url if upstream else None,
            'changed': self.changed,
            'behind': self.is_behind,
            'status': self.status,
            'error': self.error,
            'check_time': self.check_time.isoformat() if self.check_time else None,
        }
