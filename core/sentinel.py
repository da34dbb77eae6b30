"""
Sentinel - Checks tracked entities against their upstream repositories.
"""

import csv
import os
from datetime import datetime, timezone
from threading import Lock
from typing import Optional, List, Dict
import logging

from core.events import ReportEmitter
from core.registry import EntityRegistry
from core.store import EntityStore, StateManager
from handlers.base_handler import BaseHandler
from handlers.github_handler import GitHubHandler
from models.check_result import CheckReport
from models.entity import RepoRef, TrackedEntity, VersionResult
from utils.throttle import Throttle

DEFAULT_CHECK_DELAY = 1.5  # Seconds between two upstream checks


class UpstreamSentinel:
    """Runs upstream checks over every tracked entity of a store."""

    def __init__(
        self,
        store: EntityStore,
        handler: BaseHandler,
        emitter: ReportEmitter = None,
        check_delay: float = DEFAULT_CHECK_DELAY,
        throttle: Throttle = None
    ):
        """
        Initialize the sentinel.

        Args:
            store: Store providing tracked entities and persisting updates
            handler: Provider handler resolving latest versions
            emitter: Report emitter, a private bus is used when None
            check_delay: Seconds to wait between two consecutive checks
            throttle: Throttle gate, built from check_delay when None
        """
        self.store = store
        self.handler = handler
        self.emitter = emitter or ReportEmitter()
        self.throttle = throttle or Throttle(check_delay)
        self.registry: Optional[EntityRegistry] = None
        self.logger = logging.getLogger('Sentinel')
        self._cycle_lock = Lock()

    @classmethod
    def from_config(
        cls,
        config_path: str = None,
        settings_path: str = None,
        state_file: str = None,
        emitter: ReportEmitter = None
    ) -> 'UpstreamSentinel':
        """
        Build a sentinel from YAML configuration files.

        Args:
            config_path: Path to entities.yaml
            settings_path: Path to settings.yaml
            state_file: Path to state JSON file, overrides `state.file`
            emitter: Report emitter
        """
        registry = EntityRegistry(config_path, settings_path)
        settings = registry.get_settings()
        upstream_settings = registry.get_upstream_settings()

        if state_file is None:
            state_file = (settings.get('state') or {}).get('file')
            if state_file and not os.path.isabs(state_file):
                state_file = os.path.join(registry.base_dir, state_file)

        store = StateManager(registry.get_all_entities(), state_file)
        handler = GitHubHandler(upstream_settings.get('token'), settings)

        sentinel = cls(
            store,
            handler,
            emitter=emitter,
            check_delay=upstream_settings.get('check_delay', DEFAULT_CHECK_DELAY)
        )
        sentinel.registry = registry
        return sentinel

    def check_entity(self, entity: TrackedEntity) -> Optional[CheckReport]:
        """
        Check one entity against its upstream repository.

        Args:
            entity: Entity with upstream tracking configured

        Returns:
            CheckReport, or None if the entity has no usable upstream repo
        """
        upstream = entity.upstream
        if not upstream or not upstream.repo:
            return None

        try:
            repo_ref = RepoRef.parse(upstream.repo)
        except ValueError as e:
            self.logger.warning(f"Skipping {entity.display_name}: {e}")
            return None

        self.logger.debug(f"Checking upstream {repo_ref} for {entity.display_name}")
        previous_version = upstream.latest_version

        try:
            result = self.handler.resolve_latest_version(
                repo_ref.owner,
                repo_ref.repo,
                upstream.prerelease
            )
        except Exception as e:
            self.logger.warning(f"Upstream check failed for {entity.display_name} ({repo_ref}): {e}")
            upstream.error = str(e)
            upstream.checked_at = datetime.now(timezone.utc)
            self.store.update_entity(entity)
            return CheckReport(
                entity=entity,
                changed=False,
                previous_version=previous_version,
                error=str(e)
            )

        upstream.latest_version = result.tag
        upstream.latest_url = result.url
        upstream.checked_at = datetime.now(timezone.utc)
        upstream.error = None
        self.store.update_entity(entity)

        changed = bool(previous_version) and previous_version != result.tag
        if changed:
            self.logger.info(
                f"Upstream update for {entity.display_name}: {previous_version} -> {result.tag}"
            )
        else:
            self.logger.debug(f"Upstream latest for {entity.display_name}: {result.tag}")

        return CheckReport(entity=entity, changed=changed, previous_version=previous_version)

    def run_cycle(self) -> List[CheckReport]:
        """
        Check all tracked entities, one at a time.

        Returns:
            List of CheckReport objects; entities with an unusable repo are left out
        """
        if not self._cycle_lock.acquire(blocking=False):
            self.logger.warning("Upstream check already running, skipping this cycle")
            return []

        try:
            return self._run_cycle()
        finally:
            self._cycle_lock.release()

    def _run_cycle(self) -> List[CheckReport]:
        entities = [entity for entity in self.store.get_tracked_entities() if entity.is_tracked]

        if not entities:
            self.logger.debug("No entities with upstream tracking configured")
            return []

        self.logger.info(f"Checking upstream for {len(entities)} entit{'y' if len(entities) == 1 else 'ies'}")

        reports = []
        for entity in self.throttle.iterate(entities):
            report = self.check_entity(entity)
            if report:
                reports.append(report)
                self.emitter.emit_report(report)

        if reports:
            self.emitter.emit_reports(reports)

        updates_found = summarize(reports)['updated']
        if updates_found:
            self.logger.info(f"Found {updates_found} upstream update(s)")
        else:
            self.logger.info("All upstreams are up to date")

        return reports

    def export_to_csv(
        self,
        reports: List[CheckReport],
        output_path: str = None
    ) -> str:
        """
        Export reports to CSV file.

        Args:
            reports: List of CheckReport objects
            output_path: Output CSV file path

        Returns:
            Path to the created CSV file
        """
        if output_path is None:
            output_path = 'upstream_report.csv'

        directory = os.path.dirname(output_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        fieldnames = [
            'id',
            'name',
            'repo',
            'current_version',
            'previous_version',
            'latest_version',
            'latest_url',
            'changed',
            'behind',
            'status',
            'error',
            'check_time',
        ]

        with open(output_path, 'w', newline='', encoding='utf-8') as f:
            writer = csv.DictWriter(f, fieldnames=fieldnames)
            writer.writeheader()

            for report in reports:
                row = report.to_dict()
                writer.writerow({key: '' if row[key] is None else row[key] for key in fieldnames})

        self.logger.info(f"Reports exported to: {output_path}")
        return output_path


def summarize(reports: List[CheckReport]) -> Dict[str, int]:
    """Count reports per outcome."""
    updated = sum(1 for r in reports if r.changed)
    errors = sum(1 for r in reports if r.error)
    return {
        'total': len(reports),
        'updated': updated,
        'unchanged': len(reports) - updated - errors,
        'errors': errors,
    }


def check_repository(
    repo: str,
    include_prereleases: bool = False,
    token: str = None,
    settings: Dict = None
) -> VersionResult:
    """
    Convenience function to resolve the latest version of one repository.

    Args:
        repo: Repository as "owner/repo"
        include_prereleases: Whether a prerelease may be reported as latest
        token: Optional GitHub token
        settings: Application settings (API/web URLs, HTTP timeout, user agent)

    Returns:
        VersionResult object
    """
    repo_ref = RepoRef.parse(repo)
    handler = GitHubHandler(
        token or os.getenv('UPSTREAM_TOKEN') or os.getenv('GITHUB_TOKEN'),
        settings
    )
    return handler.resolve_latest_version(repo_ref.owner, repo_ref.repo, include_prereleases)
