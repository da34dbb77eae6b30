"""
Core package - Contains main business logic.
"""

from core.events import EventBus, ReportEmitter, UPSTREAM_REPORT, UPSTREAM_REPORTS
from core.registry import EntityRegistry
from core.store import EntityStore, StateManager
from core.sentinel import UpstreamSentinel, check_repository, summarize
from core.scheduler import UpstreamScheduler

__all__ = [
    'EventBus',
    'ReportEmitter',
    'UPSTREAM_REPORT',
    'UPSTREAM_REPORTS',
    'EntityRegistry',
    'EntityStore',
    'StateManager',
    'UpstreamSentinel',
    'UpstreamScheduler',
    'check_repository',
    'summarize',
]
