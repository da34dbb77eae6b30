"""
In-process publish/subscribe for upstream reports.
"""

import logging
from collections import defaultdict
from typing import Any, Callable, Dict, List

from models.check_result import CheckReport

UPSTREAM_REPORT = 'upstream-report'
UPSTREAM_REPORTS = 'upstream-reports'

Handler = Callable[[Any], None]


class EventBus:
    """Synchronous topic-based event bus.

    Handlers run in registration order. A handler that raises is logged and
    skipped; delivery to the remaining handlers continues.
    """

    def __init__(self):
        self._handlers: Dict[str, List[Handler]] = defaultdict(list)
        self.logger = logging.getLogger('EventBus')

    def subscribe(self, topic: str, handler: Handler) -> None:
        self._handlers[topic].append(handler)

    def unsubscribe(self, topic: str, handler: Handler) -> None:
        if handler in self._handlers.get(topic, []):
            self._handlers[topic].remove(handler)

    def publish(self, topic: str, payload: Any) -> None:
        for handler in list(self._handlers.get(topic, [])):
            try:
                handler(payload)
            except Exception as e:
                self.logger.error(
                    f"Subscriber {getattr(handler, '__name__', handler)!r} "
                    f"failed on '{topic}': {e}",
                    exc_info=True
                )


class ReportEmitter:
    """Publishes individual check reports and the per-cycle batch."""

    def __init__(self, bus: EventBus = None):
        self.bus = bus or EventBus()

    def emit_report(self, report: CheckReport) -> None:
        self.bus.publish(UPSTREAM_REPORT, report)

    def emit_reports(self, reports: List[CheckReport]) -> None:
        self.bus.publish(UPSTREAM_REPORTS, reports)

    def on_report(self, handler: Callable[[CheckReport], None]) -> None:
        self.bus.subscribe(UPSTREAM_REPORT, handler)

    def on_reports(self, handler: Callable[[List[CheckReport]], None]) -> None:
        self.bus.subscribe(UPSTREAM_REPORTS, handler)
