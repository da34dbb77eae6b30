"""
Upstream Sentinel - Upstream Release Tracking Agent

Periodically asks GitHub for the latest release (or tag) of the upstream
repository behind each tracked container, fork or service, records what it
finds and publishes one report per entity plus one batch per cycle.
"""

__version__ = "1.0.0"
