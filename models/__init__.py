"""
Models package - Data classes for the application.
"""

from models.entity import RepoRef, TrackedEntity, UpstreamConfig, VersionResult
from models.check_result import CheckReport

__all__ = ['RepoRef', 'TrackedEntity', 'UpstreamConfig', 'VersionResult', 'CheckReport']
