"""
Abstract base handler for upstream version sources.
"""

from abc import ABC, abstractmethod
from typing import Optional, Dict, Any
import logging

from models.entity import VersionResult


class UpstreamError(Exception):
    """Base class for failures while resolving an upstream version."""


class UpstreamNotFound(UpstreamError):
    """Raised when a repository has no release or tag to report."""


class UpstreamRateLimited(UpstreamError):
    """Raised when the provider refuses a request because of its rate limit."""


class UpstreamRequestError(UpstreamError):
    """Raised for transport, HTTP and parse failures not otherwise classified."""


class BaseHandler(ABC):
    """Abstract base class for repository-hosting providers."""

    def __init__(self, token: Optional[str] = None, settings: Dict[str, Any] = None):
        """
        Initialize handler.

        Args:
            token: Optional API token; anonymous requests when None
            settings: Application settings dictionary
        """
        self.token = token
        self.settings = settings or {}
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def resolve_latest_version(
        self,
        owner: str,
        repo: str,
        include_prereleases: bool = False
    ) -> VersionResult:
        """
        Resolve the latest version of a repository.

        Args:
            owner: Repository owner
            repo: Repository name
            include_prereleases: Whether a prerelease may be reported as latest

        Returns:
            VersionResult for the newest release, or the newest tag as fallback

        Raises:
            UpstreamNotFound: if neither a release nor a tag exists
            UpstreamRateLimited: if the provider throttled the request
            UpstreamRequestError: for any other failure
        """
        pass

    @abstractmethod
    def get_provider_name(self) -> str:
        """
        Get the name of the provider.

        Returns:
            String identifier for this provider
        """
        pass

    @property
    def authenticated(self) -> bool:
        return bool(self.token)
