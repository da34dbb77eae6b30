"""
Handlers package - Contains the upstream provider implementations.
"""

from handlers.base_handler import (
    BaseHandler,
    UpstreamError,
    UpstreamNotFound,
    UpstreamRateLimited,
    UpstreamRequestError,
)
from handlers.github_handler import GitHubHandler

__all__ = [
    'BaseHandler',
    'GitHubHandler',
    'UpstreamError',
    'UpstreamNotFound',
    'UpstreamRateLimited',
    'UpstreamRequestError',
]
