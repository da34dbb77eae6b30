"""
GitHub REST API handler.
Resolves the latest release of a repository, falling back to tags.
"""

import requests
from typing import Optional, Dict, Any, List

from .base_handler import (
    BaseHandler,
    UpstreamNotFound,
    UpstreamRateLimited,
    UpstreamRequestError,
)
from models.entity import VersionResult


class GitHubHandler(BaseHandler):
    """Handler for repositories hosted on GitHub."""

    API_URL = "https://api.github.com"
    WEB_URL = "https://github.com"
    REQUEST_TIMEOUT = 10
    RELEASES_PAGE_SIZE = 5
    RATE_LIMIT_WARNING = 10  # Warn below this many remaining requests

    def __init__(self, token: Optional[str] = None, settings: Dict[str, Any] = None):
        super().__init__(token, settings)

        upstream_settings = self.settings.get('upstream', {})
        http_settings = self.settings.get('http', {})

        self.api_url = upstream_settings.get('api_url', self.API_URL).rstrip('/')
        self.web_url = upstream_settings.get('web_url', self.WEB_URL).rstrip('/')
        self.rate_limit_warning = upstream_settings.get(
            'rate_limit_warning',
            self.RATE_LIMIT_WARNING
        )
        self.timeout = http_settings.get('timeout', self.REQUEST_TIMEOUT)
        self.user_agent = http_settings.get('user_agent', 'Upstream-Sentinel/1.0')

        # Remaining requests as last reported by GitHub, None until known
        self.rate_limit_remaining: Optional[int] = None

    def get_provider_name(self) -> str:
        return "github"

    def _get_headers(self) -> Dict[str, str]:
        headers = {
            'Accept': 'application/vnd.github.v3+json',
            'User-Agent': self.user_agent,
        }
        if self.token:
            headers['Authorization'] = f"Bearer {self.token}"
        return headers

    def _track_rate_limit(self, response: requests.Response) -> None:
        """Record the remaining quota if the response carries it."""
        remaining = response.headers.get('X-RateLimit-Remaining')
        if remaining is None:
            return

        try:
            self.rate_limit_remaining = int(remaining)
        except ValueError:
            self.logger.debug(f"Ignoring malformed X-RateLimit-Remaining: {remaining}")
            return

        if self.rate_limit_remaining < self.rate_limit_warning:
            self.logger.warning(
                f"GitHub API rate limit low: {self.rate_limit_remaining} requests remaining"
            )

    def _get(self, path: str, what: str, owner: str, repo: str, params: Dict[str, Any] = None):
        """
        Send a GET request to the GitHub API.

        Returns:
            The response, or None if GitHub answered 404

        Raises:
            UpstreamRateLimited: on 403 or 429
            UpstreamRequestError: on any other failure
        """
        url = f"{self.api_url}{path}"
        self.logger.debug(f"GET {url} {params or ''}")

        try:
            response = requests.get(
                url,
                headers=self._get_headers(),
                params=params,
                timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            raise UpstreamRequestError(
                f"Failed to fetch {what} for {owner}/{repo}: {e}"
            ) from e

        self._track_rate_limit(response)

        if response.status_code == 404:
            return None

        if response.status_code in (403, 429):
            self.logger.warning(
                f"GitHub API rate limited for {owner}/{repo}. "
                "Consider setting UPSTREAM_TOKEN."
            )
            raise UpstreamRateLimited(
                "GitHub API rate limited; configure an upstream token "
                "(UPSTREAM_TOKEN) to raise the limit"
            )

        try:
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            raise UpstreamRequestError(
                f"Failed to fetch {what} for {owner}/{repo}: {e}"
            ) from e

        return response

    def _json(self, response: requests.Response, what: str, owner: str, repo: str) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamRequestError(
                f"Failed to fetch {what} for {owner}/{repo}: invalid JSON response"
            ) from e

    def get_latest_release(
        self,
        owner: str,
        repo: str,
        include_prereleases: bool = False
    ) -> Optional[VersionResult]:
        """
        Get the latest release for a repository.

        Returns:
            VersionResult, or None if the repository has no release
        """
        if include_prereleases:
            # Releases are listed newest first, prereleases included
            response = self._get(
                f"/repos/{owner}/{repo}/releases",
                'releases', owner, repo,
                params={'per_page': self.RELEASES_PAGE_SIZE}
            )
            releases: List[Dict[str, Any]] = (
                self._json(response, 'releases', owner, repo) if response is not None else []
            )
            if not releases:
                self.logger.debug(f"No releases found for {owner}/{repo}, falling back to tags")
                return None
            return self._release_version(releases[0], owner, repo)

        response = self._get(f"/repos/{owner}/{repo}/releases/latest", 'releases', owner, repo)
        if response is None:
            self.logger.debug(f"No releases found for {owner}/{repo}, falling back to tags")
            return None

        return self._release_version(self._json(response, 'releases', owner, repo), owner, repo)

    def _release_version(self, release: Any, owner: str, repo: str) -> VersionResult:
        try:
            return VersionResult(tag=release['tag_name'], url=release['html_url'])
        except (KeyError, TypeError) as e:
            raise UpstreamRequestError(
                f"Failed to fetch releases for {owner}/{repo}: unexpected release payload"
            ) from e

    def get_latest_tag(self, owner: str, repo: str) -> Optional[VersionResult]:
        """
        Get the most recent tag for a repository.

        Returns:
            VersionResult with a synthesized release URL, or None if there is no tag
        """
        response = self._get(
            f"/repos/{owner}/{repo}/tags",
            'tags', owner, repo,
            params={'per_page': 1}
        )
        if response is None:
            raise UpstreamNotFound(f"Repository {owner}/{repo} not found")

        tags = self._json(response, 'tags', owner, repo)
        if not tags:
            return None

        try:
            name = tags[0]['name']
        except (KeyError, TypeError) as e:
            raise UpstreamRequestError(
                f"Failed to fetch tags for {owner}/{repo}: unexpected tag payload"
            ) from e

        return VersionResult(
            tag=name,
            url=f"{self.web_url}/{owner}/{repo}/releases/tag/{name}"
        )

    def resolve_latest_version(
        self,
        owner: str,
        repo: str,
        include_prereleases: bool = False
    ) -> VersionResult:
        release = self.get_latest_release(owner, repo, include_prereleases)
        if release:
            return release

        tag = self.get_latest_tag(owner, repo)
        if tag:
            return tag

        raise UpstreamNotFound(f"No releases or tags found for {owner}/{repo}")
