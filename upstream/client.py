"""Outbound HTTP client for the search provider, arbitrary pages and GitHub.

No URL validation is performed on ``fetch_page``: whatever the caller supplies
is requested as-is, including private network addresses.
"""

from __future__ import annotations

import asyncio
from typing import Any

import httpx

from utils.logger import get_logger

logger = get_logger(__name__)

BRAVE_SEARCH_URL = "https://api.search.brave.com/res/v1/web/search"
GITHUB_API_URL = "https://api.github.com"
FETCH_USER_AGENT = "RyanClaw/1.0"
GITHUB_USER_AGENT = "RyanClaw"
DEFAULT_SEARCH_COUNT = 5
DEFAULT_COMMIT_LIMIT = 5


class UpstreamError(Exception):
    """Raised when an upstream call fails or returns an unusable body."""

    def __init__(self, message: str, upstream: str, status_code: int | None = None):
        super().__init__(message)
        self.upstream = upstream
        self.status_code = status_code


class UpstreamClient:
    """
    Thin async wrapper around the three upstream services.

    One ``httpx.AsyncClient`` is shared by every request; it carries no
    per-request state.
    """

    def __init__(
        self,
        brave_api_key: str = "",
        timeout_s: float | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        """
        Initialize the upstream client.

        Args:
            brave_api_key: Search credential; an empty key is still sent
            timeout_s: Optional timeout for every call, None waits forever
            http_client: Pre-built client, mainly for tests
        """
        self.brave_api_key = brave_api_key
        self._client = http_client or httpx.AsyncClient(timeout=timeout_s)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def search(self, query: str, count: int = DEFAULT_SEARCH_COUNT) -> dict[str, Any]:
        """
        Run a web search.

        Returns:
            Raw search provider JSON

        Raises:
            UpstreamError: On network failure, non-2xx status or non-JSON body
        """
        logger.info(f"Search: '{query}' (count={count})")
        try:
            response = await self._client.get(
                BRAVE_SEARCH_URL,
                params={"q": query, "count": count},
                headers={
                    "Accept": "application/json",
                    "X-Subscription-Token": self.brave_api_key,
                },
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise UpstreamError(
                f"Search provider returned {e.response.status_code}",
                upstream="search",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise UpstreamError(f"Search request failed: {e}", upstream="search") from e

        return self._json(response, upstream="search")

    async def fetch_page(self, url: str) -> str:
        """
        Fetch an arbitrary URL and return its body as text.

        The status code and content type are not inspected.

        Raises:
            UpstreamError: On network failure or an unusable URL
        """
        logger.info(f"Fetch: {url}")
        try:
            response = await self._client.get(url, headers={"User-Agent": FETCH_USER_AGENT})
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise UpstreamError(f"Fetch failed: {e}", upstream="fetch") from e
        return response.text

    async def get_repo(self, repo: str) -> Any:
        return await self._github(f"/repos/{repo}")

    async def get_languages(self, repo: str) -> Any:
        return await self._github(f"/repos/{repo}/languages")

    async def get_recent_commits(self, repo: str, limit: int = DEFAULT_COMMIT_LIMIT) -> Any:
        return await self._github(f"/repos/{repo}/commits", params={"per_page": limit})

    async def analyze_repo(self, repo: str) -> tuple[Any, Any, Any]:
        """
        Fetch metadata, languages and recent commits concurrently.

        All three calls are awaited to completion before the first failure,
        if any, is re-raised.

        Returns:
            Tuple of (repo_data, lang_data, commits_data) raw bodies
        """
        results = await asyncio.gather(
            self.get_repo(repo),
            self.get_languages(repo),
            self.get_recent_commits(repo),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result
        repo_data, lang_data, commits_data = results
        return repo_data, lang_data, commits_data

    async def _github(self, path: str, params: dict[str, Any] | None = None) -> Any:
        # Error bodies such as {"message": "Not Found"} are returned like any other body
        try:
            response = await self._client.get(
                f"{GITHUB_API_URL}{path}",
                params=params,
                headers={"User-Agent": GITHUB_USER_AGENT},
            )
        except httpx.HTTPError as e:
            raise UpstreamError(f"GitHub request failed: {e}", upstream="github") from e

        if response.is_error:
            logger.warning(
                "GitHub returned an error status",
                extra={"extra_fields": {"path": path, "status_code": response.status_code}},
            )
        return self._json(response, upstream="github")

    @staticmethod
    def _json(response: httpx.Response, upstream: str) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError(
                f"{upstream} returned a non-JSON body",
                upstream=upstream,
                status_code=response.status_code,
            ) from e
