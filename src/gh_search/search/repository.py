"""Repositories that run a search query and deliver a SearchResponse.

A repository hands back a :class:`concurrent.futures.Future` that resolves
to exactly one :class:`SearchResponse` or fails. A callback-based entry
point is built on top of it for callers that prefer push delivery.
"""

import asyncio
import logging
import random
import re
from abc import ABC, abstractmethod
from concurrent.futures import CancelledError, Future, ThreadPoolExecutor
from typing import Any, Protocol

from gh_search.github.auth import GitHubAuth
from gh_search.github.http import GitHubClient, GitHubHTTPError
from gh_search.search.models import RepositoryOwner, SearchResponse, SearchResult

logger = logging.getLogger(__name__)

SEARCH_PATH = "/search/repositories"


class RepositoryCallback(Protocol):
    """Receiver for :meth:`SearchRepository.search_repository_callback`."""

    def handle_response(self, response: SearchResponse) -> None: ...

    def handle_error(self, error: BaseException) -> None: ...


class SearchRepository(ABC):
    """Source of repository search results."""

    @abstractmethod
    def search_repository(self, query: str) -> "Future[SearchResponse]":
        """Start a search.

        Args:
            query: GitHub search query, e.g. ``"httpx language:python"``.

        Returns:
            Future resolving to the parsed response or failing with the error.
        """

    def search_repository_callback(self, query: str, callback: RepositoryCallback) -> None:
        """Start a search and push the outcome to ``callback``.

        Args:
            query: GitHub search query.
            callback: Receives the response or the error, on whichever
                thread completes the search.
        """

        def deliver(future: "Future[SearchResponse]") -> None:
            try:
                response = future.result()
            except (Exception, CancelledError) as e:
                callback.handle_error(e)
            else:
                callback.handle_response(response)

        self.search_repository(query).add_done_callback(deliver)


class GitHubSearchRepository(SearchRepository):
    """Searches ``/search/repositories`` on the GitHub API.

    Each query runs on a worker thread inside its own event loop with a
    fresh :class:`GitHubClient`. Only the first page of results is fetched.
    """

    def __init__(
        self,
        auth: GitHubAuth | None = None,
        base_url: str = GitHubClient.BASE_URL,
        timeout: float = GitHubClient.DEFAULT_TIMEOUT,
        per_page: int = 30,
        sort: str | None = None,
        order: str = "desc",
        max_workers: int = 2,
    ) -> None:
        self._auth = auth or GitHubAuth()
        self._base_url = base_url
        self._timeout = timeout
        self._per_page = per_page
        self._sort = sort
        self._order = order
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="gh-search-repo",
        )

    def _params(self, query: str) -> dict[str, Any]:
        params: dict[str, Any] = {"q": query, "per_page": self._per_page}
        if self._sort:
            params["sort"] = self._sort
            params["order"] = self._order
        return params

    async def fetch(self, query: str) -> SearchResponse:
        """Run one search request.

        Args:
            query: GitHub search query.

        Returns:
            Parsed search response.

        Raises:
            GitHubHTTPError: On transport failure, or without a message when
                the response is unsuccessful or has no JSON object body.
            RateLimitExceeded: If the rate limit is exhausted.
            pydantic.ValidationError: If the body does not match the model.
        """
        async with GitHubClient(
            auth=self._auth,
            timeout=self._timeout,
            base_url=self._base_url,
        ) as client:
            response = await client.get(SEARCH_PATH, params=self._params(query))

        if not response.is_success or not isinstance(response.data, dict):
            logger.warning(
                "Search for %r returned status %d with %s body",
                query,
                response.status_code,
                type(response.data).__name__,
            )
            raise GitHubHTTPError()

        result = SearchResponse.model_validate(response.data)
        logger.debug(
            "Search for %r matched %s repositories",
            query,
            result.total_count,
        )
        return result

    def _run(self, query: str) -> SearchResponse:
        return asyncio.run(self.fetch(query))

    def search_repository(self, query: str) -> "Future[SearchResponse]":
        return self._executor.submit(self._run, query)

    def close(self) -> None:
        """Wait for running searches and release the worker threads."""
        self._executor.shutdown(wait=True)


class FakeSearchRepository(SearchRepository):
    """Offline repository returning generated results.

    Results are deterministic for a given query and resolve immediately.
    """

    def __init__(self, per_page: int = 30, owner: str = "fake-owner") -> None:
        self._per_page = per_page
        self._owner = owner

    def _slug(self, query: str) -> str:
        return re.sub(r"[^a-z0-9]+", "-", query.lower()).strip("-") or "repo"

    def build_response(self, query: str) -> SearchResponse:
        """Generate the response returned for ``query``."""
        rng = random.Random(query)
        total_count = rng.randint(0, 200)
        slug = self._slug(query)
        items = [
            SearchResult(
                id=index,
                name=f"{slug}-{index}",
                full_name=f"{self._owner}/{slug}-{index}",
                owner=RepositoryOwner(login=self._owner),
                description=f"Generated result {index} for {query!r}",
                html_url=f"https://github.com/{self._owner}/{slug}-{index}",
                stargazers_count=rng.randint(0, 5000),
                forks_count=rng.randint(0, 500),
            )
            for index in range(1, min(total_count, self._per_page) + 1)
        ]
        return SearchResponse(total_count=total_count, items=items)

    def search_repository(self, query: str) -> "Future[SearchResponse]":
        future: Future[SearchResponse] = Future()
        future.set_result(self.build_response(query))
        return future
