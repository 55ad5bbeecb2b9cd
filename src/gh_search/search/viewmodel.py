"""View-model turning repository searches into screen states."""

import logging
from concurrent.futures import CancelledError, Future
from functools import partial

from gh_search.search.models import SearchResponse
from gh_search.search.observable import StateHolder
from gh_search.search.repository import SearchRepository
from gh_search.search.scheduler import SchedulerProvider
from gh_search.search.state import Error, Idle, ScreenState, SearchError, Working

logger = logging.getLogger(__name__)

NULL_FIELDS_MESSAGE = "Search results or total count are null"
DEFAULT_ERROR_MESSAGE = "Response is null or unsuccessful"


class SearchViewModel:
    """Runs searches and publishes one ScreenState per search.

    The repository call is dispatched on the provider's ``io()`` scheduler
    and the resulting state is published on ``ui()``. Failures never reach
    the caller; they become :class:`Error` states.
    """

    def __init__(self, repository: SearchRepository, schedulers: SchedulerProvider) -> None:
        """Initialize the view-model.

        Args:
            repository: Source of search responses.
            schedulers: Work and result-delivery schedulers.
        """
        self._repository = repository
        self._schedulers = schedulers
        self._state: StateHolder[ScreenState] = StateHolder(Idle())

    def subscribe_to_state(self) -> StateHolder[ScreenState]:
        """Observable holder of the latest screen state."""
        return self._state

    def search(self, query: str) -> None:
        """Search for repositories matching ``query``.

        Args:
            query: GitHub search query.
        """
        logger.debug("Searching for %r", query)
        self._schedulers.io().schedule(partial(self._request, query))

    def _request(self, query: str) -> None:
        try:
            future = self._repository.search_repository(query)
        except Exception as e:
            self._deliver(self._error_state(e))
            return
        future.add_done_callback(self._on_done)

    def _on_done(self, future: "Future[SearchResponse]") -> None:
        try:
            response = future.result()
        except (Exception, CancelledError) as e:
            state = self._error_state(e)
        else:
            state = self._response_state(response)
        self._deliver(state)

    def _deliver(self, state: ScreenState) -> None:
        self._schedulers.ui().schedule(partial(self._state.publish, state))

    @staticmethod
    def _response_state(response: SearchResponse) -> ScreenState:
        if response.total_count is None or response.items is None:
            logger.warning(
                "Incomplete search response: total_count=%s, items=%s",
                response.total_count,
                "null" if response.items is None else len(response.items),
            )
            return Error(SearchError(NULL_FIELDS_MESSAGE))
        return Working(response)

    @staticmethod
    def _error_state(error: BaseException) -> ScreenState:
        message = str(error) or DEFAULT_ERROR_MESSAGE
        logger.warning("Search failed: %s", message)
        search_error = SearchError(message)
        search_error.__cause__ = error
        return Error(search_error)
