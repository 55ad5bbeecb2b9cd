"""Tests for SearchViewModel."""

from collections.abc import Iterator
from concurrent.futures import Future
from unittest.mock import Mock

import pytest

from gh_search.github.http import GitHubHTTPError
from gh_search.search.models import SearchResponse, SearchResult
from gh_search.search.observable import StateHolder
from gh_search.search.repository import SearchRepository
from gh_search.search.scheduler import MainThreadScheduler, SchedulerProvider
from gh_search.search.state import Error, Idle, ScreenState, Working
from gh_search.search.viewmodel import SearchViewModel

ONE_INT = 1
SEARCH_QUERY = "some query"
ERROR_TEXT = "error"
ERROR_TEXT_DEFAULT = "Response is null or unsuccessful"
ERROR_TEXT_NULL_FIELDS = "Search results or total count are null"


def completed(response: SearchResponse) -> "Future[SearchResponse]":
    future: Future[SearchResponse] = Future()
    future.set_result(response)
    return future


def failed(error: BaseException) -> "Future[SearchResponse]":
    future: Future[SearchResponse] = Future()
    future.set_exception(error)
    return future


@pytest.fixture
def repository() -> Mock:
    """Mocked repository."""
    return Mock(spec=SearchRepository)


@pytest.fixture
def view_model(repository: Mock) -> SearchViewModel:
    """View-model running everything inline."""
    return SearchViewModel(repository, SchedulerProvider.immediate())


@pytest.fixture
def observed(view_model: SearchViewModel) -> Iterator[StateHolder[ScreenState]]:
    """State holder with a no-op observer attached for the duration of a test."""
    states = view_model.subscribe_to_state()
    observer = states.observe(lambda state: None)
    yield states
    states.remove_observer(observer)


class TestRepositoryCalls:
    """Tests for how the view-model calls its repository."""

    def test_search_calls_repository_once(
        self, view_model: SearchViewModel, repository: Mock
    ) -> None:
        """Test search() calls search_repository exactly once with the query."""
        repository.search_repository.return_value = completed(
            SearchResponse(total_count=ONE_INT, items=[])
        )

        view_model.search(SEARCH_QUERY)

        repository.search_repository.assert_called_once_with(SEARCH_QUERY)

    def test_search_never_uses_callback_entry_point(
        self, view_model: SearchViewModel, repository: Mock
    ) -> None:
        """Test search() never calls the callback-based repository method."""
        repository.search_repository.return_value = completed(
            SearchResponse(total_count=ONE_INT, items=[])
        )

        view_model.search(SEARCH_QUERY)

        repository.search_repository_callback.assert_not_called()

    def test_each_search_calls_repository(
        self, view_model: SearchViewModel, repository: Mock
    ) -> None:
        """Test every search() call reaches the repository with its own query."""
        repository.search_repository.return_value = completed(
            SearchResponse(total_count=ONE_INT, items=[])
        )

        view_model.search("first")
        view_model.search("second")

        assert [c.args for c in repository.search_repository.call_args_list] == [
            ("first",),
            ("second",),
        ]


class TestPublishedState:
    """Tests for the state published after a search."""

    def test_initial_state_is_idle(self, view_model: SearchViewModel) -> None:
        """Test the state before any search is Idle."""
        assert view_model.subscribe_to_state().value == Idle()

    def test_state_is_not_none_after_search(
        self, observed: StateHolder[ScreenState], view_model: SearchViewModel, repository: Mock
    ) -> None:
        """Test a state is published after a successful search."""
        repository.search_repository.return_value = completed(
            SearchResponse(total_count=ONE_INT, items=[])
        )

        view_model.search(SEARCH_QUERY)

        assert observed.value is not None
        assert observed.value != Idle()

    def test_working_state_wraps_same_response(
        self, observed: StateHolder[ScreenState], view_model: SearchViewModel, repository: Mock
    ) -> None:
        """Test the response passes through unchanged into a Working state."""
        data = SearchResponse(total_count=ONE_INT, items=[])
        repository.search_repository.return_value = completed(data)

        view_model.search(SEARCH_QUERY)

        assert observed.value == Working(data)
        assert isinstance(observed.value, Working)
        assert observed.value.data is data

    def test_working_state_with_items(
        self, observed: StateHolder[ScreenState], view_model: SearchViewModel, repository: Mock
    ) -> None:
        """Test a response with items is published as Working."""
        data = SearchResponse(
            total_count=2,
            items=[
                SearchResult(id=1, name="httpx", full_name="encode/httpx"),
                SearchResult(id=2, name="respx", full_name="lundberg/respx"),
            ],
        )
        repository.search_repository.return_value = completed(data)

        view_model.search(SEARCH_QUERY)

        assert observed.value == Working(
            SearchResponse(
                total_count=2,
                items=[
                    SearchResult(id=1, name="httpx", full_name="encode/httpx"),
                    SearchResult(id=2, name="respx", full_name="lundberg/respx"),
                ],
            )
        )

    def test_null_items_publishes_error(
        self, observed: StateHolder[ScreenState], view_model: SearchViewModel, repository: Mock
    ) -> None:
        """Test a response with null items becomes an Error state."""
        repository.search_repository.return_value = completed(
            SearchResponse(total_count=ONE_INT, items=None)
        )

        view_model.search(SEARCH_QUERY)

        assert isinstance(observed.value, Error)
        assert observed.value.error.message == ERROR_TEXT_NULL_FIELDS

    def test_null_total_count_publishes_error(
        self, observed: StateHolder[ScreenState], view_model: SearchViewModel, repository: Mock
    ) -> None:
        """Test a response with null total_count becomes an Error state."""
        repository.search_repository.return_value = completed(
            SearchResponse(total_count=None, items=[])
        )

        view_model.search(SEARCH_QUERY)

        assert isinstance(observed.value, Error)
        assert observed.value.error.message == ERROR_TEXT_NULL_FIELDS

    def test_both_fields_null_publishes_error(
        self, observed: StateHolder[ScreenState], view_model: SearchViewModel, repository: Mock
    ) -> None:
        """Test a response missing both fields becomes an Error state."""
        repository.search_repository.return_value = completed(SearchResponse())

        view_model.search(SEARCH_QUERY)

        assert isinstance(observed.value, Error)
        assert observed.value.message == ERROR_TEXT_NULL_FIELDS

    def test_failure_message_is_kept(
        self, observed: StateHolder[ScreenState], view_model: SearchViewModel, repository: Mock
    ) -> None:
        """Test a failed search publishes Error with the failure's message."""
        error = GitHubHTTPError(ERROR_TEXT)
        repository.search_repository.return_value = failed(error)

        view_model.search(SEARCH_QUERY)

        assert isinstance(observed.value, Error)
        assert observed.value.error.message == ERROR_TEXT
        assert observed.value.error.__cause__ is error

    def test_failure_without_message_uses_default(
        self, observed: StateHolder[ScreenState], view_model: SearchViewModel, repository: Mock
    ) -> None:
        """Test a failure without a message publishes the default message."""
        repository.search_repository.return_value = failed(Exception())

        view_model.search(SEARCH_QUERY)

        assert isinstance(observed.value, Error)
        assert observed.value.error.message == ERROR_TEXT_DEFAULT

    def test_cancelled_future_publishes_default_error(
        self, observed: StateHolder[ScreenState], view_model: SearchViewModel, repository: Mock
    ) -> None:
        """Test a cancelled search publishes the default error."""
        future: Future[SearchResponse] = Future()
        future.cancel()
        repository.search_repository.return_value = future

        view_model.search(SEARCH_QUERY)

        assert isinstance(observed.value, Error)
        assert observed.value.message == ERROR_TEXT_DEFAULT

    def test_repository_raising_synchronously_publishes_error(
        self, observed: StateHolder[ScreenState], view_model: SearchViewModel, repository: Mock
    ) -> None:
        """Test search() does not raise when the repository call itself raises."""
        repository.search_repository.side_effect = RuntimeError("executor is shut down")

        view_model.search(SEARCH_QUERY)

        assert isinstance(observed.value, Error)
        assert observed.value.message == "executor is shut down"

    def test_failing_observer_does_not_break_search(
        self, view_model: SearchViewModel, repository: Mock
    ) -> None:
        """Test an observer that raises neither escapes search() nor starves other observers."""
        repository.search_repository.side_effect = RuntimeError("executor is shut down")
        received: list[ScreenState] = []
        states = view_model.subscribe_to_state()

        def broken(state: ScreenState) -> None:
            raise ValueError("render failed")

        states.observe(broken)
        states.observe(received.append)

        view_model.search(SEARCH_QUERY)

        assert len(received) == 1
        assert isinstance(received[0], Error)
        assert received[0].message == "executor is shut down"

    def test_one_state_published_per_search(
        self, view_model: SearchViewModel, repository: Mock
    ) -> None:
        """Test each search() publishes exactly one state to observers."""
        repository.search_repository.return_value = completed(
            SearchResponse(total_count=ONE_INT, items=[])
        )
        received: list[ScreenState] = []
        view_model.subscribe_to_state().observe(received.append)

        view_model.search(SEARCH_QUERY)
        repository.search_repository.return_value = failed(GitHubHTTPError(ERROR_TEXT))
        view_model.search(SEARCH_QUERY)

        assert len(received) == 2
        assert isinstance(received[0], Working)
        assert isinstance(received[1], Error)

    def test_all_observers_receive_state(
        self, view_model: SearchViewModel, repository: Mock
    ) -> None:
        """Test every attached observer receives the published state."""
        data = SearchResponse(total_count=ONE_INT, items=[])
        repository.search_repository.return_value = completed(data)
        first: list[ScreenState] = []
        second: list[ScreenState] = []
        states = view_model.subscribe_to_state()
        states.observe(first.append)
        states.observe(second.append)

        view_model.search(SEARCH_QUERY)

        assert first == [Working(data)]
        assert second == [Working(data)]


class TestScheduling:
    """Tests for scheduler injection."""

    def test_state_delivered_on_ui_scheduler(self, repository: Mock) -> None:
        """Test nothing is published until the ui scheduler runs its tasks."""
        data = SearchResponse(total_count=ONE_INT, items=[])
        repository.search_repository.return_value = completed(data)
        ui = MainThreadScheduler()
        provider = SchedulerProvider(io=SchedulerProvider.immediate().io(), ui=ui)
        view_model = SearchViewModel(repository, provider)

        view_model.search(SEARCH_QUERY)

        assert view_model.subscribe_to_state().value == Idle()
        assert ui.pending == 1

        ui.run_pending()

        assert view_model.subscribe_to_state().value == Working(data)

    def test_repository_called_on_io_scheduler(self, repository: Mock) -> None:
        """Test the repository is not called until the io scheduler runs."""
        io = MainThreadScheduler()
        provider = SchedulerProvider(io=io, ui=SchedulerProvider.immediate().ui())
        view_model = SearchViewModel(repository, provider)
        repository.search_repository.return_value = completed(
            SearchResponse(total_count=ONE_INT, items=[])
        )

        view_model.search(SEARCH_QUERY)

        repository.search_repository.assert_not_called()
        io.run_pending()
        repository.search_repository.assert_called_once_with(SEARCH_QUERY)

    def test_pending_future_publishes_when_completed(
        self, view_model: SearchViewModel, repository: Mock
    ) -> None:
        """Test a state is published once a pending future completes."""
        future: Future[SearchResponse] = Future()
        repository.search_repository.return_value = future
        data = SearchResponse(total_count=ONE_INT, items=[])

        view_model.search(SEARCH_QUERY)
        assert view_model.subscribe_to_state().value == Idle()

        future.set_result(data)
        assert view_model.subscribe_to_state().value == Working(data)
