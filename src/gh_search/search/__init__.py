"""Repository search view-model and its collaborators."""

from gh_search.search.models import RepositoryOwner, SearchResponse, SearchResult
from gh_search.search.observable import StateHolder
from gh_search.search.repository import (
    FakeSearchRepository,
    GitHubSearchRepository,
    RepositoryCallback,
    SearchRepository,
)
from gh_search.search.scheduler import (
    ImmediateScheduler,
    MainThreadScheduler,
    Scheduler,
    SchedulerProvider,
    ThreadPoolScheduler,
)
from gh_search.search.state import Error, Idle, ScreenState, SearchError, Working
from gh_search.search.viewmodel import SearchViewModel

__all__ = [
    # States
    "Error",
    "Idle",
    "ScreenState",
    "SearchError",
    "Working",
    # Models
    "RepositoryOwner",
    "SearchResponse",
    "SearchResult",
    # Repositories
    "FakeSearchRepository",
    "GitHubSearchRepository",
    "RepositoryCallback",
    "SearchRepository",
    # Schedulers
    "ImmediateScheduler",
    "MainThreadScheduler",
    "Scheduler",
    "SchedulerProvider",
    "ThreadPoolScheduler",
    # View-model
    "SearchViewModel",
    "StateHolder",
]
