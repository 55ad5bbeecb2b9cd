"""Screen states published by the search view-model."""

from dataclasses import dataclass

from gh_search.search.models import SearchResponse


class SearchError(Exception):
    """Failure shown to the user in place of search results."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


@dataclass(frozen=True)
class Idle:
    """No search has completed yet."""


@dataclass(frozen=True)
class Working:
    """A search finished with a complete response."""

    data: SearchResponse


@dataclass(frozen=True)
class Error:
    """A search failed, either upstream or because the response was incomplete."""

    error: SearchError

    @property
    def message(self) -> str:
        return self.error.message


ScreenState = Idle | Working | Error
