"""Search API payload models."""

from pydantic import BaseModel, Field


class RepositoryOwner(BaseModel):
    """Owner of a repository in a search result."""

    login: str
    html_url: str | None = None


class SearchResult(BaseModel):
    """A single repository returned by the search API.

    Only the fields the presentation layer needs are modelled; the rest of
    the API payload is ignored.
    """

    id: int
    name: str
    full_name: str
    owner: RepositoryOwner | None = None
    description: str | None = None
    html_url: str | None = None
    language: str | None = None
    stargazers_count: int = 0
    forks_count: int = 0

    @property
    def owner_login(self) -> str | None:
        return self.owner.login if self.owner else None


class SearchResponse(BaseModel):
    """Body of ``GET /search/repositories``.

    Both fields are optional because the API or deserialization may omit
    them; consumers must check before treating the response as complete.
    """

    total_count: int | None = None
    items: list[SearchResult] | None = Field(default=None)

    @property
    def is_complete(self) -> bool:
        """Whether both the total count and the item list are present."""
        return self.total_count is not None and self.items is not None
