"""GitHub API client and authentication."""

from gh_search.github.auth import AuthenticationError, GitHubAuth
from gh_search.github.http import (
    GitHubClient,
    GitHubHTTPError,
    GitHubResponse,
    RateLimitExceeded,
    RateLimitInfo,
)

__all__ = [
    # Auth
    "AuthenticationError",
    "GitHubAuth",
    # HTTP Client
    "GitHubClient",
    "GitHubHTTPError",
    "GitHubResponse",
    "RateLimitExceeded",
    "RateLimitInfo",
]
