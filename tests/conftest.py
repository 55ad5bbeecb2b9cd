"""Test fixtures for gh-search.

Live tests are marked with @pytest.mark.live_api and skipped unless
GITHUB_TOKEN is set.
"""

import os

import pytest


@pytest.fixture(scope="session")
def github_token() -> str:
    """Get GitHub token from environment.

    Skips test if GITHUB_TOKEN is not set.

    Returns:
        GitHub API token.
    """
    token = os.getenv("GITHUB_TOKEN")
    if not token:
        pytest.skip("GITHUB_TOKEN not set - skipping live API test")
    return token
