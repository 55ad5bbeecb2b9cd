"""GitHub authentication.

The search API accepts anonymous requests at a lower rate limit, so a token
is optional unless the caller asks for one explicitly.
"""

import logging
import os
import re
import subprocess

logger = logging.getLogger(__name__)


class AuthenticationError(Exception):
    """Raised when a required token is missing or a token is malformed."""


def _get_gh_cli_token() -> str | None:
    """Ask the GitHub CLI for its token.

    Returns:
        Token from `gh auth token` or None if the CLI is unavailable.
    """
    try:
        result = subprocess.run(
            ["gh", "auth", "token"],
            capture_output=True,
            text=True,
            timeout=5,
            check=False,
        )
    except FileNotFoundError:
        logger.debug("gh CLI not found, continuing without it")
        return None
    except subprocess.TimeoutExpired:
        logger.debug("gh CLI command timed out after 5 seconds")
        return None

    if result.returncode != 0:
        logger.debug("gh CLI returned exit code %d", result.returncode)
        return None
    return result.stdout.strip() or None


class GitHubAuth:
    """GitHub token holder.

    Token sources, in order:
    1. Explicit token parameter
    2. The environment variable named by ``token_env``
    3. GitHub CLI (`gh auth token`)

    With ``required=False`` a missing token leaves the client anonymous.
    """

    VALID_PREFIXES = ("ghp_", "gho_", "ghu_", "ghs_", "github_pat_")
    CLASSIC_TOKEN_PATTERN = re.compile(r"^[a-f0-9]{40}$")

    def __init__(
        self,
        token: str | None = None,
        token_env: str = "GITHUB_TOKEN",
        required: bool = False,
    ) -> None:
        """Load a token.

        Args:
            token: Explicit token, takes precedence over other sources.
            token_env: Environment variable to read the token from.
            required: Raise instead of falling back to anonymous access.

        Raises:
            AuthenticationError: If a token is required but missing, or malformed.
        """
        source = None
        if token:
            source = "explicit parameter"
        elif os.environ.get(token_env):
            token = os.environ[token_env]
            source = f"{token_env} environment variable"
        else:
            token = _get_gh_cli_token()
            if token:
                source = "gh CLI"

        if not token:
            if required:
                raise AuthenticationError(
                    f"GitHub token not found. Set {token_env}, pass a token explicitly, "
                    "or authenticate with `gh auth login`."
                )
            logger.info("No GitHub token found, searching anonymously")
        else:
            logger.info("Using GitHub token from %s", source)

        self._token: str | None = token
        if token:
            self._validate_token(token)

    def _validate_token(self, token: str) -> None:
        """Check the token format.

        Raises:
            AuthenticationError: If the token format is invalid.
        """
        has_valid_prefix = token.startswith(self.VALID_PREFIXES)
        is_classic = bool(self.CLASSIC_TOKEN_PATTERN.match(token))

        if not has_valid_prefix and not is_classic:
            raise AuthenticationError(
                f"Invalid token format. Expected prefix {self.VALID_PREFIXES} "
                "or 40-character hex string (classic token)"
            )
        if has_valid_prefix and len(token) < 20:
            raise AuthenticationError("Token appears too short to be valid")

    @property
    def token(self) -> str | None:
        """The loaded token, or None when anonymous."""
        return self._token

    @property
    def is_anonymous(self) -> bool:
        return self._token is None

    def get_authorization_header(self) -> dict[str, str]:
        """Authorization header for API requests, empty when anonymous."""
        if self._token is None:
            return {}
        return {"Authorization": f"token {self._token}"}
