"""Configuration loading and validation."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator


class AuthConfig(BaseModel):
    """GitHub authentication configuration."""

    token_env: str = "GITHUB_TOKEN"
    required: bool = False


class GitHubConfig(BaseModel):
    """GitHub API configuration section."""

    base_url: str = "https://api.github.com"
    timeout: float = Field(default=30.0, gt=0, description="Request timeout in seconds")
    auth: AuthConfig = Field(default_factory=AuthConfig)

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Require an http(s) URL and drop any trailing slash."""
        if not v.startswith(("http://", "https://")):
            msg = f"base_url must be an http(s) URL, got '{v}'"
            raise ValueError(msg)
        return v.rstrip("/")


class SearchConfig(BaseModel):
    """Search request configuration."""

    per_page: int = Field(default=30, ge=1, le=100)
    sort: str | None = Field(default=None, pattern=r"^(stars|forks|help-wanted-issues|updated)$")
    order: str = Field(default="desc", pattern=r"^(asc|desc)$")


class SchedulerConfig(BaseModel):
    """Background worker configuration."""

    max_workers: int = Field(default=4, ge=1, le=32)


class Config(BaseModel):
    """Root configuration model."""

    github: GitHubConfig = Field(default_factory=GitHubConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)


def load_config(path: Path) -> Config:
    """Load and validate configuration from YAML file.

    Args:
        path: Path to the YAML configuration file.

    Returns:
        Validated Config object. An empty file yields the defaults.

    Raises:
        FileNotFoundError: If the config file doesn't exist.
        ValidationError: If the config is invalid.
    """
    if not path.exists():
        msg = f"Config file not found: {path}"
        raise FileNotFoundError(msg)

    with path.open() as f:
        raw_config: dict[str, Any] | None = yaml.safe_load(f)

    return Config.model_validate(raw_config or {})
