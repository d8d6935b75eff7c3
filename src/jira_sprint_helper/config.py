"""Configuration parsing and validation for the Jira sprint helper."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from .errors import AuthenticationError, ConfigurationError

ORGANIZATION_ENV = "JIRA_ORGANIZATION"
USER_ENV = "JIRA_USER"
TOKEN_ENV = "JIRA_TOKEN"


@dataclass(frozen=True)
class Config:
    """Validated runtime settings used to reach Jira Cloud."""

    organization: str
    user: str
    token: str

    @property
    def base_url(self) -> str:
        return f"https://{self.organization}.atlassian.net"


def _resolve(value: Optional[str], env_var: str) -> str:
    if value is None:
        value = os.getenv(env_var, "")
    return value.strip()


def load_config(
    organization: Optional[str] = None,
    user: Optional[str] = None,
    token: Optional[str] = None,
) -> Config:
    """Build and validate application configuration.

    Explicit arguments win over the ``JIRA_ORGANIZATION``, ``JIRA_USER`` and
    ``JIRA_TOKEN`` environment variables. Blank values count as missing.

    Returns:
        A validated ``Config`` instance.

    Raises:
        ConfigurationError: If the organization or user is missing.
        AuthenticationError: If no API token is configured.
    """
    organization = _resolve(organization, ORGANIZATION_ENV)
    if not organization:
        raise ConfigurationError("organization")

    user = _resolve(user, USER_ENV)
    if not user:
        raise ConfigurationError("user")

    token = _resolve(token, TOKEN_ENV)
    if not token:
        raise AuthenticationError(
            "Missing required Jira API token. "
            f"Pass --token or set the '{TOKEN_ENV}' environment variable."
        )

    return Config(organization=organization, user=user, token=token)
