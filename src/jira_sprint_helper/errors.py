"""Custom exception types for the Jira sprint helper."""


class SprintHelperError(Exception):
    """Base exception for all recoverable sprint helper errors."""


class ConfigurationError(SprintHelperError):
    """Raised when a required argument or setting is missing or invalid."""

    def __init__(self, argument: str, message: str = "") -> None:
        self.argument = argument
        super().__init__(message or f"missing required argument `{argument}`")


class AuthenticationError(SprintHelperError):
    """Raised when Jira credentials are unavailable or rejected."""


class ApiError(SprintHelperError):
    """Raised when a Jira API request fails or returns an unexpected response."""
