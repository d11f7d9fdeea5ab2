"""Custom exception types for reposcan."""


class ReposcanError(Exception):
    """Base exception for all reposcan errors."""


class ConfigurationError(ReposcanError):
    """Raised when runtime configuration values are missing or invalid."""


class AuthenticationError(ReposcanError):
    """Raised when the GitHub access token is unavailable."""


class ApiError(ReposcanError):
    """Raised when a GitHub API request fails or returns an unexpected response."""


class DataValidationError(ReposcanError):
    """Raised when pull request data does not meet expected constraints."""


class PulseRangeError(ReposcanError):
    """Raised when a pulse computation is asked for an invalid time range or ISO week."""
