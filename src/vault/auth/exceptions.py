"""Auth-specific exceptions."""

from core.errors.exceptions import AuthenticationError, AuthError, ConfigurationError


class InvalidCredentialsConfigError(ConfigurationError):
    """Client credentials or auth URL are missing."""

    pass


class MalformedTokenResponseError(AuthError):
    """Auth server answered 2xx with a body that is not a token response."""

    pass


__all__ = [
    "AuthError",
    "AuthenticationError",
    "InvalidCredentialsConfigError",
    "MalformedTokenResponseError",
]
