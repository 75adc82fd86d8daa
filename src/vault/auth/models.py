"""Access token model with buffer-zone validity."""

from dataclasses import dataclass
from datetime import datetime, timedelta

# Tokens are treated as expired this long before their real expiry
DEFAULT_BUFFER_SECONDS = 30


@dataclass(frozen=True)
class AccessToken:
    """
    Bearer token with expiration tracking.

    Attributes:
        value: The access token string
        obtained_at: Timestamp when the exchange completed
        expires_in_seconds: Lifetime reported by the auth server
        token_type: Token type (typically "Bearer")
    """

    value: str
    obtained_at: datetime
    expires_in_seconds: int
    token_type: str = "Bearer"

    @property
    def expires_at(self) -> datetime:
        return self.obtained_at + timedelta(seconds=self.expires_in_seconds)

    def is_valid(
        self, now: datetime, buffer_seconds: int = DEFAULT_BUFFER_SECONDS
    ) -> bool:
        """
        Check the token is outside the buffer zone.

        Args:
            now: Current time, same timezone awareness as obtained_at
            buffer_seconds: Safety margin before actual expiry

        Returns:
            True if now < expires_at - buffer
        """
        return now < self.expires_at - timedelta(seconds=buffer_seconds)

    def __repr__(self) -> str:
        # Never render the secret
        return (
            f"AccessToken(obtained_at={self.obtained_at.isoformat()}, "
            f"expires_in_seconds={self.expires_in_seconds})"
        )


__all__ = ["AccessToken", "DEFAULT_BUFFER_SECONDS"]
