"""Authentication data models."""

from dataclasses import dataclass
from datetime import datetime, timedelta


@dataclass(frozen=True)
class AccessToken:
    """Bearer token issued by the client-credentials exchange."""

    value: str
    expires_at: datetime  # timezone-aware

    def remaining(self, now: datetime) -> timedelta:
        """Lifetime left at ``now``."""
        return self.expires_at - now

    def __repr__(self) -> str:
        return f"AccessToken(value='[REDACTED]', expires_at={self.expires_at!r})"
