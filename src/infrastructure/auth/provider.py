"""Authentication provider protocols."""

from dataclasses import dataclass
from typing import Optional, Protocol, runtime_checkable

from domain.entities.identity import Identity


@dataclass
class Session:
    """A validated identity plus the tokens that prove it."""

    identity: Identity
    access_token: str
    refresh_token: Optional[str] = None


@dataclass
class TokenPair:
    """Tokens issued by the auth provider on code exchange or refresh."""

    access_token: str
    refresh_token: str
    expires_in: int = 3600


class IAuthProvider(Protocol):
    """Protocol for token validation."""

    async def validate_token(self, token: str) -> Optional[Identity]:
        """
        Validate an authentication token.

        Args:
            token: The bearer token to validate

        Returns:
            Identity if valid, None if invalid
        """
        ...


@runtime_checkable
class ISessionIssuer(Protocol):
    """Protocol for the provider endpoints that mint and revoke sessions."""

    async def exchange_code(self, code: str, code_verifier: str) -> TokenPair:
        """Exchange an OAuth/magic-link code for tokens."""
        ...

    async def refresh(self, refresh_token: str) -> Optional[TokenPair]:
        """Trade a refresh token for a new pair. None when it was rejected."""
        ...

    async def sign_out(self, access_token: str) -> None:
        """Revoke the session at the provider."""
        ...
