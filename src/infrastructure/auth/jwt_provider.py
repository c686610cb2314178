"""JWT authentication provider implementation.

Supports both Supabase-issued JWTs (ES256 via JWKS) and
locally-created tokens (HS256 for tests and the legacy shared secret).

Supabase JWT payload structure:
    {
        "sub": "user-uuid",
        "email": "user@example.com",
        "role": "authenticated",
        "aud": "authenticated",
        "user_metadata": { "full_name": "Ada", "avatar_url": "https://..." },
        "exp": 1234567890
    }
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Optional
from uuid import UUID

import httpx
from jose import JWTError, jwt
from jose.backends import ECKey

from core.config import settings
from domain.entities.identity import Identity

logger = logging.getLogger(__name__)


class JWTAuthProvider:
    """JWT-based authentication provider.

    Handles validation of both Supabase-issued (ES256) and
    locally-created (HS256) JWTs. The JWKS key set is cached on the
    instance, which lives on ``app.state`` for the application's lifetime.
    """

    def __init__(
        self,
        secret_key: str = settings.jwt_secret_key,
        algorithm: str = settings.jwt_algorithm,
        expire_minutes: int = settings.jwt_expire_minutes,
        jwks_url: str = settings.supabase_jwks_url,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._expire_minutes = expire_minutes
        self._jwks_url = jwks_url
        self._http_client = http_client
        self._jwks_cache: dict[str, Any] | None = None

    async def validate_token(self, token: str) -> Optional[Identity]:
        """
        Validate a JWT token and extract the identity.

        Detects the signing algorithm from the token header:
        - ES256 (Supabase): validates via JWKS public key
        - HS256 (local/test): validates via shared secret

        Args:
            token: The JWT to validate

        Returns:
            Identity if valid, None if invalid or expired
        """
        try:
            header = jwt.get_unverified_header(token)
            alg = header.get("alg", self._algorithm)

            if alg == "ES256":
                payload = await self._validate_es256(token, header)
            else:
                payload = jwt.decode(
                    token,
                    self._secret_key,
                    algorithms=[self._algorithm],
                    options={"verify_aud": False},
                )

            if payload is None:
                return None

            return self._identity_from_claims(payload)

        except (JWTError, ValueError):
            return None

    @staticmethod
    def _identity_from_claims(payload: dict[str, Any]) -> Optional[Identity]:
        user_id = payload.get("sub")
        if not user_id:
            return None

        # Supabase keeps provider profile data in user_metadata
        user_metadata = payload.get("user_metadata") or {}
        full_name = (
            user_metadata.get("full_name")
            or user_metadata.get("name")
            or user_metadata.get("display_name")
            or payload.get("name")
        )

        return Identity(
            id=UUID(user_id),
            email=payload.get("email") or "",
            full_name=full_name,
            avatar_url=user_metadata.get("avatar_url"),
            provider_role=payload.get("role"),
        )

    async def _get_jwks_keys(self) -> dict[str, Any]:
        """Fetch and cache JWKS keys from Supabase."""
        if self._jwks_cache is not None:
            return self._jwks_cache

        if not self._jwks_url:
            return {}

        try:
            if self._http_client is not None:
                response = await self._http_client.get(self._jwks_url, timeout=10.0)
            else:
                async with httpx.AsyncClient() as client:
                    response = await client.get(self._jwks_url, timeout=10.0)
            response.raise_for_status()
            jwks_data = response.json()
            # Build a kid -> key mapping
            keys: dict[str, Any] = {}
            for key_data in jwks_data.get("keys", []):
                kid = key_data.get("kid")
                if kid:
                    keys[kid] = key_data
            self._jwks_cache = keys
            logger.info("Fetched %d JWKS keys from Supabase", len(keys))
            return keys
        except (httpx.HTTPError, ValueError):
            logger.exception("Failed to fetch JWKS from %s", self._jwks_url)
            return {}

    async def _validate_es256(self, token: str, header: dict) -> Optional[dict]:
        """Validate an ES256-signed JWT using JWKS public keys."""
        kid = header.get("kid")
        if not kid:
            return None

        jwks_keys = await self._get_jwks_keys()
        key_data = jwks_keys.get(kid)
        if not key_data:
            # Key not found: refetch once in case the keys were rotated
            self._jwks_cache = None
            jwks_keys = await self._get_jwks_keys()
            key_data = jwks_keys.get(kid)
            if not key_data:
                logger.warning("JWKS key not found for kid=%s", kid)
                return None

        ec_key = ECKey(key_data, algorithm="ES256")
        return jwt.decode(
            token,
            ec_key,
            algorithms=["ES256"],
            options={"verify_aud": False},
        )

    def create_token(self, identity: Identity) -> str:
        """
        Create a JWT token for an identity (HS256, used for tests).

        Args:
            identity: The identity to create a token for

        Returns:
            The generated JWT string
        """
        expire = datetime.utcnow() + timedelta(minutes=self._expire_minutes)

        payload: dict = {
            "sub": str(identity.id),
            "email": identity.email,
            "aud": "authenticated",
            "role": "authenticated",
            "exp": expire,
            "user_metadata": {
                "full_name": identity.full_name,
                "avatar_url": identity.avatar_url,
            },
        }

        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)
