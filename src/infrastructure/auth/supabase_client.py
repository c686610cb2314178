"""Supabase Auth (GoTrue) HTTP client for the session endpoints.

Only the calls the server needs are wrapped: PKCE code exchange on the
auth callback, refresh-token rotation, and logout.
"""

from typing import Any, Optional

import httpx
import structlog

from core.config import Settings
from core.exceptions import AuthProviderError
from infrastructure.auth.provider import TokenPair

logger = structlog.get_logger()


class SupabaseAuthClient:
    """Thin async wrapper over the GoTrue REST API."""

    def __init__(self, http_client: httpx.AsyncClient, base_url: str, anon_key: str) -> None:
        self._http = http_client
        self._auth_url = f"{base_url.rstrip('/')}/auth/v1"
        self._anon_key = anon_key

    @classmethod
    def from_settings(cls, settings: Settings, http_client: httpx.AsyncClient) -> "SupabaseAuthClient":
        return cls(http_client, settings.supabase_url, settings.supabase_anon_key)

    def _headers(self, access_token: str | None = None) -> dict[str, str]:
        headers = {"apikey": self._anon_key, "Content-Type": "application/json"}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        return headers

    async def exchange_code(self, code: str, code_verifier: str) -> TokenPair:
        """Exchange a PKCE auth code for a session.

        Raises:
            AuthProviderError: the provider rejected the code or was unreachable.
        """
        try:
            response = await self._http.post(
                f"{self._auth_url}/token",
                params={"grant_type": "pkce"},
                json={"auth_code": code, "code_verifier": code_verifier},
                headers=self._headers(),
            )
        except httpx.HTTPError as exc:
            logger.error("auth_code_exchange_unreachable", error=str(exc))
            raise AuthProviderError("Authentication provider unavailable") from exc

        if response.status_code != 200:
            logger.warning("auth_code_exchange_rejected", status_code=response.status_code)
            raise AuthProviderError("Invalid or expired auth code")
        return self._token_pair(response.json())

    async def refresh(self, refresh_token: str) -> Optional[TokenPair]:
        """Rotate a refresh token. Returns None when the provider refuses it."""
        try:
            response = await self._http.post(
                f"{self._auth_url}/token",
                params={"grant_type": "refresh_token"},
                json={"refresh_token": refresh_token},
                headers=self._headers(),
            )
        except httpx.HTTPError as exc:
            logger.warning("session_refresh_unreachable", error=str(exc))
            return None

        if response.status_code != 200:
            logger.info("session_refresh_rejected", status_code=response.status_code)
            return None
        return self._token_pair(response.json())

    async def sign_out(self, access_token: str) -> None:
        """Revoke the session. Failures are logged; the cookies get cleared regardless."""
        try:
            response = await self._http.post(
                f"{self._auth_url}/logout",
                headers=self._headers(access_token),
            )
            if response.status_code >= 400:
                logger.info("sign_out_rejected", status_code=response.status_code)
        except httpx.HTTPError as exc:
            logger.warning("sign_out_unreachable", error=str(exc))

    @staticmethod
    def _token_pair(data: dict[str, Any]) -> TokenPair:
        try:
            return TokenPair(
                access_token=data["access_token"],
                refresh_token=data["refresh_token"],
                expires_in=int(data.get("expires_in", 3600)),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise AuthProviderError("Malformed session returned by provider") from exc
