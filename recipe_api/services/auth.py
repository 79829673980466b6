import logging
from dataclasses import dataclass
from typing import Optional, Protocol
from uuid import UUID

import httpx

from recipe_api.config import Settings
from recipe_api.exceptions import AuthenticationError, UpstreamUnavailableError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthPolicy:
    """Whether import requests must carry a valid bearer token."""

    required: bool = True

    @classmethod
    def from_settings(cls, settings: Settings) -> "AuthPolicy":
        if settings.auth_bypass_enabled:
            logger.warning("Import authentication is DISABLED (development bypass)")
        return cls(required=not settings.auth_bypass_enabled)


def parse_bearer_token(authorization: Optional[str]) -> str:
    if not authorization:
        raise AuthenticationError("Authorization header required")
    scheme, _, token = authorization.partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise AuthenticationError("Invalid authorization header")
    return token


class AuthClient(Protocol):
    async def get_user_id(self, token: str) -> UUID:
        ...

    async def delete_user(self, auth_id: UUID) -> None:
        ...


class SupabaseAuthClient:
    """Minimal client for the Supabase auth (GoTrue) REST API."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        supabase_url: str,
        service_role_key: str,
        timeout: float = 10.0,
    ) -> None:
        self._client = http_client
        self._auth_url = f"{supabase_url.rstrip('/')}/auth/v1"
        self._service_role_key = service_role_key
        self._timeout = timeout

    async def get_user_id(self, token: str) -> UUID:
        try:
            response = await self._client.get(
                f"{self._auth_url}/user",
                headers={
                    "apikey": self._service_role_key,
                    "Authorization": f"Bearer {token}",
                },
                timeout=self._timeout,
            )
        except httpx.TransportError as e:
            logger.error(f"Auth service unreachable: {e}")
            raise UpstreamUnavailableError("Authentication service unavailable") from e

        if response.status_code != 200:
            logger.info(f"Token rejected by auth service (HTTP {response.status_code})")
            raise AuthenticationError("Invalid token")

        try:
            return UUID(response.json()["id"])
        except (ValueError, KeyError, TypeError) as e:
            raise AuthenticationError("Invalid token") from e

    async def delete_user(self, auth_id: UUID) -> None:
        response = await self._client.delete(
            f"{self._auth_url}/admin/users/{auth_id}",
            headers={
                "apikey": self._service_role_key,
                "Authorization": f"Bearer {self._service_role_key}",
            },
            timeout=self._timeout,
        )
        response.raise_for_status()
