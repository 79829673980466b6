import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

import httpx

from recipe_api.exceptions import UpstreamUnavailableError
from recipe_api.services.retry import RetryPolicy, retry_async

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = frozenset({502, 503, 504})


def is_retryable_response(response: httpx.Response) -> bool:
    return response.status_code in RETRYABLE_STATUS_CODES


def _envelope_from_response(response: httpx.Response) -> dict[str, Any]:
    """Map an upstream body onto the ``{success, error, error_code, data}`` envelope."""
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict) and "success" in body:
        return body

    if isinstance(body, dict) and "detail" in body:
        # FastAPI HTTPException bodies: {"detail": {"message", "code"}} or {"detail": "..."}
        detail = body["detail"]
        if isinstance(detail, dict):
            message = detail.get("message") or str(detail)
            code = detail.get("code")
        else:
            message = str(detail)
            code = None
        return {"success": False, "error": message, "error_code": code, "data": None}

    return {
        "success": False,
        "error": f"Extraction service returned HTTP {response.status_code}",
        "error_code": "UPSTREAM_ERROR",
        "data": None,
    }


@dataclass
class ExtractionResponse:
    status_code: int
    body: dict[str, Any]

    @property
    def succeeded(self) -> bool:
        return (
            200 <= self.status_code < 300
            and self.body.get("success") is True
            and isinstance(self.body.get("data"), dict)
        )

    @property
    def content(self) -> Optional[dict[str, Any]]:
        data = self.body.get("data") or {}
        return data.get("content")

    @property
    def metadata(self) -> Optional[dict[str, Any]]:
        data = self.body.get("data") or {}
        return data.get("metadata")


class ExtractionClient:
    """Forwards canonical URLs to the external extraction service."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        base_url: str,
        *,
        api_key: Optional[str] = None,
        path: str = "/extract-content",
        timeout: float = 30.0,
        retry_policy: Optional[RetryPolicy] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._client = http_client
        self._endpoint = f"{base_url.rstrip('/')}/{path.lstrip('/')}"
        self._api_key = api_key
        self._timeout = timeout
        self._retry_policy = retry_policy or RetryPolicy()
        self._sleep = sleep

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["x-api-key"] = self._api_key
        return headers

    async def extract(self, url: str, email: Optional[str] = None) -> ExtractionResponse:
        payload: dict[str, Any] = {"url": url}
        if email:
            payload["email"] = email

        async def send() -> httpx.Response:
            return await self._client.post(
                self._endpoint,
                json=payload,
                headers=self._headers(),
                timeout=self._timeout,
            )

        logger.info(f"Requesting extraction for {url}")
        try:
            response = await retry_async(
                send,
                self._retry_policy,
                retry_on=(httpx.TransportError,),
                retry_if=is_retryable_response,
                sleep=self._sleep,
            )
        except httpx.TransportError as e:
            raise UpstreamUnavailableError(
                f"Extraction service unavailable: {type(e).__name__}"
            ) from e

        if response.is_success:
            logger.info(f"Extraction for {url} returned HTTP {response.status_code}")
        else:
            logger.warning(
                f"Extraction for {url} failed with HTTP {response.status_code}"
            )
        return ExtractionResponse(
            status_code=response.status_code, body=_envelope_from_response(response)
        )
