import logging

import httpx

from recipe_api.exceptions import InvalidUrlError, UrlResolutionError

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/123.0.0.0 Safari/537.36"
)


class UrlResolver:
    """Follows redirects to find where a (short) link finally lands."""

    def __init__(self, http_client: httpx.AsyncClient, timeout: float = 10.0) -> None:
        self._client = http_client
        self._timeout = timeout

    async def resolve(self, url: str) -> str:
        try:
            # Streamed so the body is never downloaded; only the final URL matters.
            async with self._client.stream(
                "GET",
                url,
                follow_redirects=True,
                timeout=self._timeout,
                headers={"User-Agent": DEFAULT_USER_AGENT},
            ) as response:
                final_url = str(response.url)
        except httpx.InvalidURL as e:
            raise InvalidUrlError(f"Invalid URL: {url!r}") from e
        except httpx.HTTPError as e:
            logger.warning(f"Could not resolve {url}: {type(e).__name__}: {e}")
            raise UrlResolutionError(f"Could not resolve URL: {url}") from e

        if final_url != url:
            logger.info(f"Resolved {url} -> {final_url}")
        return final_url
