import httpx
import pytest

from recipe_api.exceptions import InvalidUrlError, UrlResolutionError
from recipe_api.services.resolver import UrlResolver

from tests.fakes import FakeUpstream


class TestUrlResolver:
    @pytest.mark.asyncio
    async def test_follows_redirect_chain(self, upstream: FakeUpstream, http_client):
        upstream.redirects["https://vt.tiktok.com/shortlink"] = "https://vm.tiktok.com/hop"
        upstream.redirects["https://vm.tiktok.com/hop"] = (
            "https://www.tiktok.com/@foo/video/555?is_copy_url=1"
        )

        final_url = await UrlResolver(http_client).resolve("https://vt.tiktok.com/shortlink")

        assert final_url == "https://www.tiktok.com/@foo/video/555?is_copy_url=1"
        assert upstream.fetched == [
            "https://vt.tiktok.com/shortlink",
            "https://vm.tiktok.com/hop",
            "https://www.tiktok.com/@foo/video/555?is_copy_url=1",
        ]

    @pytest.mark.asyncio
    async def test_returns_input_when_not_redirected(self, http_client):
        url = "https://example.com/recipes/soup"
        assert await UrlResolver(http_client).resolve(url) == url

    @pytest.mark.asyncio
    async def test_final_error_status_still_resolves(self):
        def not_found(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404)

        async with httpx.AsyncClient(transport=httpx.MockTransport(not_found)) as client:
            url = "https://example.com/gone"
            assert await UrlResolver(client).resolve(url) == url

    @pytest.mark.asyncio
    async def test_network_failure_raises_resolution_error(self):
        calls = []

        def timeout(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            raise httpx.ReadTimeout("timed out", request=request)

        async with httpx.AsyncClient(transport=httpx.MockTransport(timeout)) as client:
            with pytest.raises(UrlResolutionError) as exc_info:
                await UrlResolver(client).resolve("https://slow.example.com/x")

        assert exc_info.value.status_code == 502
        assert exc_info.value.error_code == "URL_RESOLUTION_FAILED"
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_redirect_loop_raises_resolution_error(self):
        def loop(request: httpx.Request) -> httpx.Response:
            return httpx.Response(302, headers={"Location": "https://loop.example.com/a"})

        async with httpx.AsyncClient(
            transport=httpx.MockTransport(loop), max_redirects=5
        ) as client:
            with pytest.raises(UrlResolutionError):
                await UrlResolver(client).resolve("https://loop.example.com/a")

    @pytest.mark.asyncio
    async def test_url_rejected_by_http_client_is_invalid(self, http_client, upstream: FakeUpstream):
        with pytest.raises(InvalidUrlError):
            await UrlResolver(http_client).resolve("https://exa\x01mple.com/recipe")
        assert upstream.fetched == []
