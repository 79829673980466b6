"""
Shared fixtures for the recipe import API tests.

Outbound HTTP goes through ``httpx.MockTransport``; the database is replaced by
an in-memory ``FakeContentStore`` that honours the same contract as
``SqlContentStore``.
"""

from collections.abc import AsyncIterator, Callable
from typing import Any
from uuid import uuid4

import httpx
import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from recipe_api.config import Settings
from recipe_api.main import create_app
from recipe_api.services import (
    AccountService,
    AuthPolicy,
    Canonicalizer,
    ExtractionClient,
    RecipeImporter,
    RetryPolicy,
    UrlResolver,
    default_rules,
)

from tests.fakes import (
    EXTRACTION_BASE_URL,
    FakeAuthClient,
    FakeContentStore,
    FakeUpstream,
    no_sleep,
)


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        _env_file=None,
        app_name="Recipe Import API Test",
        environment="testing",
        supabase_url="http://supabase.test",
        supabase_service_role_key="service-role-key",
        extraction_base_url=EXTRACTION_BASE_URL,
        extraction_api_key="extract-key",
        auto_create_tables=False,
    )


@pytest.fixture
def store() -> FakeContentStore:
    return FakeContentStore()


@pytest.fixture
def auth_client() -> FakeAuthClient:
    return FakeAuthClient()


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
async def http_client(upstream: FakeUpstream) -> AsyncIterator[httpx.AsyncClient]:
    async with httpx.AsyncClient(transport=httpx.MockTransport(upstream.handler)) as client:
        yield client


@pytest.fixture
def extraction_client(http_client: httpx.AsyncClient) -> ExtractionClient:
    return ExtractionClient(
        http_client,
        EXTRACTION_BASE_URL,
        api_key="extract-key",
        retry_policy=RetryPolicy(max_attempts=3, base_delay=0.2),
        sleep=no_sleep,
    )


@pytest.fixture
def importer(
    http_client: httpx.AsyncClient,
    extraction_client: ExtractionClient,
    store: FakeContentStore,
) -> RecipeImporter:
    return RecipeImporter(
        resolver=UrlResolver(http_client),
        canonicalizer=Canonicalizer(default_rules(http_client)),
        extraction_client=extraction_client,
        store=store,
    )


@pytest.fixture
def make_app(
    test_settings: Settings,
    store: FakeContentStore,
    auth_client: FakeAuthClient,
    importer: RecipeImporter,
) -> Callable[..., FastAPI]:
    """Build the app with fakes wired into ``app.state`` (the lifespan is not run)."""

    def _make(auth_required: bool = True) -> FastAPI:
        app = create_app(test_settings)
        app.state.auth_policy = AuthPolicy(required=auth_required)
        app.state.auth_client = auth_client
        app.state.content_store = store
        app.state.importer = importer
        app.state.account_service = AccountService(store, auth_client)
        return app

    return _make


@pytest.fixture
async def api_client(make_app: Callable[..., FastAPI]) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=make_app())
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def signed_in_user(store: FakeContentStore, auth_client: FakeAuthClient) -> dict[str, Any]:
    """A user with a profile and a valid bearer token."""
    auth_id = uuid4()
    profile_id = store.add_profile(auth_id=auth_id, email="cook@example.com")
    auth_client.tokens["good-token"] = auth_id
    return {
        "auth_id": auth_id,
        "profile_id": profile_id,
        "headers": {"Authorization": "Bearer good-token"},
    }
