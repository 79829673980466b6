import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from recipe_api.api import api_router
from recipe_api.config import Settings, get_settings
from recipe_api.database import create_engine_from_settings, create_session_factory, init_db
from recipe_api.exceptions import RecipeApiError
from recipe_api.logging_config import setup_logging
from recipe_api.schemas import RestResponse
from recipe_api.services import (
    AccountService,
    AuthPolicy,
    Canonicalizer,
    ExtractionClient,
    RecipeImporter,
    RetryPolicy,
    SqlContentStore,
    SupabaseAuthClient,
    UrlResolver,
    default_rules,
)

logger = logging.getLogger(__name__)


def _error_response(
    status_code: int, message: str, error_code: Optional[str] = None
) -> JSONResponse:
    body = RestResponse.fail(message, error_code)
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(RecipeApiError)
    async def handle_recipe_api_error(request: Request, exc: RecipeApiError) -> JSONResponse:
        return _error_response(exc.status_code, exc.message, exc.error_code)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return _error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = exc.errors()
        message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
        return _error_response(status.HTTP_400_BAD_REQUEST, message, "INVALID_REQUEST")

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", "INTERNAL_ERROR"
        )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Build the shared clients and services, close them on shutdown."""
        setup_logging(settings.log_level)
        engine = create_engine_from_settings(settings)
        if settings.auto_create_tables:
            await init_db(engine)
        http_client = httpx.AsyncClient()

        store = SqlContentStore(create_session_factory(engine))
        auth_client = None
        if settings.supabase_url and settings.supabase_service_role_key:
            auth_client = SupabaseAuthClient(
                http_client, settings.supabase_url, settings.supabase_service_role_key
            )
        else:
            logger.warning("Supabase auth is not configured; authenticated routes will fail")

        app.state.auth_policy = AuthPolicy.from_settings(settings)
        app.state.auth_client = auth_client
        app.state.content_store = store
        app.state.importer = RecipeImporter(
            resolver=UrlResolver(http_client, timeout=settings.resolver_timeout_seconds),
            canonicalizer=Canonicalizer(
                default_rules(http_client, timeout=settings.resolver_timeout_seconds)
            ),
            extraction_client=ExtractionClient(
                http_client,
                settings.extraction_base_url,
                api_key=settings.extraction_api_key,
                path=settings.extraction_path,
                timeout=settings.extraction_timeout_seconds,
                retry_policy=RetryPolicy(
                    max_attempts=settings.extraction_max_attempts,
                    base_delay=settings.extraction_retry_base_delay,
                ),
            ),
            store=store,
        )
        app.state.account_service = AccountService(store, auth_client)
        try:
            yield
        finally:
            await http_client.aclose()
            await engine.dispose()

    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.state.settings = settings
    register_exception_handlers(app)
    app.include_router(api_router)

    @app.get("/health", tags=["system"])
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok", "app": settings.app_name}

    return app


app = create_app()
