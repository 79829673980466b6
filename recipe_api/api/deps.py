import logging
from typing import Annotated, Optional
from uuid import UUID

from fastapi import Depends, Header, Request
from sqlalchemy.exc import SQLAlchemyError

from recipe_api.exceptions import AuthenticationError, RecipeApiError, StorageError
from recipe_api.services import AccountService, AuthPolicy, RecipeImporter
from recipe_api.services.auth import AuthClient, parse_bearer_token
from recipe_api.services.content_store import ContentStore

logger = logging.getLogger(__name__)


def get_auth_policy(request: Request) -> AuthPolicy:
    return request.app.state.auth_policy


def get_auth_client(request: Request) -> Optional[AuthClient]:
    return request.app.state.auth_client


def get_content_store(request: Request) -> ContentStore:
    return request.app.state.content_store


def get_importer(request: Request) -> RecipeImporter:
    return request.app.state.importer


def get_account_service(request: Request) -> AccountService:
    return request.app.state.account_service


async def get_auth_user_id(
    auth_client: Annotated[Optional[AuthClient], Depends(get_auth_client)],
    authorization: Annotated[Optional[str], Header()] = None,
) -> UUID:
    """Auth user id behind the request's bearer token."""
    token = parse_bearer_token(authorization)
    if auth_client is None:
        raise RecipeApiError("Authentication is not configured")
    return await auth_client.get_user_id(token)


async def get_optional_auth_user_id(
    policy: Annotated[AuthPolicy, Depends(get_auth_policy)],
    auth_client: Annotated[Optional[AuthClient], Depends(get_auth_client)],
    authorization: Annotated[Optional[str], Header()] = None,
) -> Optional[UUID]:
    """Like :func:`get_auth_user_id`, but ``None`` when the auth policy is relaxed."""
    if not policy.required:
        return None
    return await get_auth_user_id(auth_client, authorization)


async def resolve_profile_id(
    store: ContentStore, auth_user_id: Optional[UUID], email: Optional[str]
) -> Optional[UUID]:
    """Internal profile id that owns an import, or ``None`` for anonymous imports.

    Authenticated requests must map to an existing profile. Without
    authentication (development bypass) the optional email picks, or creates,
    the profile.
    """
    try:
        if auth_user_id is not None:
            profile_id = await store.get_profile_id_by_auth_id(auth_user_id)
            if profile_id is None:
                logger.error(f"User profile not found for auth user {auth_user_id}")
                raise AuthenticationError("User profile not found")
            return profile_id
        if email:
            return await store.get_or_create_profile_by_email(email)
    except SQLAlchemyError as e:
        logger.exception("User profile lookup failed")
        raise StorageError("Failed to look up user profile") from e
    return None
