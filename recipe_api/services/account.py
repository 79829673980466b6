import logging
from uuid import UUID

import httpx
from sqlalchemy.exc import SQLAlchemyError

from recipe_api.exceptions import AccountDeletionError, ProfileNotFoundError
from recipe_api.services.auth import AuthClient
from recipe_api.services.content_store import ContentStore

logger = logging.getLogger(__name__)


class AccountService:
    """Deletes an account while keeping the content it imported."""

    def __init__(self, store: ContentStore, auth_client: AuthClient) -> None:
        self._store = store
        self._auth_client = auth_client

    async def delete_account(self, auth_id: UUID) -> None:
        profile_id = await self._store.get_profile_id_by_auth_id(auth_id)
        if profile_id is None:
            raise ProfileNotFoundError("User profile not found")
        logger.info(f"Deleting account for profile {profile_id}")

        try:
            anonymized = await self._store.anonymize_user_content(profile_id)
        except SQLAlchemyError as e:
            logger.exception(f"Failed to anonymize imported content of {profile_id}")
            raise AccountDeletionError(
                "Failed to anonymize imported content", error_code="ANONYMIZE_ERROR"
            ) from e
        logger.info(f"Anonymized {anonymized} imported content rows")

        try:
            await self._store.delete_profile(profile_id)
        except SQLAlchemyError as e:
            logger.exception(f"Failed to delete user profile {profile_id}")
            raise AccountDeletionError(
                "Failed to delete user profile", error_code="DELETE_PROFILE_ERROR"
            ) from e

        try:
            await self._auth_client.delete_user(auth_id)
        except httpx.HTTPError as e:
            logger.exception(f"Failed to delete auth user {auth_id}")
            raise AccountDeletionError(
                "Failed to delete auth user", error_code="DELETE_AUTH_ERROR"
            ) from e
