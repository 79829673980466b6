"""Persistence for imported content and the per-user usage counter.

Every method runs in its own session and commits before returning, so a
failed counter increment never rolls back the content insert that preceded it.
"""

import logging
from typing import Any, Optional, Protocol
from uuid import UUID, uuid4

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from recipe_api.exceptions import ProfileNotFoundError
from recipe_api.models import ImportedContent, ImportStatus, UserProfile

logger = logging.getLogger(__name__)


class ContentStore(Protocol):
    async def find_latest_by_source_url(self, url: str) -> Optional[ImportedContent]:
        ...

    async def insert_content(
        self,
        user_id: Optional[UUID],
        url: str,
        content: Optional[dict[str, Any]],
        metadata: Optional[dict[str, Any]],
    ) -> ImportedContent:
        ...

    async def mark_retry_succeeded(
        self,
        record_id: UUID,
        content: Optional[dict[str, Any]],
        metadata: Optional[dict[str, Any]],
    ) -> ImportedContent:
        ...

    async def record_failed_retry(self, record_id: UUID) -> int:
        ...

    async def increment_usage_counter(self, user_id: UUID) -> int:
        ...

    async def get_profile_id_by_auth_id(self, auth_id: UUID) -> Optional[UUID]:
        ...

    async def get_or_create_profile_by_email(self, email: str) -> UUID:
        ...

    async def anonymize_user_content(self, user_id: UUID) -> int:
        ...

    async def delete_profile(self, user_id: UUID) -> None:
        ...


def _content_flags(
    content: Optional[dict[str, Any]], metadata: Optional[dict[str, Any]]
) -> dict[str, Any]:
    """Columns derived from the extraction payload when it carries them."""
    flags: dict[str, Any] = {}
    if isinstance(content, dict) and isinstance(content.get("able_to_extract"), bool):
        flags["is_recipe_content"] = content["able_to_extract"]
    if isinstance(metadata, dict):
        duration = metadata.get("video_duration")
        if isinstance(duration, (int, float)) and not isinstance(duration, bool):
            flags["video_duration"] = int(duration)
    return flags


class SqlContentStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def find_latest_by_source_url(self, url: str) -> Optional[ImportedContent]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(ImportedContent)
                .where(ImportedContent.source_url == url)
                .order_by(ImportedContent.created_at.desc())
                .limit(1)
            )
            return result.scalar_one_or_none()

    async def insert_content(
        self,
        user_id: Optional[UUID],
        url: str,
        content: Optional[dict[str, Any]],
        metadata: Optional[dict[str, Any]],
    ) -> ImportedContent:
        record = ImportedContent(
            user_id=user_id,
            source_url=url,
            content=content,
            extraction_metadata=metadata,
            status=ImportStatus.COMPLETED,
            retry_count=0,
            **_content_flags(content, metadata),
        )
        async with self._session_factory() as session:
            session.add(record)
            await session.commit()
            await session.refresh(record)
        logger.info(f"Stored imported content {record.id} for {url}")
        return record

    async def mark_retry_succeeded(
        self,
        record_id: UUID,
        content: Optional[dict[str, Any]],
        metadata: Optional[dict[str, Any]],
    ) -> ImportedContent:
        async with self._session_factory() as session:
            result = await session.execute(
                update(ImportedContent)
                .where(ImportedContent.id == record_id)
                .values(
                    content=content,
                    extraction_metadata=metadata,
                    status=ImportStatus.COMPLETED,
                    retry_count=ImportedContent.retry_count + 1,
                    updated_at=func.now(),
                    **_content_flags(content, metadata),
                )
                .returning(ImportedContent)
            )
            record = result.scalar_one()
            await session.commit()
        logger.info(f"Retry of imported content {record_id} completed")
        return record

    async def record_failed_retry(self, record_id: UUID) -> int:
        async with self._session_factory() as session:
            result = await session.execute(
                update(ImportedContent)
                .where(ImportedContent.id == record_id)
                .values(
                    status=ImportStatus.FAILED,
                    retry_count=ImportedContent.retry_count + 1,
                    updated_at=func.now(),
                )
                .returning(ImportedContent.retry_count)
            )
            retry_count = result.scalar_one()
            await session.commit()
        return retry_count

    async def increment_usage_counter(self, user_id: UUID) -> int:
        async with self._session_factory() as session:
            result = await session.execute(
                update(UserProfile)
                .where(UserProfile.id == user_id)
                .values(
                    ai_imports_used=UserProfile.ai_imports_used + 1,
                    modified_at=func.now(),
                )
                .returning(UserProfile.ai_imports_used)
            )
            new_count = result.scalar_one_or_none()
            if new_count is None:
                raise ProfileNotFoundError(f"User profile not found for user_id: {user_id}")
            await session.commit()
        return new_count

    async def get_profile_id_by_auth_id(self, auth_id: UUID) -> Optional[UUID]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(UserProfile.id).where(UserProfile.auth_id == auth_id)
            )
            return result.scalar_one_or_none()

    async def get_or_create_profile_by_email(self, email: str) -> UUID:
        async with self._session_factory() as session:
            result = await session.execute(
                select(UserProfile.id).where(UserProfile.email == email).limit(1)
            )
            profile_id = result.scalar_one_or_none()
            if profile_id is not None:
                return profile_id

            profile = UserProfile(id=uuid4(), email=email, is_pro=False, ai_imports_used=0)
            session.add(profile)
            await session.commit()
            logger.info(f"Created user profile {profile.id} for {email}")
            return profile.id

    async def anonymize_user_content(self, user_id: UUID) -> int:
        async with self._session_factory() as session:
            result = await session.execute(
                update(ImportedContent)
                .where(ImportedContent.user_id == user_id)
                .values(user_id=None)
            )
            await session.commit()
        return result.rowcount

    async def delete_profile(self, user_id: UUID) -> None:
        async with self._session_factory() as session:
            await session.execute(delete(UserProfile).where(UserProfile.id == user_id))
            await session.commit()
