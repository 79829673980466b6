"""Import workflow: resolve -> canonicalize -> dedup -> extract -> persist -> count."""

import logging
from dataclasses import dataclass
from typing import Any, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from recipe_api.exceptions import ProfileNotFoundError, StorageError
from recipe_api.models import ImportStatus
from recipe_api.schemas import ImportedContentData, RestResponse
from recipe_api.services.canonical import Canonicalizer
from recipe_api.services.content_store import ContentStore
from recipe_api.services.extraction import ExtractionClient
from recipe_api.services.resolver import UrlResolver

logger = logging.getLogger(__name__)


@dataclass
class ImportResult:
    status_code: int
    body: dict[str, Any]
    canonical_url: str
    cached: bool = False


def _success_body(content: Optional[dict[str, Any]], metadata: Optional[dict[str, Any]]) -> dict[str, Any]:
    data = ImportedContentData(content=content, metadata=metadata)
    return RestResponse.ok(data.model_dump()).model_dump(mode="json")


class RecipeImporter:
    def __init__(
        self,
        resolver: UrlResolver,
        canonicalizer: Canonicalizer,
        extraction_client: ExtractionClient,
        store: ContentStore,
    ) -> None:
        self._resolver = resolver
        self._canonicalizer = canonicalizer
        self._extraction = extraction_client
        self._store = store

    async def canonical_url_for(self, url: str) -> str:
        """Resolve redirects (unless a platform pattern already matches) and canonicalize."""
        url = url.strip()
        known = self._canonicalizer.match_offline(url)
        if known is not None:
            return known
        resolved = await self._resolver.resolve(url)
        return await self._canonicalizer.canonicalize(resolved)

    async def import_url(
        self,
        url: str,
        user_id: Optional[UUID] = None,
        email: Optional[str] = None,
    ) -> ImportResult:
        canonical_url = await self.canonical_url_for(url)
        logger.info(f"Importing {url} as {canonical_url}")

        try:
            existing = await self._store.find_latest_by_source_url(canonical_url)
        except SQLAlchemyError as e:
            logger.exception(f"Content lookup failed for {canonical_url}")
            raise StorageError("Failed to look up imported content") from e

        if existing is not None and existing.status != ImportStatus.FAILED:
            logger.info(f"Cache hit for {canonical_url} (record {existing.id})")
            return ImportResult(
                status_code=200,
                body=_success_body(existing.content, existing.extraction_metadata),
                canonical_url=canonical_url,
                cached=True,
            )

        extraction = await self._extraction.extract(canonical_url, email)

        if not extraction.succeeded:
            if existing is not None:
                await self._record_failed_retry(existing.id)
            return ImportResult(
                status_code=extraction.status_code,
                body=extraction.body,
                canonical_url=canonical_url,
            )

        try:
            if existing is not None:
                await self._store.mark_retry_succeeded(
                    existing.id, extraction.content, extraction.metadata
                )
            else:
                await self._store.insert_content(
                    user_id, canonical_url, extraction.content, extraction.metadata
                )
        except SQLAlchemyError as e:
            logger.exception(f"Failed to store imported content for {canonical_url}")
            raise StorageError("Failed to store imported content") from e

        if user_id is not None:
            await self._increment_usage(user_id)

        return ImportResult(
            status_code=200,
            body=_success_body(extraction.content, extraction.metadata),
            canonical_url=canonical_url,
        )

    async def _increment_usage(self, user_id: UUID) -> None:
        try:
            new_count = await self._store.increment_usage_counter(user_id)
        except (SQLAlchemyError, ProfileNotFoundError):
            logger.exception(f"Failed to increment AI import usage for {user_id}")
            return
        logger.info(f"User {user_id} has used {new_count} AI imports")

    async def _record_failed_retry(self, record_id: UUID) -> None:
        try:
            retry_count = await self._store.record_failed_retry(record_id)
        except SQLAlchemyError:
            logger.exception(f"Failed to record retry for imported content {record_id}")
            return
        logger.info(f"Imported content {record_id} failed again (retry {retry_count})")
