from typing import Optional
from unittest.mock import AsyncMock, MagicMock
from uuid import UUID, uuid4

import pytest
from sqlalchemy.dialects import postgresql

from recipe_api.exceptions import ProfileNotFoundError
from recipe_api.models import ImportedContent, ImportStatus, UserProfile
from recipe_api.services import SqlContentStore
from recipe_api.services.content_store import _content_flags

from tests.fakes import SAMPLE_CONTENT, SAMPLE_METADATA


class FakeSessionFactory:
    """Stands in for ``async_sessionmaker``; every session is the same mock."""

    def __init__(self, session: MagicMock) -> None:
        self.session = session
        self.opened = 0

    def __call__(self) -> "FakeSessionFactory":
        self.opened += 1
        return self

    async def __aenter__(self) -> MagicMock:
        return self.session

    async def __aexit__(self, *exc_info) -> bool:
        return False


def make_session(result: Optional[MagicMock] = None) -> MagicMock:
    session = MagicMock()
    session.execute = AsyncMock(return_value=result or MagicMock())
    session.commit = AsyncMock()
    session.refresh = AsyncMock()
    return session


def compiled_sql(session: MagicMock) -> str:
    statement = session.execute.await_args.args[0]
    return str(statement.compile(dialect=postgresql.dialect()))


class TestContentFlags:
    def test_flags_from_payload(self):
        assert _content_flags(SAMPLE_CONTENT, SAMPLE_METADATA) == {
            "is_recipe_content": True,
            "video_duration": 42,
        }

    @pytest.mark.parametrize(
        "content,metadata",
        [
            (None, None),
            ({"able_to_extract": "yes"}, {"video_duration": "42"}),
            ({}, {"video_duration": True}),
        ],
    )
    def test_unusable_values_are_ignored(self, content, metadata):
        assert _content_flags(content, metadata) == {}


class TestSqlContentStore:
    @pytest.mark.asyncio
    async def test_find_latest_orders_newest_first(self):
        record = ImportedContent(source_url="https://www.youtube.com/watch?v=abc123")
        result = MagicMock()
        result.scalar_one_or_none.return_value = record
        session = make_session(result)

        found = await SqlContentStore(FakeSessionFactory(session)).find_latest_by_source_url(
            "https://www.youtube.com/watch?v=abc123"
        )

        assert found is record
        sql = compiled_sql(session)
        assert "ORDER BY imported_content.created_at DESC" in sql
        assert "LIMIT" in sql

    @pytest.mark.asyncio
    async def test_insert_content_sets_status_and_flags(self):
        session = make_session()
        user_id = uuid4()

        record = await SqlContentStore(FakeSessionFactory(session)).insert_content(
            user_id, "https://www.youtube.com/watch?v=abc123", SAMPLE_CONTENT, SAMPLE_METADATA
        )

        session.add.assert_called_once_with(record)
        session.commit.assert_awaited_once()
        assert record.user_id == user_id
        assert record.status == ImportStatus.COMPLETED
        assert record.retry_count == 0
        assert record.content == SAMPLE_CONTENT
        assert record.extraction_metadata == SAMPLE_METADATA
        assert record.is_recipe_content is True
        assert record.video_duration == 42

    @pytest.mark.asyncio
    async def test_increment_returns_new_count(self):
        result = MagicMock()
        result.scalar_one_or_none.return_value = 4
        session = make_session(result)

        count = await SqlContentStore(FakeSessionFactory(session)).increment_usage_counter(uuid4())

        assert count == 4
        session.commit.assert_awaited_once()
        sql = compiled_sql(session)
        assert sql.startswith("UPDATE user_profile SET ai_imports_used=")
        assert "user_profile.ai_imports_used +" in sql
        assert "RETURNING user_profile.ai_imports_used" in sql

    @pytest.mark.asyncio
    async def test_increment_for_missing_profile_raises(self):
        result = MagicMock()
        result.scalar_one_or_none.return_value = None
        session = make_session(result)

        with pytest.raises(ProfileNotFoundError):
            await SqlContentStore(FakeSessionFactory(session)).increment_usage_counter(uuid4())
        session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_anonymize_only_clears_owner(self):
        result = MagicMock()
        result.rowcount = 3
        session = make_session(result)

        count = await SqlContentStore(FakeSessionFactory(session)).anonymize_user_content(uuid4())

        assert count == 3
        sql = compiled_sql(session)
        set_clause, where_clause = sql.split(" WHERE ")
        assert set_clause.startswith("UPDATE imported_content SET user_id=")
        assert "content=" not in set_clause
        assert "metadata=" not in set_clause
        assert where_clause.startswith("imported_content.user_id =")

    @pytest.mark.asyncio
    async def test_existing_profile_is_reused_for_email(self):
        profile_id = uuid4()
        result = MagicMock()
        result.scalar_one_or_none.return_value = profile_id
        session = make_session(result)

        found = await SqlContentStore(FakeSessionFactory(session)).get_or_create_profile_by_email(
            "cook@example.com"
        )

        assert found == profile_id
        session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_profile_is_created_for_new_email(self):
        result = MagicMock()
        result.scalar_one_or_none.return_value = None
        session = make_session(result)

        created = await SqlContentStore(FakeSessionFactory(session)).get_or_create_profile_by_email(
            "new@example.com"
        )

        (profile,) = session.add.call_args.args
        assert isinstance(profile, UserProfile)
        assert isinstance(created, UUID)
        assert profile.id == created
        assert profile.email == "new@example.com"
        assert profile.ai_imports_used == 0
        session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_each_operation_uses_its_own_session(self):
        result = MagicMock()
        result.scalar_one_or_none.return_value = None
        factory = FakeSessionFactory(make_session(result))
        store = SqlContentStore(factory)

        await store.get_profile_id_by_auth_id(uuid4())
        await store.delete_profile(uuid4())

        assert factory.opened == 2
