from __future__ import annotations

import enum
from datetime import datetime
from typing import Any, Optional
from uuid import UUID, uuid4

from sqlalchemy import Enum, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from recipe_api.models.base import Base


class ImportStatus(str, enum.Enum):
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class ImportedContent(Base):
    __tablename__ = "imported_content"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    # No foreign key: the owner is cleared, not cascaded, when an account is deleted.
    user_id: Mapped[Optional[UUID]] = mapped_column(index=True)
    source_url: Mapped[str] = mapped_column(index=True)
    content: Mapped[Optional[dict[str, Any]]] = mapped_column(JSONB)
    extraction_metadata: Mapped[Optional[dict[str, Any]]] = mapped_column(
        "metadata", JSONB
    )
    video_duration: Mapped[Optional[int]]
    is_recipe_content: Mapped[Optional[bool]]
    status: Mapped[Optional[ImportStatus]] = mapped_column(
        Enum(ImportStatus, name="imported_content_status")
    )
    retry_count: Mapped[int] = mapped_column(default=0, server_default="0")
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(), onupdate=func.now()
    )
