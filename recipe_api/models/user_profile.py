from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import func
from sqlalchemy.orm import Mapped, mapped_column

from recipe_api.models.base import Base


class UserProfile(Base):
    """Internal user profile. ``auth_id`` links it to the auth provider's user."""

    __tablename__ = "user_profile"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    auth_id: Mapped[Optional[UUID]] = mapped_column(unique=True, index=True)
    email: Mapped[Optional[str]] = mapped_column(index=True)
    is_pro: Mapped[bool] = mapped_column(default=False, server_default="false")
    ai_imports_used: Mapped[int] = mapped_column(default=0, server_default="0")
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())
    modified_at: Mapped[datetime] = mapped_column(
        server_default=func.now(), onupdate=func.now()
    )
