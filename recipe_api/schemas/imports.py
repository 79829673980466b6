from typing import Any, Optional

from pydantic import BaseModel, EmailStr, Field


class ImportRequest(BaseModel):
    url: str = Field(min_length=1)
    email: Optional[EmailStr] = None


class ImportedContentData(BaseModel):
    content: Optional[dict[str, Any]] = None
    metadata: Optional[dict[str, Any]] = None
