from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel

DataT = TypeVar("DataT")


class RestResponse(BaseModel, Generic[DataT]):
    """Uniform response body returned by every endpoint."""

    success: bool
    error: Optional[str] = None
    error_code: Optional[str] = None
    data: Optional[DataT] = None

    @classmethod
    def ok(cls, data: Any) -> "RestResponse":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, message: str, error_code: Optional[str] = None) -> "RestResponse":
        return cls(success=False, error=message, error_code=error_code)
