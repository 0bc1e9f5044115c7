from typing import Generic, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Uniform envelope for every response: {success, data?, error?, message?}."""

    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    message: Optional[str] = None


def success_response(data: T, message: Optional[str] = None) -> ApiResponse[T]:
    return ApiResponse(success=True, data=data, message=message)


def error_body(error: str) -> dict:
    return ApiResponse(success=False, error=error).model_dump(exclude_none=True)
