"""Standard response models for API documentation.

Provides Pydantic models that appear in OpenAPI/Swagger docs
for consistent response schemas.
"""

from typing import Any, Callable, Generic, Optional, TypeVar

from pydantic import BaseModel, Field

from unlingo.db.pagination import PageResult


T = TypeVar("T")


class ErrorContent(BaseModel):
    """Error information container."""

    code: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error message")
    details: Optional[dict[str, Any]] = Field(
        default=None,
        description="Additional error context",
    )


class ErrorResponse(BaseModel):
    """Standard error response format.

    Example:
        {
            "error": {
                "code": "LIMIT_REACHED",
                "message": "Project limit reached. Please upgrade your plan.",
                "details": {"resource_type": "projects", "limit": 1, "current": 1}
            }
        }
    """

    error: ErrorContent = Field(description="Error information")


class CursorPage(BaseModel, Generic[T]):
    """Cursor-paginated response wrapper.

    Pass `continue_cursor` back as `cursor` to load the next page.
    """

    page: list[T] = Field(description="Items for the current page")
    continue_cursor: str = Field(description="Opaque cursor for the next page")
    is_done: bool = Field(description="True when no more items remain")
    status: str = Field(description="CanLoadMore or Exhausted")

    @classmethod
    def from_result(
        cls, result: PageResult, convert: Callable[[Any], T]
    ) -> "CursorPage[T]":
        """Build a response page, converting each row with `convert`."""
        return cls(
            page=[convert(item) for item in result.page],
            continue_cursor=result.continue_cursor,
            is_done=result.is_done,
            status=result.status,
        )


class SuccessResponse(BaseModel):
    """Simple success response for operations without data."""

    success: bool = Field(default=True, description="Operation succeeded")
    message: Optional[str] = Field(
        default=None,
        description="Optional success message",
    )
