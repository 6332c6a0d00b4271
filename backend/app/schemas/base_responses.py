"""
Base response schemas for standardized API responses.

Successful responses share one envelope:
    {"status": "success", "message": <optional>, "data": <payload>}
Errors use the envelope built in ``app.errors``.
"""

from typing import Generic, Literal, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Standard success envelope."""

    status: Literal["success"] = "success"
    message: Optional[str] = Field(default=None, description="Human-readable message")
    data: Optional[T] = Field(default=None, description="Response payload")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "status": "success",
                "message": "Session booked successfully",
                "data": {"session": {"id": "01HF4G12ABCDEF3456789XYZAB"}},
            }
        }
    )


class MessageResponse(BaseModel):
    """Success envelope without a payload."""

    status: Literal["success"] = "success"
    message: str = Field(description="Human-readable success message")


class PaginationMeta(BaseModel):
    """Paging block: totalPages == ceil(total / limit)."""

    page: int = Field(ge=1)
    limit: int = Field(ge=1)
    total: int = Field(ge=0)
    total_pages: int = Field(ge=0)

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "PaginationMeta":
        total_pages = (total + limit - 1) // limit
        return cls(page=page, limit=limit, total=total, total_pages=total_pages)
