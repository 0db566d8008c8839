"""Shared schema building blocks: camelCase models and the response envelope."""

import math
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class ApiModel(BaseModel):
    """Base for API payloads; fields are exposed in camelCase."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ApiResponse(BaseModel, Generic[T]):
    """Success envelope returned by every endpoint."""

    success: bool = True
    message: str
    data: T | None = None


class ErrorResponse(BaseModel):
    """Error envelope produced by the exception handlers."""

    success: bool = False
    message: str
    errors: list[str] | None = None


class Page(ApiModel, Generic[T]):
    """One page of a paginated listing."""

    items: list[T]
    total: int
    page: int
    limit: int
    total_pages: int

    @classmethod
    def build(cls, items: list[T], total: int, page: int, limit: int) -> "Page[T]":
        return cls(
            items=items,
            total=total,
            page=page,
            limit=limit,
            total_pages=math.ceil(total / limit) if limit else 0,
        )
