"""
responses.py — Uniform response envelope and list pagination helpers.
"""

import math

from fastapi import Query
from pydantic import BaseModel

from errors import BadRequest

MAX_PAGE_SIZE = 100


def success(data=None, message: str | None = None, pagination: dict | None = None) -> dict:
    body = {"success": True}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = data
    if pagination is not None:
        body["pagination"] = pagination
    return body


class ListParams(BaseModel):
    page: int = 1
    limit: int = 10
    sort_by: str | None = None
    sort_order: str = "desc"

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def order_by(self, model, allowed: tuple[str, ...], default: str = "date"):
        """Resolve sort_by against a whitelist of model columns."""
        field = self.sort_by or default
        if field not in allowed:
            raise BadRequest(f"sort_by must be one of: {', '.join(allowed)}")
        column = getattr(model, field)
        return column.asc() if self.sort_order == "asc" else column.desc()

    def pagination(self, total: int) -> dict:
        total_pages = math.ceil(total / self.limit) if self.limit else 0
        return {
            "page": self.page,
            "limit": self.limit,
            "total": total,
            "total_pages": total_pages,
            "has_next_page": self.page < total_pages,
            "has_prev_page": self.page > 1,
        }


def list_params(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1),
    sort_by: str | None = None,
    sort_order: str = Query("desc", pattern="^(asc|desc)$"),
) -> ListParams:
    """FastAPI dependency — page size is silently capped at MAX_PAGE_SIZE."""
    return ListParams(page=page, limit=min(limit, MAX_PAGE_SIZE), sort_by=sort_by, sort_order=sort_order)
