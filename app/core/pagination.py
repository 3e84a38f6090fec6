"""Pagination helpers for list endpoints."""


from fastapi import Query
from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from app.core.config import settings
from app.schemas.query import PageRequest, SortSpec


class PaginationParams:
    """FastAPI dependency for `?page=1&limit=20&sort=created_at&order=desc&snapshot=...`.

    ``sort``/``order`` default to ``None`` so that named views keep their own
    default ordering unless the caller overrides it.
    """

    def __init__(
        self,
        page: int = Query(default=1, ge=1, description="Page number (1-based)"),
        limit: int = Query(
            default=20, ge=1, le=settings.max_page_size, description="Items per page"
        ),
        sort: str | None = Query(
            default=None, pattern="^(created_at|status)$", description="Sort field"
        ),
        order: str | None = Query(
            default=None, pattern="^(asc|desc)$", description="Sort order"
        ),
        snapshot: str | None = Query(
            default=None, description="Snapshot id returned by the first page"
        ),
    ):
        self.page = page
        self.limit = limit
        self.sort = sort
        self.order = order
        self.snapshot = snapshot

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def sort_spec(self, default: SortSpec | None = None) -> SortSpec | None:
        """The caller's sort, falling back field-by-field to *default*."""
        if self.sort is None and self.order is None:
            return default
        base = default or SortSpec()
        return SortSpec(field=self.sort or base.field, order=self.order or base.order)

    def page_request(self) -> PageRequest:
        return PageRequest(page=self.page, limit=self.limit, snapshot_id=self.snapshot)


class PageMeta(BaseModel):
    total: int
    page: int
    limit: int
    pages: int
    snapshot_id: str | None = None

    model_config = {"populate_by_name": True, "alias_generator": to_camel}
