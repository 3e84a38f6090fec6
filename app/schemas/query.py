"""Filter / sort / page inputs for the query engine and the named queue views."""


from datetime import datetime, timezone
from typing import Literal

from pydantic import Field, field_validator

from app.schemas.common import CamelModel

SortField = Literal["created_at", "status"]
SortOrder = Literal["asc", "desc"]

class ListFilter(CamelModel):
    statuses: list[str] | None = None
    account_id: str | None = None
    created_from: datetime | None = None
    created_to: datetime | None = None

    @field_validator("created_from", "created_to")
    @classmethod
    def _as_utc(cls, value: datetime | None) -> datetime | None:
        # Timestamps are stored as naive UTC; naive input is taken as UTC
        if value is None or value.tzinfo is None:
            return value
        return value.astimezone(timezone.utc).replace(tzinfo=None)

class SortSpec(CamelModel):
    field: SortField = "created_at"
    order: SortOrder = "asc"

class PageRequest(CamelModel):
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1)
    snapshot_id: str | None = None

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit
