# storefront/schemas/catalog.py
"""
Typed shapes for the product listing pipeline:
query parameters in, (filter, options) in the middle, Page out.
"""
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# sortBy value -> Product field. Anything else falls back to "price".
SORT_FIELDS: dict[str, str] = {
    "price": "price",
    "date": "created_at",
    "selling": "total_selling",
}
DEFAULT_SORT_BY = "price"
DEFAULT_DIRECTION = "desc"
# Upper bound for `page`; keeps (page - 1) * perpage inside a 64-bit OFFSET.
MAX_PAGE = 1_000_000


def _to_int(v: Any) -> Optional[int]:
    if v is None or isinstance(v, bool):
        return None
    try:
        n = int(str(v).strip())
    except (TypeError, ValueError):
        return None
    return n if n >= 1 else None


class CatalogQueryParams(BaseModel):
    """
    Recognised listing query parameters and their coercion rules.

    Never fails validation: unusable values fall back to their defaults.
        page     str -> int, invalid or < 1 -> 1, above MAX_PAGE -> MAX_PAGE
        perpage  str -> int, invalid or < 1 -> None (builder applies the configured default)
        sort     "asc" | "desc" (case-insensitive), anything else -> "desc"
        sortBy   "price" | "date" | "selling", anything else -> "price"
        title, category  stripped, empty -> None
    """
    page: int = 1
    perpage: Optional[int] = None
    sort: Literal["asc", "desc"] = DEFAULT_DIRECTION
    title: Optional[str] = None
    category: Optional[str] = None
    sortBy: str = DEFAULT_SORT_BY

    @field_validator("page", mode="before")
    @classmethod
    def _coerce_page(cls, v):
        return min(_to_int(v) or 1, MAX_PAGE)

    @field_validator("perpage", mode="before")
    @classmethod
    def _coerce_perpage(cls, v):
        return _to_int(v)

    @field_validator("sort", mode="before")
    @classmethod
    def _coerce_sort(cls, v):
        s = str(v).strip().lower() if v is not None else ""
        return s if s in ("asc", "desc") else DEFAULT_DIRECTION

    @field_validator("sortBy", mode="before")
    @classmethod
    def _coerce_sort_by(cls, v):
        return v if isinstance(v, str) and v in SORT_FIELDS else DEFAULT_SORT_BY

    @field_validator("title", "category", mode="before")
    @classmethod
    def _blank_to_none(cls, v):
        if v is None:
            return None
        s = str(v).strip()
        return s or None


class ListingOptions(BaseModel):
    """Sort/pagination options handed to the PaginationEngine."""
    model_config = ConfigDict(frozen=True)

    page: int = Field(ge=1)
    per_page: int = Field(ge=1)
    exclude: tuple[str, ...] = ("isDeleted",)  # Output fields never returned
    sort: tuple[str, Literal["asc", "desc"]] = ("price", "desc")

    @property
    def order_by(self) -> str:
        field, direction = self.sort
        return f"-{field}" if direction == "desc" else field

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page


class PageMeta(BaseModel):
    itemCount: int
    perPage: int
    page: int
    pageCount: int
    hasPrevPage: bool
    hasNextPage: bool
    prev: Optional[int] = None
    next: Optional[int] = None
    slNo: int


class Page(PageMeta):
    itemsList: list[dict]
