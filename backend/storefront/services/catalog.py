# storefront/services/catalog.py
"""
Catalog query construction.

CategoryResolver turns a category slug into an id; CatalogQueryBuilder turns
untrusted listing parameters into a partial ORM filter plus ListingOptions.
"""
import logging
from typing import Any, Tuple

from storefront.config import Settings
from storefront.core.errors import NotFoundError
from storefront.models.category import Category
from storefront.schemas.catalog import (
    SORT_FIELDS,
    DEFAULT_SORT_BY,
    CatalogQueryParams,
    ListingOptions,
)

logger = logging.getLogger(__name__)


class CategoryResolver:
    async def resolve_slug(self, slug: str) -> str:
        """
        Look up a category by exact slug.

        Raises:
            NotFoundError: no category has this slug. Callers treat this as
            "no product can match", not as a server error.
        """
        category = await Category.get_or_none(slug=slug)
        if not category:
            raise NotFoundError()
        return str(category.id)


class CatalogQueryBuilder:
    """
    Build `(filter, options)` for PaginationEngine from listing query params.

    The filter is partial: only constraints that were actually supplied
    appear as keys, plus the soft-delete exclusion which is always present.
    """

    def __init__(self, settings: Settings, resolver: CategoryResolver | None = None):
        self._default_per_page = settings.default_per_page
        self._max_per_page = settings.max_per_page
        self._resolver = resolver or CategoryResolver()

    async def build(self, params: CatalogQueryParams) -> Tuple[dict[str, Any], ListingOptions]:
        # 1) Category first: an unknown slug ends the request before any product query
        category_id = None
        if params.category:
            category_id = await self._resolver.resolve_slug(params.category)

        # 2) Partial filter
        query: dict[str, Any] = {"is_deleted": False}
        if category_id is not None:
            query["category_id"] = category_id
        if params.title:
            query["title__icontains"] = params.title

        # 3) Whitelisted sort field
        sort_field = SORT_FIELDS.get(params.sortBy, SORT_FIELDS[DEFAULT_SORT_BY])

        # 4) Options
        per_page = params.perpage or self._default_per_page
        per_page = min(per_page, self._max_per_page)
        options = ListingOptions(
            page=params.page,
            per_page=per_page,
            exclude=("isDeleted",),
            sort=(sort_field, params.sort),
        )
        logger.debug("catalog query built: filter=%s options=%s", query, options)
        return query, options
