# storefront/services/pagination.py
"""
Paginated product queries.

`build_page_meta` holds all the page arithmetic so it can be checked
without a database; `PaginationEngine.paginate` runs the count and the
ordered offset/limit query and attaches the metadata.
"""
import math
from typing import Any

from storefront.models.product import Product
from storefront.schemas.catalog import ListingOptions, Page, PageMeta
from storefront.services.serializers import product_to_dict


def build_page_meta(item_count: int, page: int, per_page: int) -> PageMeta:
    """
    Compute pagination metadata.

    pageCount is ceil(itemCount / perPage), but never less than 1 so that an
    empty result still reports page 1 of 1.
    """
    page_count = max(math.ceil(item_count / per_page), 1)
    has_prev = page > 1
    has_next = page < page_count
    return PageMeta(
        itemCount=item_count,
        perPage=per_page,
        page=page,
        pageCount=page_count,
        hasPrevPage=has_prev,
        hasNextPage=has_next,
        prev=page - 1 if has_prev else None,
        next=page + 1 if has_next else None,
        slNo=(page - 1) * per_page + 1,
    )


class PaginationEngine:
    async def paginate(self, query: dict[str, Any], options: ListingOptions) -> Page:
        qs = Product.filter(**query)
        total = await qs.count()
        rows = []
        # A page past the end is empty; no row query is sent for it
        if options.offset < total:
            # id as a tie-breaker keeps pages stable when sort values repeat
            rows = await qs.order_by(options.order_by, "id").offset(options.offset).limit(options.per_page)
        meta = build_page_meta(total, options.page, options.per_page)
        items = [product_to_dict(p, exclude=options.exclude) for p in rows]
        return Page(itemsList=items, **meta.model_dump())
