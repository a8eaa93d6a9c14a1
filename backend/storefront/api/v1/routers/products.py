# storefront/api/v1/routers/products.py
from fastapi import APIRouter, Depends, Query, status

from storefront.api.v1.deps import (
    get_pagination_engine,
    get_product_service,
    get_query_builder,
    require_product_writer,
)
from storefront.core.errors import NotFoundError, ValidationError
from storefront.schemas.catalog import CatalogQueryParams
from storefront.schemas.product import ProductCreateIn, ProductUpdateIn
from storefront.services.catalog import CatalogQueryBuilder
from storefront.services.pagination import PaginationEngine
from storefront.services.products import ProductService
from storefront.services.serializers import product_to_dict

router = APIRouter(prefix="/products", tags=["products"])


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_product_writer)],
)
async def create_product(body: ProductCreateIn, products: ProductService = Depends(get_product_service)):
    """
    Create a new product (product-writer role required).

    Errors:
        401 not authenticated, 403 role too low,
        400 body fails validation, unknown category, or stock remain > quantity
    """
    product = await products.create(body.model_dump())
    return {"msg": "Product created successfully", "data": product_to_dict(product)}


@router.get("")
async def list_products(
    page: str | None = Query(default=None),
    perpage: str | None = Query(default=None),
    sort: str | None = Query(default=None, description="asc | desc"),
    title: str | None = Query(default=None, description="Case-insensitive title search"),
    category: str | None = Query(default=None, description="Category slug"),
    sortBy: str | None = Query(default=None, description="price | date | selling"),
    builder: CatalogQueryBuilder = Depends(get_query_builder),
    paginator: PaginationEngine = Depends(get_pagination_engine),
):
    """
    List products with pagination, title search, category filter and sorting.

    Query values arrive as raw strings and are coerced by CatalogQueryParams,
    so bad values fall back to defaults instead of failing.

    Returns:
        200 {"msg", "data": Page}

    Errors:
        404 unknown category slug (no product query is issued) or empty page
    """
    raw = {"page": page, "perpage": perpage, "sort": sort,
           "title": title, "category": category, "sortBy": sortBy}
    params = CatalogQueryParams.model_validate({k: v for k, v in raw.items() if v is not None})

    query, options = await builder.build(params)
    result = await paginator.paginate(query, options)
    if not result.itemsList:
        raise NotFoundError("The server not found any resources.")
    return {"msg": "The product list", "data": result.model_dump()}


@router.patch("", dependencies=[Depends(require_product_writer)])
async def update_product(body: ProductUpdateIn, products: ProductService = Depends(get_product_service)):
    """
    Partially update a product identified by `id` in the body.
    Setting isDeleted=true soft-deletes it.

    Errors:
        400 missing id / bad stock / unknown category, 401, 403, 404 unknown id
    """
    if not body.id:
        raise ValidationError("Missing product id")
    product = await products.update(body.id, body.changed_fields())
    return {"msg": "Product was updated successfully!", "data": product_to_dict(product)}
