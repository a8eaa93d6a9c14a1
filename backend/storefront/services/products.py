# storefront/services/products.py
"""
Product writes: creation and partial update.

Reads go through CatalogQueryBuilder + PaginationEngine instead.
"""
import logging
import re
import unicodedata
import uuid

from storefront.core.errors import NotFoundError, ValidationError
from storefront.models.category import Category
from storefront.models.product import Product

logger = logging.getLogger(__name__)

_UNSAFE = re.compile(r"[^\w\s-]")
_SEPARATORS = re.compile(r"[\s_-]+")

# API field -> model field for the flat (non-stock) attributes
_FIELD_MAP = {
    "title": "title",
    "shortDesc": "short_desc",
    "longDesc": "long_desc",
    "color": "color",
    "price": "price",
    "sale_price": "sale_price",
    "image_url": "image_url",
    "gallery_image": "gallery_image",
    "isDeleted": "is_deleted",
}


def slugify(title: str) -> str:
    """
    Derive a URL-safe slug from a product title.
    Case is preserved ("iPhone 14" -> "iPhone-14"); accents are folded to ASCII.
    Not unique: two products with the same title share a slug.
    """
    text = unicodedata.normalize("NFKD", title).encode("ascii", "ignore").decode("ascii")
    text = _UNSAFE.sub("", text).strip()
    return _SEPARATORS.sub("-", text).strip("-")


def _check_stock(quantity: int, remain: int) -> None:
    if remain > quantity:
        raise ValidationError("Stock remain cannot exceed stock quantity")


def _as_uuid(value) -> uuid.UUID | None:
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


async def _category_exists(category_id: str) -> bool:
    cid = _as_uuid(category_id)
    return cid is not None and await Category.filter(id=cid).exists()


class ProductService:
    async def create(self, data: dict) -> Product:
        """
        Create a product from validated fields (ProductCreateIn.model_dump()).

        Raises:
            ValidationError: unknown category, or stock remain > quantity
        """
        if not await _category_exists(data["category"]):
            raise ValidationError("Category not found")

        stock = data.get("stock") or {}
        quantity = stock.get("quantity", 0)
        remain = stock.get("remain")
        if remain is None:
            remain = quantity
        _check_stock(quantity, remain)

        product = await Product.create(
            category_id=data["category"],
            title=data["title"],
            short_desc=data["shortDesc"],
            long_desc=data.get("longDesc"),
            stock_quantity=quantity,
            stock_remain=remain,
            color=list(data.get("color") or []),
            slug=slugify(data["title"]),
            price=data.get("price", 0),
            sale_price=data.get("sale_price"),
            image_url=data["image_url"],
            gallery_image=list(data.get("gallery_image") or []),
        )
        logger.info("[products] created id=%s slug=%s", product.id, product.slug)
        return product

    async def update(self, product_id: str, fields: dict) -> Product:
        """
        Apply a partial update. Only keys present in `fields` are touched;
        the slug keeps its creation-time value.

        Raises:
            NotFoundError: no product with this id
            ValidationError: unknown category, or merged stock breaks remain <= quantity
        """
        pid = _as_uuid(product_id)
        product = await Product.get_or_none(id=pid) if pid else None
        if not product:
            raise NotFoundError("Product not found")

        if "category" in fields:
            if not await _category_exists(fields["category"]):
                raise ValidationError("Category not found")
            product.category_id = fields["category"]

        for api_name, model_name in _FIELD_MAP.items():
            if api_name in fields:
                setattr(product, model_name, fields[api_name])

        stock = fields.get("stock")
        if stock:
            quantity = stock.get("quantity", product.stock_quantity)
            remain = stock.get("remain", product.stock_remain)
            _check_stock(quantity, remain)
            product.stock_quantity = quantity
            product.stock_remain = remain

        await product.save()
        logger.info("[products] updated id=%s fields=%s", product.id, sorted(fields))
        return product
