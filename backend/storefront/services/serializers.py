# storefront/services/serializers.py
"""
Model -> API dict conversion shared by routers and services.
"""
from typing import Iterable

from storefront.models.product import Product
from storefront.models.user import User


def _iso(value) -> str | None:
    return value.isoformat() if value else None


def user_to_dict(u: User) -> dict:
    """
    Convert User model instance to dictionary format for API responses.
    The password hash is never included.
    """
    return {
        "id": str(u.id),
        "fullname": u.fullname,
        "username": u.username,
        "email": u.email,
        "role": u.role,
        "createdAt": _iso(u.created_at),
    }


def product_to_dict(p: Product, exclude: Iterable[str] = ()) -> dict:
    """
    Convert Product model instance to dictionary format for API responses.

    Args:
        p: Product model instance
        exclude: Output keys to drop (listings drop "isDeleted")
    """
    data = {
        "id": str(p.id),
        "category": str(p.category_id) if p.category_id else None,
        "title": p.title,
        "shortDesc": p.short_desc,
        "longDesc": p.long_desc,
        "stock": {"quantity": p.stock_quantity, "remain": p.stock_remain},
        "color": list(p.color or []),
        "slug": p.slug,
        "price": p.price,
        "sale_price": p.sale_price,
        "total_selling": p.total_selling,
        "image_url": p.image_url,
        "gallery_image": list(p.gallery_image or []),
        "isDeleted": p.is_deleted,
        "createdAt": _iso(p.created_at),
        "updatedAt": _iso(p.updated_at),
    }
    for key in exclude:
        data.pop(key, None)
    return data
