# storefront/models/product.py
"""
Database model for catalog products.
"""
import uuid
from tortoise import fields, models


class Product(models.Model):
    """
    Product database model.

    - slug is derived from the title at creation and is NOT unique; the id is
      the authoritative identifier
    - stock_remain must never exceed stock_quantity (enforced by ProductService)
    - "deleting" a product flips is_deleted; listings always filter it out
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    category = fields.ForeignKeyField(
        "models.Category",
        related_name="products",
        null=True,
        on_delete=fields.SET_NULL,
    )
    title = fields.CharField(max_length=256)
    short_desc = fields.TextField()
    long_desc = fields.TextField(null=True)

    stock_quantity = fields.IntField(default=0)
    stock_remain = fields.IntField(default=0)

    color = fields.JSONField(default=list)  # Color variants, e.g. ["red", "black"]
    slug = fields.CharField(max_length=300, index=True)

    price = fields.IntField(default=0)
    sale_price = fields.IntField(null=True)
    total_selling = fields.IntField(default=0)  # Total units sold

    image_url = fields.CharField(max_length=1024)
    gallery_image = fields.JSONField(default=list)  # Ordered list of image URLs

    is_deleted = fields.BooleanField(default=False, index=True)

    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "products"
