# storefront/models/category.py
import uuid
from tortoise import fields, models


class Category(models.Model):
    """
    Product category. Owned by the catalog administrators; this service only
    reads it to resolve slugs from listing queries.
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    name = fields.CharField(max_length=128)
    slug = fields.CharField(max_length=128, unique=True)

    class Meta:
        table = "categories"
