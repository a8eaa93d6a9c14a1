# storefront/models/__init__.py
"""
Database models module initialization.
Exports all Tortoise ORM models for convenient imports.

Models exported:
- User: Account and authentication model
- Category: Product category (slug -> id)
- Product: Catalog product with soft-delete flag
"""
from .user import User
from .category import Category
from .product import Product
