"""
Services Module

Business logic behind the HTTP routes:
- Accounts: signup, login, profile updates
- Catalog: category slug resolution and listing query construction
- Pagination: paged product queries with metadata
- Products: product creation and partial updates
"""
from .accounts import AccountService
from .catalog import CatalogQueryBuilder, CategoryResolver
from .pagination import PaginationEngine, build_page_meta
from .products import ProductService, slugify

__all__ = [
    "AccountService",
    "CatalogQueryBuilder",
    "CategoryResolver",
    "PaginationEngine",
    "build_page_meta",
    "ProductService",
    "slugify",
]
