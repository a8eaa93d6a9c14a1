# storefront/schemas/product.py
"""
Pydantic schemas for product endpoints.
Request bodies are validated here; a failure becomes a 400 at the HTTP boundary.
"""
from typing import List, Optional
from pydantic import BaseModel, Field


class StockIn(BaseModel):
    quantity: int = Field(default=0, ge=0)
    remain: Optional[int] = Field(default=None, ge=0)  # Defaults to quantity on create


class StockPatch(BaseModel):
    quantity: Optional[int] = Field(default=None, ge=0)
    remain: Optional[int] = Field(default=None, ge=0)


class ProductCreateIn(BaseModel):
    category: str  # Category id
    title: str = Field(min_length=1, max_length=256)
    shortDesc: str = Field(min_length=1)
    longDesc: Optional[str] = None
    stock: StockIn = Field(default_factory=StockIn)
    color: List[str] = Field(default_factory=list)
    price: int = Field(default=0, ge=0)
    sale_price: Optional[int] = Field(default=None, ge=0)
    image_url: str = Field(min_length=1, max_length=1024)
    gallery_image: List[str] = Field(default_factory=list)


class ProductUpdateIn(BaseModel):
    """
    Partial update keyed by id.
    `id` is optional here so that a missing id is reported as
    "Missing product id" rather than a schema error.
    """
    id: Optional[str] = None
    category: Optional[str] = None
    title: Optional[str] = Field(default=None, min_length=1, max_length=256)
    shortDesc: Optional[str] = Field(default=None, min_length=1)
    longDesc: Optional[str] = None
    stock: Optional[StockPatch] = None
    color: Optional[List[str]] = None
    price: Optional[int] = Field(default=None, ge=0)
    sale_price: Optional[int] = Field(default=None, ge=0)
    image_url: Optional[str] = Field(default=None, min_length=1, max_length=1024)
    gallery_image: Optional[List[str]] = None
    isDeleted: Optional[bool] = None

    def changed_fields(self) -> dict:
        """Fields explicitly provided with a non-null value, excluding `id`."""
        return self.model_dump(exclude={"id"}, exclude_unset=True, exclude_none=True)
