"""
Product and carousel response schemas.
Seller and admin mutations arrive as multipart forms (see routers).
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class ProductResponse(BaseModel):
    """Product as returned by listing and dashboard endpoints."""

    id: UUID = Field(..., description="Product ID")
    title: str
    description: str
    price: Decimal = Field(..., description="Price with two decimal places; serialized as a string")
    image_url: Optional[str] = None
    category: str
    seller_id: UUID
    seller_email: Optional[str] = Field(None, description="Seller's email, when resolved")
    is_available: bool
    is_sponsored: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class ProductListResponse(BaseModel):
    products: List[ProductResponse]
    total: int = Field(..., description="Number of products after filtering")


class ProductCreateResponse(BaseModel):
    """Result of creating a product; first_product marks the seller's first listing."""

    product: ProductResponse
    first_product: bool = Field(..., description="True when this is the seller's first product")
    message: str


class CarouselItemResponse(BaseModel):
    id: UUID
    image_url: str
    title: Optional[str] = None
    subtitle: Optional[str] = None
    link_url: Optional[str] = None
    display_order: int
    is_active: bool

    model_config = {"from_attributes": True}


class CategoryListResponse(BaseModel):
    categories: List[str] = Field(..., description="Fixed product categories")
    default: str = Field(..., description="Category preselected for new products")
