"""
Seller Dashboard Endpoints
Own-product management for sellers (and admins).

Create and update accept multipart forms so an image can travel with the
product fields.
"""

import logging
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.orm import Session

from ...catalog.categories import DEFAULT_CATEGORY, ProductCategory
from ...dashboard import SellerDashboard
from ..dependencies import get_db, get_seller_dashboard
from ..errors import InvalidRequestError
from ..schemas.auth import ErrorResponse
from ..schemas.products import ProductCreateResponse, ProductResponse
from ..uploads import read_image_upload
from .products import product_responses

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/seller",
    tags=["seller"],
    responses={
        401: {"model": ErrorResponse, "description": "Not signed in"},
        403: {"model": ErrorResponse, "description": "Seller role required"},
    },
)


def _clean_title(title: str) -> str:
    title = title.strip()
    if not title:
        raise InvalidRequestError("Title is required")
    return title


@router.get("/products", response_model=List[ProductResponse])
async def list_own_products(
    dashboard: SellerDashboard = Depends(get_seller_dashboard),
    db: Session = Depends(get_db),
) -> List[ProductResponse]:
    """The acting seller's products, newest first."""
    return product_responses(db, dashboard.list_products())


@router.post(
    "/products",
    response_model=ProductCreateResponse,
    status_code=status.HTTP_201_CREATED,
    responses={413: {"model": ErrorResponse, "description": "Image larger than 1 MiB"}},
)
async def create_product(
    title: str = Form(..., min_length=1, max_length=200),
    price: Decimal = Form(..., ge=0, max_digits=10, decimal_places=2),
    description: str = Form("", max_length=5000),
    category: ProductCategory = Form(DEFAULT_CATEGORY),
    image: Optional[UploadFile] = File(None),
    dashboard: SellerDashboard = Depends(get_seller_dashboard),
    db: Session = Depends(get_db),
) -> ProductCreateResponse:
    """
    Create a product.

    `first_product` is true when the seller had no products before this one.
    """
    fields = {
        "title": _clean_title(title),
        "description": description,
        "price": price,
        "category": category.value,
    }
    upload = await read_image_upload(image, dashboard.images.max_bytes)
    result = dashboard.create_product(fields, upload)

    return ProductCreateResponse(
        product=product_responses(db, [result.product])[0],
        first_product=result.first_product,
        message=result.message,
    )


@router.patch(
    "/products/{product_id}",
    response_model=ProductResponse,
    responses={
        404: {"model": ErrorResponse, "description": "Not found or not owned"},
        413: {"model": ErrorResponse, "description": "Image larger than 1 MiB"},
    },
)
async def update_product(
    product_id: UUID,
    title: Optional[str] = Form(None, max_length=200),
    price: Optional[Decimal] = Form(None, ge=0, max_digits=10, decimal_places=2),
    description: Optional[str] = Form(None, max_length=5000),
    category: Optional[ProductCategory] = Form(None),
    image: Optional[UploadFile] = File(None),
    dashboard: SellerDashboard = Depends(get_seller_dashboard),
    db: Session = Depends(get_db),
) -> ProductResponse:
    """Edit an owned product. Omitted fields keep their values."""
    changes = {}
    if title is not None:
        changes["title"] = _clean_title(title)
    if price is not None:
        changes["price"] = price
    if description is not None:
        changes["description"] = description
    if category is not None:
        changes["category"] = category.value

    upload = await read_image_upload(image, dashboard.images.max_bytes)

    product = dashboard.update_product(product_id, changes, upload)
    return product_responses(db, [product])[0]


@router.post(
    "/products/{product_id}/availability/toggle",
    response_model=ProductResponse,
    responses={404: {"model": ErrorResponse, "description": "Not found or not owned"}},
)
async def toggle_availability(
    product_id: UUID,
    dashboard: SellerDashboard = Depends(get_seller_dashboard),
    db: Session = Depends(get_db),
) -> ProductResponse:
    """Mark an owned product sold, or available again."""
    return product_responses(db, [dashboard.toggle_availability(product_id)])[0]


@router.delete(
    "/products/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse, "description": "Not found or not owned"}},
)
async def delete_product(
    product_id: UUID,
    dashboard: SellerDashboard = Depends(get_seller_dashboard),
) -> None:
    """Delete an owned product with its likes and comments."""
    dashboard.delete_product(product_id)
