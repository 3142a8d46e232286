"""
Product Endpoints
Public listing, sponsored products, categories, likes, and comments.
"""

import logging
from typing import Dict, Iterable, List
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ...auth.session import SessionContext
from ...catalog.categories import ALL_CATEGORIES, CATEGORY_VALUES, DEFAULT_CATEGORY
from ...catalog.filters import ListingFilter, ListingMode, apply_listing_filter
from ...catalog.repository import ProductRepository, fetch_profiles
from ...db.models import Product
from ...engagement import CommentService, LikeService
from ...engagement.comments import CommentView
from ...engagement.likes import LikeSummary
from ..config import APISettings, get_settings
from ..dependencies import get_comment_service, get_db, get_like_service, get_session_context
from ..schemas.auth import ErrorResponse
from ..schemas.engagement import (
    CommentCreateRequest,
    CommentFeedResponse,
    CommentResponse,
    LikeSummaryResponse,
)
from ..schemas.products import CategoryListResponse, ProductListResponse, ProductResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["products"])


def product_responses(db: Session, products: Iterable[Product]) -> List[ProductResponse]:
    """Convert products to responses, attaching seller emails from one batched lookup."""
    products = list(products)
    profiles = fetch_profiles(db, {product.seller_id for product in products})
    emails: Dict[UUID, str] = {user_id: profile.email for user_id, profile in profiles.items()}
    return [
        ProductResponse.model_validate(product).model_copy(
            update={"seller_email": emails.get(product.seller_id)}
        )
        for product in products
    ]


def _like_response(product_id: UUID, summary: LikeSummary) -> LikeSummaryResponse:
    return LikeSummaryResponse(
        product_id=product_id,
        like_count=summary.like_count,
        liked=summary.liked,
        admin_endorsed=summary.admin_endorsed,
    )


def _comment_response(comment: CommentView) -> CommentResponse:
    return CommentResponse.model_validate(comment)


@router.get("/products", response_model=ProductListResponse)
async def list_products(
    search: str = Query("", max_length=200, description="Matches title or description"),
    category: str = Query(ALL_CATEGORIES, description="Category name or 'all'"),
    mode: ListingMode = Query(ListingMode.ALL, description="Listing mode"),
    db: Session = Depends(get_db),
    settings: APISettings = Depends(get_settings),
) -> ProductListResponse:
    """
    Filtered product listing.

    The repository fetches every product newest first; the listing filter
    then applies text, category, and mode in that order.
    """
    listing_filter = ListingFilter(search_text=search, category=category, mode=mode)
    products = ProductRepository(db).list_products()
    filtered = apply_listing_filter(products, listing_filter, tz=settings.listing_tz)

    logger.debug(
        f"Listing: search={search!r}, category={category}, mode={mode.value}, "
        f"fetched={len(products)}, shown={len(filtered)}"
    )

    return ProductListResponse(products=product_responses(db, filtered), total=len(filtered))


@router.get("/products/sponsored", response_model=List[ProductResponse])
async def list_sponsored_products(
    db: Session = Depends(get_db),
    settings: APISettings = Depends(get_settings),
) -> List[ProductResponse]:
    """Sponsored products that are still available, newest first."""
    products = ProductRepository(db).list_sponsored(limit=settings.sponsored_limit)
    return product_responses(db, products)


@router.get("/categories", response_model=CategoryListResponse)
async def list_categories() -> CategoryListResponse:
    return CategoryListResponse(categories=list(CATEGORY_VALUES), default=DEFAULT_CATEGORY.value)


@router.get(
    "/products/{product_id}/likes",
    response_model=LikeSummaryResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_likes(
    product_id: UUID,
    viewer: SessionContext = Depends(get_session_context),
    likes: LikeService = Depends(get_like_service),
) -> LikeSummaryResponse:
    return _like_response(product_id, likes.get_summary(product_id, viewer))


@router.post(
    "/products/{product_id}/likes/toggle",
    response_model=LikeSummaryResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Not signed in"},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse, "description": "Product no longer available"},
    },
)
async def toggle_like(
    product_id: UUID,
    viewer: SessionContext = Depends(get_session_context),
    likes: LikeService = Depends(get_like_service),
) -> LikeSummaryResponse:
    """Like or unlike a product; returns the re-derived like state."""
    return _like_response(product_id, likes.toggle(product_id, viewer))


@router.get(
    "/products/{product_id}/comments",
    response_model=CommentFeedResponse,
    responses={404: {"model": ErrorResponse}},
)
async def list_comments(
    product_id: UUID,
    viewer: SessionContext = Depends(get_session_context),
    comments: CommentService = Depends(get_comment_service),
) -> CommentFeedResponse:
    feed = comments.list_comments(product_id, viewer)
    return CommentFeedResponse(
        comments=[_comment_response(comment) for comment in feed.comments],
        own_count=feed.own_count,
        quota=feed.quota,
        can_post=feed.can_post,
    )


@router.post(
    "/products/{product_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        401: {"model": ErrorResponse, "description": "Not signed in"},
        403: {"model": ErrorResponse, "description": "Seller role required"},
        409: {"model": ErrorResponse, "description": "Product no longer available"},
        429: {"model": ErrorResponse, "description": "Comment quota reached"},
    },
)
async def post_comment(
    product_id: UUID,
    request: CommentCreateRequest,
    viewer: SessionContext = Depends(get_session_context),
    comments: CommentService = Depends(get_comment_service),
) -> CommentResponse:
    return _comment_response(comments.post_comment(product_id, viewer, request.comment_text))
