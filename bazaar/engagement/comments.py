"""
Comments
Append-only per-product comment feed with a per-author posting quota.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List
from uuid import UUID

from sqlalchemy import desc
from sqlalchemy.orm import Session

from ..api.errors import (
    AuthenticationRequiredError,
    CommentQuotaExceededError,
    InvalidRequestError,
    PermissionDeniedError,
    ProductUnavailableError,
)
from ..auth.roles import SELLER_ROLES
from ..auth.session import SessionContext
from ..catalog.repository import ProductRepository, commit_or_raise, fetch_profiles
from ..db.models import Product, ProductComment

logger = logging.getLogger(__name__)

DEFAULT_COMMENT_QUOTA = 10
FALLBACK_AUTHOR_NAME = "Seller"


@dataclass
class CommentView:
    id: UUID
    product_id: UUID
    seller_id: UUID
    author_name: str
    comment_text: str
    created_at: datetime


@dataclass
class CommentFeed:
    """Comments of one product, newest first, plus the viewer's posting state."""

    comments: List[CommentView]
    own_count: int
    quota: int
    can_post: bool


def has_commenter_role(viewer: SessionContext) -> bool:
    return viewer.is_authenticated and viewer.has_any_role(*SELLER_ROLES)


def quota_allows(own_count: int, quota: int) -> bool:
    """A new comment is allowed only while the author holds fewer than quota."""
    return own_count < quota


class CommentService:
    """Reads and appends product comments."""

    def __init__(self, db: Session, quota: int = DEFAULT_COMMENT_QUOTA):
        self.db = db
        self.quota = quota
        self.products = ProductRepository(db)

    def _own_count(self, product_id: UUID, author_id: UUID) -> int:
        return (
            self.db.query(ProductComment)
            .filter(
                ProductComment.product_id == product_id,
                ProductComment.seller_id == author_id,
            )
            .count()
        )

    def _can_post(self, viewer: SessionContext, product: Product, own_count: int) -> bool:
        return (
            has_commenter_role(viewer)
            and product.is_available
            and quota_allows(own_count, self.quota)
        )

    def list_comments(self, product_id: UUID, viewer: SessionContext) -> CommentFeed:
        """
        Fetch the comment feed for a product.

        Author display names come from a single batched profile lookup
        over the distinct authors in the page.
        """
        product = self.products.get(product_id)

        rows = (
            self.db.query(ProductComment)
            .filter(ProductComment.product_id == product_id)
            .order_by(desc(ProductComment.created_at))
            .all()
        )

        profiles = fetch_profiles(self.db, (row.seller_id for row in rows))

        comments = []
        for row in rows:
            profile = profiles.get(row.seller_id)
            comments.append(
                CommentView(
                    id=row.id,
                    product_id=row.product_id,
                    seller_id=row.seller_id,
                    author_name=profile.display_name if profile else FALLBACK_AUTHOR_NAME,
                    comment_text=row.comment_text,
                    created_at=row.created_at,
                )
            )

        own_count = 0
        if viewer.is_authenticated:
            own_count = sum(1 for row in rows if row.seller_id == viewer.user_id)

        return CommentFeed(
            comments=comments,
            own_count=own_count,
            quota=self.quota,
            can_post=self._can_post(viewer, product, own_count),
        )

    def post_comment(self, product_id: UUID, viewer: SessionContext, text: str) -> CommentView:
        """
        Append a comment.

        The quota is checked by counting before the insert; concurrent
        submissions by the same author can exceed it.

        Raises:
            AuthenticationRequiredError: Viewer is not signed in
            PermissionDeniedError: Viewer holds neither seller nor admin role
            ProductUnavailableError: Product is sold
            InvalidRequestError: Blank comment
            CommentQuotaExceededError: Author already at quota
        """
        if not viewer.is_authenticated:
            raise AuthenticationRequiredError("Please sign in to comment")
        if not has_commenter_role(viewer):
            raise PermissionDeniedError("Only sellers can comment on products")

        product = self.products.get(product_id)
        if not product.is_available:
            raise ProductUnavailableError(product_id)

        body = (text or "").strip()
        if not body:
            raise InvalidRequestError("Comment text is required")

        own_count = self._own_count(product_id, viewer.user_id)
        if not quota_allows(own_count, self.quota):
            logger.warning(
                f"Comment quota reached: product={product_id}, author={viewer.user_id}, "
                f"count={own_count}"
            )
            raise CommentQuotaExceededError(self.quota, product_id)

        comment = ProductComment(product_id=product_id, seller_id=viewer.user_id, comment_text=body)
        self.db.add(comment)
        commit_or_raise(self.db, "post comment")
        self.db.refresh(comment)

        logger.info(f"Comment posted: id={comment.id}, product={product_id}, author={viewer.user_id}")

        return CommentView(
            id=comment.id,
            product_id=comment.product_id,
            seller_id=comment.seller_id,
            author_name=viewer.user.display_name,
            comment_text=comment.comment_text,
            created_at=comment.created_at,
        )
