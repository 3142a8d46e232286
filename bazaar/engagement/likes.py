"""
Likes
Per-(product, viewer) like toggling with admin-endorsement detection.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List
from uuid import UUID

from sqlalchemy.orm import Session

from ..api.errors import AuthenticationRequiredError, ProductUnavailableError
from ..auth.roles import Role, fetch_role_holders
from ..auth.session import SessionContext
from ..catalog.repository import ProductRepository, commit_or_raise
from ..db.models import ProductLike

logger = logging.getLogger(__name__)


@dataclass
class LikeSummary:
    """Derived like state of a product as seen by one viewer."""

    like_count: int
    liked: bool
    admin_endorsed: bool


def is_admin_endorsed(liker_ids: Iterable[UUID], admin_ids: Iterable[UUID]) -> bool:
    """True iff at least one liking identity holds the admin role."""
    return not set(liker_ids).isdisjoint(admin_ids)


class LikeService:
    """
    Like toggling and summary derivation.

    The summary is re-derived from the store after every toggle; it is
    never cached.
    """

    def __init__(self, db: Session):
        self.db = db
        self.products = ProductRepository(db)

    def _liker_ids(self, product_id: UUID) -> List[UUID]:
        rows = self.db.query(ProductLike.user_id).filter(ProductLike.product_id == product_id).all()
        return [user_id for (user_id,) in rows]

    def get_summary(self, product_id: UUID, viewer: SessionContext) -> LikeSummary:
        """
        Derive like count, the viewer's own state, and admin endorsement.

        Args:
            product_id: Product ID
            viewer: Session context of the viewer (may be anonymous)

        Returns:
            LikeSummary
        """
        self.products.get(product_id)

        liker_ids = self._liker_ids(product_id)
        admin_ids = fetch_role_holders(self.db, Role.ADMIN, liker_ids)

        return LikeSummary(
            like_count=len(liker_ids),
            liked=viewer.is_authenticated and viewer.user_id in liker_ids,
            admin_endorsed=is_admin_endorsed(liker_ids, admin_ids),
        )

    def toggle(self, product_id: UUID, viewer: SessionContext) -> LikeSummary:
        """
        Flip the viewer's like on a product.

        Raises:
            AuthenticationRequiredError: Viewer is not signed in
            ProductUnavailableError: Product is sold
        """
        if not viewer.is_authenticated:
            raise AuthenticationRequiredError("Please sign in to like products")

        product = self.products.get(product_id)
        if not product.is_available:
            raise ProductUnavailableError(product_id)

        existing = (
            self.db.query(ProductLike)
            .filter(
                ProductLike.product_id == product_id,
                ProductLike.user_id == viewer.user_id,
            )
            .first()
        )

        if existing is not None:
            self.db.delete(existing)
            commit_or_raise(self.db, "unlike product")
            logger.info(f"Unliked: product={product_id}, user={viewer.user_id}")
        else:
            self.db.add(ProductLike(product_id=product_id, user_id=viewer.user_id))
            commit_or_raise(self.db, "like product")
            logger.info(f"Liked: product={product_id}, user={viewer.user_id}")

        return self.get_summary(product_id, viewer)
