"""
Product Repository
Query/mutation wrapper over the products table.

First stage of the listing pipeline: coarse, ordered fetches pushed down
to the database. Fine filtering happens in catalog.filters.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional
from uuid import UUID

from sqlalchemy import desc
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..api.errors import APIError, ConflictError, ResourceNotFoundError
from ..db.models import Product, Profile

logger = logging.getLogger(__name__)


def fetch_profiles(db: Session, user_ids: Iterable[UUID]) -> Dict[UUID, Profile]:
    """
    Batch-load profiles for a set of user ids.

    One query for the distinct ids, however many rows reference them.
    """
    distinct_ids = {user_id for user_id in user_ids if user_id is not None}
    if not distinct_ids:
        return {}
    rows = db.query(Profile).filter(Profile.id.in_(distinct_ids)).all()
    return {profile.id: profile for profile in rows}


def commit_or_raise(db: Session, action: str) -> None:
    """
    Commit the session; on failure roll back and raise an APIError
    carrying the database's message.
    """
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Constraint violation while trying to {action}: {e.orig}")
        raise ConflictError(message=f"Failed to {action}", details={"error": str(e.orig)})
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database error while trying to {action}: {e}", exc_info=True)
        raise APIError(message=f"Failed to {action}", details={"error": str(e)}, status_code=500)


class ProductRepository:
    """
    Data access for products.

    Every list method returns newest first.
    """

    def __init__(self, db: Session):
        self.db = db

    def get(self, product_id: UUID) -> Product:
        product = self.db.get(Product, product_id)
        if product is None:
            raise ResourceNotFoundError("Product", product_id)
        return product

    def list_products(self) -> List[Product]:
        return self.db.query(Product).order_by(desc(Product.created_at)).all()

    def list_by_seller(self, seller_id: UUID) -> List[Product]:
        return (
            self.db.query(Product)
            .filter(Product.seller_id == seller_id)
            .order_by(desc(Product.created_at))
            .all()
        )

    def count_by_seller(self, seller_id: UUID) -> int:
        return self.db.query(Product).filter(Product.seller_id == seller_id).count()

    def list_sponsored(self, limit: int) -> List[Product]:
        return (
            self.db.query(Product)
            .filter(Product.is_sponsored.is_(True), Product.is_available.is_(True))
            .order_by(desc(Product.created_at))
            .limit(limit)
            .all()
        )

    def create(
        self,
        seller_id: UUID,
        title: str,
        description: str,
        price: Decimal,
        category: str,
        image_url: Optional[str] = None,
    ) -> Product:
        product = Product(
            seller_id=seller_id,
            title=title,
            description=description,
            price=price,
            category=category,
            image_url=image_url,
        )
        self.db.add(product)
        commit_or_raise(self.db, "create product")
        self.db.refresh(product)
        logger.info(f"Created product: id={product.id}, seller={seller_id}")
        return product

    def update(self, product: Product, fields: Dict[str, Any]) -> Product:
        for name, value in fields.items():
            setattr(product, name, value)
        commit_or_raise(self.db, "update product")
        self.db.refresh(product)
        logger.info(f"Updated product: id={product.id}, fields={sorted(fields)}")
        return product

    def delete(self, product: Product) -> None:
        product_id = product.id
        self.db.delete(product)
        commit_or_raise(self.db, "delete product")
        logger.info(f"Deleted product: id={product_id}")
