"""
Carousel Repository
Data access for admin-curated carousel items.
"""

import logging
from typing import Any, Dict, List
from uuid import UUID

from sqlalchemy import asc
from sqlalchemy.orm import Session

from ..api.errors import ResourceNotFoundError
from ..db.models import CarouselItem
from .repository import commit_or_raise

logger = logging.getLogger(__name__)


class CarouselRepository:
    """Carousel items, always ordered by display_order ascending."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, item_id: UUID) -> CarouselItem:
        item = self.db.get(CarouselItem, item_id)
        if item is None:
            raise ResourceNotFoundError("Carousel item", item_id)
        return item

    def list_all(self) -> List[CarouselItem]:
        return (
            self.db.query(CarouselItem)
            .order_by(asc(CarouselItem.display_order), asc(CarouselItem.created_at))
            .all()
        )

    def list_active(self) -> List[CarouselItem]:
        return (
            self.db.query(CarouselItem)
            .filter(CarouselItem.is_active.is_(True))
            .order_by(asc(CarouselItem.display_order), asc(CarouselItem.created_at))
            .all()
        )

    def create(self, fields: Dict[str, Any]) -> CarouselItem:
        item = CarouselItem(**fields)
        self.db.add(item)
        commit_or_raise(self.db, "create carousel item")
        self.db.refresh(item)
        logger.info(f"Created carousel item: id={item.id}, order={item.display_order}")
        return item

    def update(self, item: CarouselItem, fields: Dict[str, Any]) -> CarouselItem:
        for name, value in fields.items():
            setattr(item, name, value)
        commit_or_raise(self.db, "update carousel item")
        self.db.refresh(item)
        logger.info(f"Updated carousel item: id={item.id}, fields={sorted(fields)}")
        return item

    def delete(self, item: CarouselItem) -> None:
        item_id = item.id
        self.db.delete(item)
        commit_or_raise(self.db, "delete carousel item")
        logger.info(f"Deleted carousel item: id={item_id}")
