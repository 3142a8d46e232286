"""
Seller Dashboard
Management of the acting seller's own products.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from ..api.errors import AuthenticationRequiredError, PermissionDeniedError, ResourceNotFoundError
from ..auth.roles import SELLER_ROLES
from ..auth.session import SessionContext
from ..catalog.categories import DEFAULT_CATEGORY
from ..catalog.repository import ProductRepository
from ..db.models import Product
from ..storage.object_storage import ImageStore, ImageUpload
from .forms import DashboardForm

logger = logging.getLogger(__name__)

FIRST_PRODUCT_MESSAGE = "Congratulations on your first product!"
PRODUCT_CREATED_MESSAGE = "Product created"

EDITABLE_FIELDS = ("title", "description", "price", "category")


@dataclass
class ProductCreateResult:
    product: Product
    first_product: bool
    message: str


def require_seller(viewer: SessionContext) -> None:
    if not viewer.is_authenticated:
        raise AuthenticationRequiredError()
    if not viewer.has_any_role(*SELLER_ROLES):
        raise PermissionDeniedError("You need seller access to view this page.")


class SellerDashboard:
    """
    Seller's own-product CRUD.

    Every operation is restricted to products owned by the acting
    identity; other sellers' products are reported as not found.
    """

    def __init__(self, db: Session, images: ImageStore, viewer: SessionContext):
        require_seller(viewer)
        self.db = db
        self.images = images
        self.viewer = viewer
        self.products = ProductRepository(db)

    @property
    def seller_id(self) -> UUID:
        return self.viewer.user_id

    def _owned(self, product_id: UUID) -> Product:
        product = self.products.get(product_id)
        if product.seller_id != self.seller_id:
            logger.warning(f"Seller {self.seller_id} tried to access product {product_id}")
            raise ResourceNotFoundError("Product", product_id)
        return product

    def _store_image(self, image: Optional[ImageUpload]) -> Optional[str]:
        if image is None:
            return None
        return self.images.store(image, prefix=str(self.seller_id))

    def list_products(self) -> List[Product]:
        return self.products.list_by_seller(self.seller_id)

    def create_product(self, fields: Dict[str, Any],
                       image: Optional[ImageUpload] = None) -> ProductCreateResult:
        """
        Create a product owned by the acting seller.

        The image, when given, is size-checked and uploaded before the
        product row is written. The result flags the seller's first product.
        """
        if image is not None:
            self.images.validate(image)

        existing_count = self.products.count_by_seller(self.seller_id)

        form = DashboardForm("product", defaults={"category": DEFAULT_CATEGORY.value})
        form.open_new({name: fields[name] for name in EDITABLE_FIELDS if name in fields})

        def save(values: Dict[str, Any]) -> Product:
            image_url = self._store_image(image)
            return self.products.create(
                seller_id=self.seller_id,
                title=values["title"],
                description=values.get("description") or "",
                price=values["price"],
                category=values["category"],
                image_url=image_url,
            )

        product = form.submit(save)

        first_product = existing_count == 0
        if first_product:
            logger.info(f"First product for seller {self.seller_id}: {product.id}")

        return ProductCreateResult(
            product=product,
            first_product=first_product,
            message=FIRST_PRODUCT_MESSAGE if first_product else PRODUCT_CREATED_MESSAGE,
        )

    def update_product(self, product_id: UUID, changes: Dict[str, Any],
                       image: Optional[ImageUpload] = None) -> Product:
        """Edit fields of an owned product; a new image replaces the old one."""
        product = self._owned(product_id)
        if image is not None:
            self.images.validate(image)

        form = DashboardForm("product")
        form.open_existing(product.id, {name: getattr(product, name) for name in EDITABLE_FIELDS})
        form.update(**{name: value for name, value in changes.items() if name in EDITABLE_FIELDS})

        def save(values: Dict[str, Any]) -> Product:
            updates = dict(values)
            image_url = self._store_image(image)
            if image_url is not None:
                updates["image_url"] = image_url
            return self.products.update(product, updates)

        return form.submit(save)

    def toggle_availability(self, product_id: UUID) -> Product:
        product = self._owned(product_id)
        return self.products.update(product, {"is_available": not product.is_available})

    def delete_product(self, product_id: UUID) -> None:
        product = self._owned(product_id)
        self.products.delete(product)
