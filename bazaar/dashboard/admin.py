"""
Admin Dashboard
Sponsorship, carousel curation, and role assignment.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, List, Optional
from uuid import UUID

from sqlalchemy import asc
from sqlalchemy.orm import Session

from ..api.errors import (
    AuthenticationRequiredError,
    ConflictError,
    InvalidRequestError,
    PermissionDeniedError,
    ResourceNotFoundError,
)
from ..auth.roles import Role, parse_roles
from ..auth.session import SessionContext, SessionProvider
from ..catalog.carousel import CarouselRepository
from ..catalog.repository import ProductRepository, commit_or_raise
from ..db.models import CarouselItem, Product, Profile, UserRole
from ..storage.object_storage import ImageStore, ImageUpload
from .forms import DashboardForm

logger = logging.getLogger(__name__)

CAROUSEL_FIELDS = ("title", "subtitle", "link_url", "display_order", "is_active")


@dataclass
class UserWithRoles:
    profile: Profile
    roles: FrozenSet[Role]


def require_admin(viewer: SessionContext) -> None:
    if not viewer.is_authenticated:
        raise AuthenticationRequiredError()
    if not viewer.has_role(Role.ADMIN):
        raise PermissionDeniedError("Admin access required.")


class AdminDashboard:
    """Admin-only curation operations."""

    def __init__(self, db: Session, images: ImageStore, viewer: SessionContext,
                 sessions: SessionProvider):
        require_admin(viewer)
        self.db = db
        self.images = images
        self.viewer = viewer
        self.sessions = sessions
        self.products = ProductRepository(db)
        self.carousel = CarouselRepository(db)

    # Products

    def list_products(self) -> List[Product]:
        return self.products.list_products()

    def toggle_sponsorship(self, product_id: UUID) -> Product:
        product = self.products.get(product_id)
        product = self.products.update(product, {"is_sponsored": not product.is_sponsored})
        logger.info(f"Sponsorship {'added' if product.is_sponsored else 'removed'}: product={product_id}")
        return product

    # Carousel

    def list_carousel(self) -> List[CarouselItem]:
        return self.carousel.list_all()

    def create_carousel_item(self, fields: Dict[str, Any],
                             image: Optional[ImageUpload]) -> CarouselItem:
        """
        Add a carousel item. An image is required and capped at the
        carousel bucket's ceiling; nothing is uploaded if it is missing
        or too large.
        """
        if image is None:
            raise InvalidRequestError("Please select an image")
        self.images.validate(image)

        form = DashboardForm("carousel", defaults={"display_order": 0, "is_active": True})
        form.open_new({name: fields[name] for name in CAROUSEL_FIELDS if name in fields})

        def save(values: Dict[str, Any]) -> CarouselItem:
            image_url = self.images.store(image)
            return self.carousel.create({
                "image_url": image_url,
                "title": values.get("title") or None,
                "subtitle": values.get("subtitle") or None,
                "link_url": values.get("link_url") or None,
                "display_order": values.get("display_order", 0),
                "is_active": values.get("is_active", True),
            })

        return form.submit(save)

    def update_carousel_item(self, item_id: UUID, changes: Dict[str, Any],
                             image: Optional[ImageUpload] = None) -> CarouselItem:
        item = self.carousel.get(item_id)
        if image is not None:
            self.images.validate(image)

        form = DashboardForm("carousel")
        form.open_existing(item.id, {name: getattr(item, name) for name in CAROUSEL_FIELDS})
        form.update(**{name: value for name, value in changes.items() if name in CAROUSEL_FIELDS})

        def save(values: Dict[str, Any]) -> CarouselItem:
            updates = dict(values)
            if image is not None:
                updates["image_url"] = self.images.store(image)
            return self.carousel.update(item, updates)

        return form.submit(save)

    def delete_carousel_item(self, item_id: UUID) -> None:
        self.carousel.delete(self.carousel.get(item_id))

    # Roles

    def list_users(self) -> List[UserWithRoles]:
        profiles = self.db.query(Profile).order_by(asc(Profile.created_at)).all()
        role_rows = self.db.query(UserRole.user_id, UserRole.role).all()

        roles_by_user: Dict[UUID, List[str]] = {}
        for user_id, role in role_rows:
            roles_by_user.setdefault(user_id, []).append(role)

        return [
            UserWithRoles(profile=profile, roles=parse_roles(roles_by_user.get(profile.id, [])))
            for profile in profiles
        ]

    def _profile(self, user_id: UUID) -> Profile:
        profile = self.db.get(Profile, user_id)
        if profile is None:
            raise ResourceNotFoundError("User", user_id)
        return profile

    def _assignment(self, user_id: UUID, role: Role) -> Optional[UserRole]:
        return (
            self.db.query(UserRole)
            .filter(UserRole.user_id == user_id, UserRole.role == role.value)
            .first()
        )

    def grant_role(self, user_id: UUID, role: Role) -> FrozenSet[Role]:
        self._profile(user_id)
        if self._assignment(user_id, role) is not None:
            raise ConflictError(
                f"User already has the {role.value} role",
                details={"user_id": str(user_id), "role": role.value},
            )

        self.db.add(UserRole(user_id=user_id, role=role.value))
        commit_or_raise(self.db, "add role")
        logger.info(f"Role granted: user={user_id}, role={role.value}, by={self.viewer.user_id}")
        return self.sessions.roles_changed(self.db, user_id)

    def revoke_role(self, user_id: UUID, role: Role) -> FrozenSet[Role]:
        self._profile(user_id)
        assignment = self._assignment(user_id, role)
        if assignment is None:
            raise ResourceNotFoundError("Role assignment", f"{user_id}/{role.value}")

        # Not blocked: an admin may drop their own admin role
        if user_id == self.viewer.user_id and role == Role.ADMIN:
            logger.warning(f"Admin {user_id} is revoking their own admin role")

        self.db.delete(assignment)
        commit_or_raise(self.db, "remove role")
        logger.info(f"Role revoked: user={user_id}, role={role.value}, by={self.viewer.user_id}")
        return self.sessions.roles_changed(self.db, user_id)
