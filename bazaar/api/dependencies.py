"""
Dependency Injection
FastAPI dependencies for database, session context, storage, and services.
"""

import logging
from typing import Generator, Optional

from fastapi import Cookie, Depends, Request
from sqlalchemy.orm import Session

from ..auth.session import SessionContext, SessionProvider
from ..auth.magic_link import MagicLinkSender
from ..db.session import get_session_factory
from ..dashboard import AdminDashboard, SellerDashboard
from ..engagement import CommentService, LikeService
from ..storage.object_storage import ImageStore, ObjectStorage
from .config import APISettings, get_settings

logger = logging.getLogger(__name__)

_object_storage: Optional[ObjectStorage] = None


def get_db() -> Generator[Session, None, None]:
    """
    Get database session.

    Use as FastAPI dependency:
        @app.get("/endpoint")
        def endpoint(db: Session = Depends(get_db)):
            ...
    """
    SessionLocal = get_session_factory()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_session_provider(request: Request) -> SessionProvider:
    """Session provider created in the application lifespan."""
    return request.app.state.session_provider


def get_session_context(
    access_token: Optional[str] = Cookie(None),
    db: Session = Depends(get_db),
    provider: SessionProvider = Depends(get_session_provider),
) -> SessionContext:
    """
    Resolve the viewer's session context from the access token cookie.

    Anonymous viewers get an empty context; routes decide whether that is
    acceptable.
    """
    return provider.resolve(db, access_token)


def get_object_storage() -> ObjectStorage:
    """Get object storage wrapper (singleton)."""
    global _object_storage
    if _object_storage is None:
        _object_storage = ObjectStorage()
    return _object_storage


def get_product_images(
    storage: ObjectStorage = Depends(get_object_storage),
    settings: APISettings = Depends(get_settings),
) -> ImageStore:
    return ImageStore(storage, settings.product_image_bucket, settings.product_image_max_bytes)


def get_carousel_images(
    storage: ObjectStorage = Depends(get_object_storage),
    settings: APISettings = Depends(get_settings),
) -> ImageStore:
    return ImageStore(storage, settings.carousel_image_bucket, settings.carousel_image_max_bytes)


def get_magic_link_sender(settings: APISettings = Depends(get_settings)) -> MagicLinkSender:
    return MagicLinkSender(settings)


def get_like_service(db: Session = Depends(get_db)) -> LikeService:
    return LikeService(db)


def get_comment_service(
    db: Session = Depends(get_db), settings: APISettings = Depends(get_settings)
) -> CommentService:
    return CommentService(db, quota=settings.comment_quota)


def get_seller_dashboard(
    db: Session = Depends(get_db),
    images: ImageStore = Depends(get_product_images),
    viewer: SessionContext = Depends(get_session_context),
) -> SellerDashboard:
    """Seller dashboard for the viewer; rejects anonymous and non-seller viewers."""
    return SellerDashboard(db, images, viewer)


def get_admin_dashboard(
    db: Session = Depends(get_db),
    images: ImageStore = Depends(get_carousel_images),
    viewer: SessionContext = Depends(get_session_context),
    provider: SessionProvider = Depends(get_session_provider),
) -> AdminDashboard:
    """Admin dashboard for the viewer; rejects viewers without the admin role."""
    return AdminDashboard(db, images, viewer, provider)

