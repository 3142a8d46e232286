"""
Pytest configuration and shared fixtures
"""

import os

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENVIRONMENT", "test")

from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from bazaar.api.config import reset_settings
from bazaar.api.dependencies import get_db, get_magic_link_sender, get_object_storage
from bazaar.auth.magic_link import MagicLinkSender
from bazaar.auth.roles import Role
from bazaar.auth.security import create_access_token, hash_password
from bazaar.db.models import Base, CarouselItem, Product, Profile, UserRole
from bazaar.storage.object_storage import ObjectStorage

DEFAULT_PASSWORD = "secret123"


class RecordingStorage(ObjectStorage):
    """Object storage that keeps uploads in memory."""

    def __init__(self):
        super().__init__(client=None)
        self.uploads: List[Tuple[str, str, int]] = []

    def upload(self, bucket_name, key, data, content_type=None):
        self.uploads.append((bucket_name, key, len(data)))
        return self.public_url(bucket_name, key)


class RecordingMagicLinkSender(MagicLinkSender):
    def __init__(self):
        self.base_url = "http://localhost:3000/auth/callback"
        self.log_links = True
        self.sent: List[Tuple[str, str]] = []

    def send(self, email, token):
        self.sent.append((email, token))
        return super().send(email, token)


@pytest.fixture(autouse=True)
def fresh_settings():
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def db_engine():
    """In-memory SQLite shared by every session of one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(bind=db_engine, autoflush=False)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def storage():
    return RecordingStorage()


@pytest.fixture
def link_sender():
    return RecordingMagicLinkSender()


@pytest.fixture
def app(session_factory, storage, link_sender):
    from bazaar.api.main import create_app

    application = create_app()

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    application.dependency_overrides[get_db] = override_get_db
    application.dependency_overrides[get_object_storage] = lambda: storage
    application.dependency_overrides[get_magic_link_sender] = lambda: link_sender
    return application


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def session_provider(app, client):
    """The provider created by the running application's lifespan."""
    return app.state.session_provider


def make_user(
    db,
    email: str,
    roles: Iterable[Role] = (Role.PUBLIC,),
    full_name: Optional[str] = None,
    password: str = DEFAULT_PASSWORD,
) -> Profile:
    user = Profile(email=email, full_name=full_name, password_hash=hash_password(password))
    db.add(user)
    db.flush()
    for role in roles:
        db.add(UserRole(user_id=user.id, role=role.value))
    db.commit()
    return user


def make_product(db, seller: Profile, **fields) -> Product:
    values = {
        "title": "Desk lamp",
        "description": "Warm light, barely used",
        "price": Decimal("12.50"),
        "category": "Study Material",
    }
    values.update(fields)
    product = Product(seller_id=seller.id, **values)
    db.add(product)
    db.commit()
    return product


def make_carousel_item(db, **fields) -> CarouselItem:
    values = {"image_url": "https://storage.googleapis.com/carousel_images/1.png"}
    values.update(fields)
    item = CarouselItem(**values)
    db.add(item)
    db.commit()
    return item


def sign_in(client: TestClient, user: Profile) -> None:
    """Attach an access token cookie for the user to the client."""
    client.cookies.set("access_token", create_access_token({"sub": str(user.id)}))


def at(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


@pytest.fixture
def seller(db_session):
    return make_user(db_session, "seller@example.com", [Role.PUBLIC, Role.SELLER], "Sam Seller")


@pytest.fixture
def admin(db_session):
    return make_user(db_session, "admin@example.com", [Role.PUBLIC, Role.ADMIN], "Ada Admin")


@pytest.fixture
def buyer(db_session):
    return make_user(db_session, "buyer@example.com", [Role.PUBLIC])
