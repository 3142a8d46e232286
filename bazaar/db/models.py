"""
SQLAlchemy ORM Models
Database table definitions using SQLAlchemy ORM.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Column, String, Integer, Boolean, DateTime, ForeignKey, Numeric, Text, Index, Uuid,
    CheckConstraint,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Profile(Base):
    """
    Profile model.

    Identity record for every account: credentials, display name, status.
    """
    __tablename__ = 'profiles'

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String(255), unique=True, index=True, nullable=False,
                   comment='User email address (required for authentication)')
    full_name = Column(String(255), nullable=True,
                       comment='Display name shown on comments')

    # Authentication fields
    password_hash = Column(String(255), nullable=False, default='',
                           comment='Bcrypt hashed password (empty for magic-link accounts)')
    is_active = Column(Boolean, nullable=False, default=True,
                       comment='Whether user account is active')
    last_login = Column(DateTime(timezone=True), nullable=True,
                        comment='Timestamp of last successful login')

    # Timestamps
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    # Relationships
    roles = relationship("UserRole", back_populates="user", cascade="all, delete-orphan")
    products = relationship("Product", back_populates="seller", cascade="all, delete-orphan")

    @property
    def display_name(self) -> str:
        """Full name, falling back to email, falling back to "Seller"."""
        return self.full_name or self.email or "Seller"

    def __repr__(self):
        return f"<Profile(id={self.id}, email={self.email})>"


class UserRole(Base):
    """
    Role assignment model.

    One row per (user, role); a user may hold several roles.
    """
    __tablename__ = 'user_roles'

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey('profiles.id', ondelete='CASCADE'),
                     nullable=False, index=True)
    role = Column(String(20), nullable=False, index=True,
                  comment='Role: public, seller, admin')
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    user = relationship("Profile", back_populates="roles")

    __table_args__ = (
        Index('idx_user_roles_user_role', 'user_id', 'role', unique=True),
    )

    def __repr__(self):
        return f"<UserRole(user_id={self.user_id}, role={self.role})>"


class Product(Base):
    """
    Product model.

    A seller's listing. Mutated by its seller (fields, availability)
    or by an admin (sponsorship only).
    """
    __tablename__ = 'products'

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # Core product info
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=False, default='')
    price = Column(Numeric(10, 2), nullable=False)
    image_url = Column(Text, nullable=True)
    category = Column(String(50), nullable=False, index=True)

    # Ownership
    seller_id = Column(Uuid(as_uuid=True), ForeignKey('profiles.id', ondelete='CASCADE'),
                       nullable=False, index=True)

    # Flags
    is_available = Column(Boolean, nullable=False, default=True, index=True,
                          comment='False means sold')
    is_sponsored = Column(Boolean, nullable=False, default=False, index=True,
                          comment='Admin-controlled promotional flag')

    # Timestamps
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    # Relationships
    seller = relationship("Profile", back_populates="products")
    likes = relationship("ProductLike", back_populates="product", cascade="all, delete-orphan")
    comments = relationship("ProductComment", back_populates="product", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint('price >= 0', name='ck_products_price_non_negative'),
    )

    def __repr__(self):
        return f"<Product(id={self.id}, title={self.title[:30]})>"


class ProductLike(Base):
    """
    Product like model.

    At most one like per (product, user).
    """
    __tablename__ = 'product_likes'

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    product_id = Column(Uuid(as_uuid=True), ForeignKey('products.id', ondelete='CASCADE'),
                        nullable=False, index=True)
    user_id = Column(Uuid(as_uuid=True), ForeignKey('profiles.id', ondelete='CASCADE'),
                     nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    product = relationship("Product", back_populates="likes")

    __table_args__ = (
        Index('idx_product_likes_product_user', 'product_id', 'user_id', unique=True),
    )

    def __repr__(self):
        return f"<ProductLike(product_id={self.product_id}, user_id={self.user_id})>"


class ProductComment(Base):
    """
    Product comment model.

    Append-only; written by seller- or admin-role users.
    """
    __tablename__ = 'product_comments'

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    product_id = Column(Uuid(as_uuid=True), ForeignKey('products.id', ondelete='CASCADE'),
                        nullable=False)
    seller_id = Column(Uuid(as_uuid=True), ForeignKey('profiles.id', ondelete='CASCADE'),
                       nullable=False, index=True, comment='Authoring identity')
    comment_text = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    product = relationship("Product", back_populates="comments")

    __table_args__ = (
        Index('idx_product_comments_product_created', 'product_id', 'created_at'),
    )

    def __repr__(self):
        return f"<ProductComment(id={self.id}, product_id={self.product_id})>"


class CarouselItem(Base):
    """
    Carousel item model.

    Admin-curated promotional slide; rendered in display_order.
    """
    __tablename__ = 'carousel'

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    image_url = Column(Text, nullable=False)
    title = Column(String(255), nullable=True)
    subtitle = Column(String(255), nullable=True)
    link_url = Column(Text, nullable=True)
    display_order = Column(Integer, nullable=False, default=0, index=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self):
        return f"<CarouselItem(id={self.id}, order={self.display_order})>"


class MagicLinkRedemption(Base):
    """
    Magic link redemption model.

    One row per redeemed link token; a token id may be redeemed once.
    """
    __tablename__ = 'magic_link_redemptions'

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    token_id = Column(String(64), unique=True, nullable=False,
                      comment='jti claim of the redeemed token')
    email = Column(String(255), nullable=False)
    redeemed_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self):
        return f"<MagicLinkRedemption(token_id={self.token_id})>"
