"""
Roles
The finite role set and role lookups.
"""

import logging
from enum import Enum
from typing import FrozenSet, Iterable, List, Set
from uuid import UUID

from sqlalchemy.orm import Session

from ..db.models import UserRole

logger = logging.getLogger(__name__)


class Role(str, Enum):
    """Roles gating which mutations a user may attempt."""

    PUBLIC = "public"
    SELLER = "seller"
    ADMIN = "admin"


# Roles allowed to manage listings and post comments
SELLER_ROLES = frozenset({Role.SELLER, Role.ADMIN})


def parse_roles(values: Iterable[str]) -> FrozenSet[Role]:
    """Convert stored role strings to Role members, skipping unknown values."""
    roles: Set[Role] = set()
    for value in values:
        try:
            roles.add(Role(value))
        except ValueError:
            logger.warning(f"Ignoring unknown role value: {value!r}")
    return frozenset(roles)


def fetch_user_roles(db: Session, user_id: UUID) -> FrozenSet[Role]:
    """Load the roles currently held by a user."""
    rows = db.query(UserRole.role).filter(UserRole.user_id == user_id).all()
    return parse_roles(role for (role,) in rows)


def fetch_role_holders(db: Session, role: Role, user_ids: List[UUID]) -> Set[UUID]:
    """Return the subset of user_ids holding the given role."""
    if not user_ids:
        return set()
    rows = (
        db.query(UserRole.user_id)
        .filter(UserRole.role == role.value, UserRole.user_id.in_(user_ids))
        .all()
    )
    return {user_id for (user_id,) in rows}
