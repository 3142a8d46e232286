"""
Session/Role Provider
Resolves the current identity and its roles, and notifies subscribers when
a session starts, ends, or a user's roles change.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from threading import Lock
from typing import Callable, FrozenSet, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from ..db.models import Profile
from .roles import Role, fetch_user_roles
from .security import ACCESS_TOKEN, verify_token

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionContext:
    """
    Per-request identity and role snapshot.

    Passed explicitly to services instead of living in global state.
    """

    user: Optional[Profile] = None
    roles: FrozenSet[Role] = frozenset()

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def user_id(self) -> Optional[UUID]:
        return self.user.id if self.user is not None else None

    def has_role(self, role: Role) -> bool:
        return role in self.roles

    def has_any_role(self, *roles: Role) -> bool:
        return any(role in self.roles for role in roles)


ANONYMOUS = SessionContext()


class SessionEventType(str, Enum):
    SIGNED_IN = "signed_in"
    SIGNED_OUT = "signed_out"
    ROLES_CHANGED = "roles_changed"


@dataclass(frozen=True)
class SessionEvent:
    """Change notification delivered to provider subscribers."""

    type: SessionEventType
    user_id: Optional[UUID]
    roles: FrozenSet[Role] = frozenset()
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


SessionListener = Callable[[SessionEvent], None]


class SessionProvider:
    """
    Session/role provider.

    Constructed once at application start and closed at shutdown.
    Dependents subscribe to receive SessionEvents.
    """

    def __init__(self):
        self._listeners: List[SessionListener] = []
        self._lock = Lock()
        self._closed = False

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """
        Register a listener.

        Returns:
            Callable that removes the listener again
        """
        with self._lock:
            if self._closed:
                raise RuntimeError("SessionProvider is closed")
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    @property
    def listener_count(self) -> int:
        with self._lock:
            return len(self._listeners)

    def emit(self, event: SessionEvent) -> None:
        """Deliver an event to every listener. A failing listener does not stop the rest."""
        with self._lock:
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(event)
            except Exception as e:
                logger.error(f"Session listener failed on {event.type.value}: {e}", exc_info=True)

    def resolve(self, db: Session, access_token: Optional[str]) -> SessionContext:
        """
        Build the session context for a request.

        Missing, invalid, or expired tokens, unknown users and disabled
        accounts all resolve to the anonymous context.
        """
        if not access_token:
            return ANONYMOUS

        payload = verify_token(access_token, expected_type=ACCESS_TOKEN)
        if not payload:
            return ANONYMOUS
        return self.context_for_subject(db, payload.get("sub"))

    def context_for_subject(self, db: Session, subject: Optional[str]) -> SessionContext:
        """Session context for a token subject (user id string)."""
        if not subject:
            return ANONYMOUS
        try:
            user_id = UUID(subject)
        except ValueError:
            return ANONYMOUS

        user = db.query(Profile).filter(Profile.id == user_id).first()
        if user is None or not user.is_active:
            return ANONYMOUS

        return SessionContext(user=user, roles=fetch_user_roles(db, user.id))

    def signed_in(self, db: Session, user: Profile) -> SessionContext:
        context = SessionContext(user=user, roles=fetch_user_roles(db, user.id))
        self.emit(SessionEvent(SessionEventType.SIGNED_IN, user.id, context.roles))
        return context

    def signed_out(self, user_id: Optional[UUID]) -> None:
        self.emit(SessionEvent(SessionEventType.SIGNED_OUT, user_id))

    def roles_changed(self, db: Session, user_id: UUID) -> FrozenSet[Role]:
        roles = fetch_user_roles(db, user_id)
        self.emit(SessionEvent(SessionEventType.ROLES_CHANGED, user_id, roles))
        return roles

    def close(self) -> None:
        with self._lock:
            self._listeners.clear()
            self._closed = True
        logger.info("Session provider closed")


def log_session_event(event: SessionEvent) -> None:
    """Default subscriber: audit trail of session changes."""
    roles = ",".join(sorted(role.value for role in event.roles)) or "-"
    logger.info(f"Session event: type={event.type.value}, user={event.user_id}, roles={roles}")
