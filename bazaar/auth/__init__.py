"""
Authentication
Password/token security, roles, and the session/role provider.
"""

from .roles import Role, SELLER_ROLES, fetch_user_roles, fetch_role_holders
from .session import (
    ANONYMOUS,
    SessionContext,
    SessionEvent,
    SessionEventType,
    SessionProvider,
    log_session_event,
)

__all__ = [
    "Role",
    "SELLER_ROLES",
    "fetch_user_roles",
    "fetch_role_holders",
    "ANONYMOUS",
    "SessionContext",
    "SessionEvent",
    "SessionEventType",
    "SessionProvider",
    "log_session_event",
]
