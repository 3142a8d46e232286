"""
Authentication routes.
Sign-up, sign-in, magic links, sign-out, token refresh, and the current identity.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Cookie, Depends, Response, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...auth.magic_link import MagicLinkSender
from ...auth.roles import Role
from ...auth.security import (
    MAGIC_LINK_TOKEN,
    REFRESH_TOKEN,
    create_access_token,
    create_magic_link_token,
    create_refresh_token,
    hash_password,
    verify_password,
    verify_token,
)
from ...auth.session import SessionContext, SessionProvider
from ...catalog.repository import commit_or_raise
from ...db.models import MagicLinkRedemption, Profile, UserRole, utcnow
from ..config import APISettings, get_settings
from ..dependencies import (
    get_db,
    get_magic_link_sender,
    get_session_context,
    get_session_provider,
)
from ..errors import AuthenticationRequiredError, ConflictError, PermissionDeniedError
from ..schemas.auth import (
    ErrorResponse,
    MagicLinkRequest,
    MagicLinkResponse,
    MagicLinkVerifyRequest,
    TokenResponse,
    UserLoginRequest,
    UserRegisterRequest,
    UserResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


def get_cookie_settings(settings: APISettings) -> dict:
    """
    Cookie settings for the current environment.

    Production is served over HTTPS to a separate frontend origin, so cookies
    are secure and samesite="none". Development uses samesite="lax" on localhost.
    """
    return {
        "httponly": True,
        "secure": settings.is_production,
        "samesite": "none" if settings.is_production else "lax",
        "path": "/",
    }


def user_response(user: Profile, context: SessionContext) -> UserResponse:
    # Profile.roles holds UserRole rows; the context carries the parsed set
    return UserResponse(
        id=user.id,
        email=user.email,
        full_name=user.full_name,
        created_at=user.created_at,
        is_active=user.is_active,
        last_login=user.last_login,
        roles=sorted(role.value for role in context.roles),
    )


def _start_session(
    response: Response,
    user: Profile,
    db: Session,
    provider: SessionProvider,
    settings: APISettings,
) -> TokenResponse:
    """Issue tokens as httpOnly cookies and announce the sign-in."""
    user.last_login = utcnow()
    commit_or_raise(db, "record sign-in")

    token_data = {"sub": str(user.id), "email": user.email}
    access_token = create_access_token(token_data)
    refresh_token = create_refresh_token(token_data)
    access_max_age = settings.access_token_expire_minutes * 60

    cookie_settings = get_cookie_settings(settings)
    response.set_cookie(key="access_token", value=access_token, max_age=access_max_age, **cookie_settings)
    response.set_cookie(
        key="refresh_token",
        value=refresh_token,
        max_age=settings.refresh_token_expire_days * 24 * 60 * 60,
        **cookie_settings,
    )

    context = provider.signed_in(db, user)
    return TokenResponse(
        access_token=access_token,
        refresh_token=refresh_token,
        expires_in=access_max_age,
        user=user_response(user, context),
    )


def _create_profile(db: Session, email: str, password_hash: str = "",
                    full_name: Optional[str] = None) -> Profile:
    """New profile holding the public role."""
    user = Profile(email=email, password_hash=password_hash, full_name=full_name, is_active=True)
    db.add(user)
    db.flush()
    db.add(UserRole(user_id=user.id, role=Role.PUBLIC.value))
    commit_or_raise(db, "create account")
    db.refresh(user)
    logger.info(f"Account created: user={user.id}")
    return user


def _find_by_email(db: Session, email: str) -> Optional[Profile]:
    return db.query(Profile).filter(Profile.email == email).first()


def _redeem_magic_link(db: Session, token_id: str, email: str) -> None:
    """Record the token as used; a second redemption is rejected."""
    db.add(MagicLinkRedemption(token_id=token_id, email=email))
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning("Rejected reused magic link")
        raise AuthenticationRequiredError("Magic link has already been used")


@router.post(
    "/register",
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse, "description": "Email already registered"}},
)
async def register(
    request: UserRegisterRequest,
    response: Response,
    db: Session = Depends(get_db),
    provider: SessionProvider = Depends(get_session_provider),
    settings: APISettings = Depends(get_settings),
) -> TokenResponse:
    """
    Register a new account and sign it in.

    The account receives the public role; seller and admin are granted by an admin.
    """
    email = request.email.lower()
    if _find_by_email(db, email) is not None:
        raise ConflictError("Email address already registered")

    user = _create_profile(db, email, hash_password(request.password), request.full_name)
    return _start_session(response, user, db, provider, settings)


@router.post(
    "/login",
    response_model=TokenResponse,
    responses={401: {"model": ErrorResponse, "description": "Invalid credentials"}},
)
async def login(
    request: UserLoginRequest,
    response: Response,
    db: Session = Depends(get_db),
    provider: SessionProvider = Depends(get_session_provider),
    settings: APISettings = Depends(get_settings),
) -> TokenResponse:
    user = _find_by_email(db, request.email.lower())
    if user is None or not verify_password(request.password, user.password_hash):
        logger.warning("Failed sign-in attempt")
        raise AuthenticationRequiredError("Incorrect email or password")

    if not user.is_active:
        raise PermissionDeniedError("Account is disabled")

    return _start_session(response, user, db, provider, settings)


@router.post("/magic-link", response_model=MagicLinkResponse, status_code=status.HTTP_202_ACCEPTED)
async def request_magic_link(
    request: MagicLinkRequest,
    sender: MagicLinkSender = Depends(get_magic_link_sender),
) -> MagicLinkResponse:
    """
    Send a one-time sign-in link.

    The response is the same whether or not the address has an account.
    """
    token = create_magic_link_token(request.email.lower())
    sender.send(request.email.lower(), token)
    return MagicLinkResponse()


@router.post(
    "/magic-link/verify",
    response_model=TokenResponse,
    responses={401: {"model": ErrorResponse, "description": "Invalid or expired link"}},
)
async def verify_magic_link(
    request: MagicLinkVerifyRequest,
    response: Response,
    db: Session = Depends(get_db),
    provider: SessionProvider = Depends(get_session_provider),
    settings: APISettings = Depends(get_settings),
) -> TokenResponse:
    """
    Exchange a magic link token for a session.

    An address without an account gets a new passwordless account.
    """
    payload = verify_token(request.token, expected_type=MAGIC_LINK_TOKEN)
    if not payload or not payload.get("email") or not payload.get("jti"):
        raise AuthenticationRequiredError("Magic link is invalid or has expired")

    email = payload["email"]
    _redeem_magic_link(db, payload["jti"], email)
    user = _find_by_email(db, email)
    if user is None:
        user = _create_profile(db, email)
    elif not user.is_active:
        raise PermissionDeniedError("Account is disabled")

    return _start_session(response, user, db, provider, settings)


@router.post("/logout")
async def logout(
    response: Response,
    viewer: SessionContext = Depends(get_session_context),
    provider: SessionProvider = Depends(get_session_provider),
    settings: APISettings = Depends(get_settings),
) -> dict:
    """Sign out by clearing the auth cookies."""
    cookie_settings = get_cookie_settings(settings)
    response.delete_cookie("access_token", **cookie_settings)
    response.delete_cookie("refresh_token", **cookie_settings)
    if viewer.is_authenticated:
        provider.signed_out(viewer.user_id)
    return {"message": "Successfully logged out"}


@router.post(
    "/refresh",
    response_model=TokenResponse,
    responses={401: {"model": ErrorResponse, "description": "Invalid refresh token"}},
)
async def refresh_access_token(
    response: Response,
    refresh_token: Optional[str] = Cookie(None),
    db: Session = Depends(get_db),
    provider: SessionProvider = Depends(get_session_provider),
    settings: APISettings = Depends(get_settings),
) -> TokenResponse:
    """Issue a new access token from the refresh token cookie."""
    if not refresh_token:
        raise AuthenticationRequiredError("Refresh token not found")

    payload = verify_token(refresh_token, expected_type=REFRESH_TOKEN)
    if not payload:
        raise AuthenticationRequiredError("Invalid refresh token")

    # Deleted or disabled accounts resolve to anonymous
    context = provider.context_for_subject(db, payload.get("sub"))
    if not context.is_authenticated:
        raise AuthenticationRequiredError("Invalid refresh token")

    user = context.user
    access_token = create_access_token({"sub": str(user.id), "email": user.email})
    access_max_age = settings.access_token_expire_minutes * 60
    response.set_cookie(
        key="access_token",
        value=access_token,
        max_age=access_max_age,
        **get_cookie_settings(settings),
    )

    return TokenResponse(
        access_token=access_token,
        expires_in=access_max_age,
        user=user_response(user, context),
    )


@router.get(
    "/me",
    response_model=UserResponse,
    responses={401: {"model": ErrorResponse, "description": "Not authenticated"}},
)
async def get_current_user(viewer: SessionContext = Depends(get_session_context)) -> UserResponse:
    """Current identity and the roles it holds."""
    if not viewer.is_authenticated:
        raise AuthenticationRequiredError("Not authenticated")
    return user_response(viewer.user, viewer)
