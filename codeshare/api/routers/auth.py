"""Auth router: register, login, refresh, logout, current user, Google login."""

import secrets
from typing import Annotated
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import RedirectResponse

from codeshare.api.dependencies import (
    CurrentUserDep,
    StoreDep,
    TokensDep,
    get_oauth_client,
)
from codeshare.core.config import get_settings
from codeshare.core.errors import BadRequest, ServiceUnavailable, Unauthenticated
from codeshare.core.limiter import limiter
from codeshare.core.logging import get_logger
from codeshare.core.oauth import GoogleOAuthClient
from codeshare.core.tokens import InvalidTokenError
from codeshare.models.user import User
from codeshare.schemas.user import AuthOut, RefreshIn, TokenPairOut, UserLogin, UserOut, UserRegister

router = APIRouter(prefix="/auth", tags=["auth"])
logger = get_logger(__name__)

OAuthDep = Annotated[GoogleOAuthClient, Depends(get_oauth_client)]

_STATE_COOKIE = "oauth_state"


def _login_limit() -> str:
    return get_settings().login_rate_limit


@router.post("/register", response_model=AuthOut, status_code=status.HTTP_201_CREATED)
async def register(payload: UserRegister, store: StoreDep, tokens: TokensDep) -> AuthOut:
    """Create a local account and sign it in."""
    user = await store.create(payload.username, payload.email, payload.password)
    pair = tokens.issue_token_pair(user.id, user.username)
    await store.store_refresh_token(user, pair.refresh_token)
    return AuthOut(
        access_token=pair.access_token,
        refresh_token=pair.refresh_token,
        user=UserOut.model_validate(user),
    )


@router.post("/login", response_model=AuthOut)
@limiter.limit(_login_limit)
async def login(
    request: Request, payload: UserLogin, store: StoreDep, tokens: TokensDep
) -> AuthOut:
    """Authenticate with email + password. Replaces any previous refresh token."""
    user = await store.authenticate(payload.email, payload.password)
    pair = tokens.issue_token_pair(user.id, user.username)
    await store.store_refresh_token(user, pair.refresh_token)
    logger.info("User logged in", user_id=str(user.id))
    return AuthOut(
        access_token=pair.access_token,
        refresh_token=pair.refresh_token,
        user=UserOut.model_validate(user),
    )


@router.post("/refresh", response_model=TokenPairOut)
async def refresh(payload: RefreshIn, store: StoreDep, tokens: TokensDep) -> TokenPairOut:
    """Exchange the current refresh token for a new pair (rotation)."""
    try:
        decoded = tokens.verify_refresh_token(payload.refresh_token)
    except InvalidTokenError:
        raise Unauthenticated("Invalid refresh token") from None

    user = await store.find_by_id(decoded.user_id)
    if user is None or not store.refresh_token_matches(user, payload.refresh_token):
        raise Unauthenticated("Invalid refresh token")

    pair = tokens.issue_token_pair(user.id, user.username)
    await store.store_refresh_token(user, pair.refresh_token)
    return TokenPairOut(access_token=pair.access_token, refresh_token=pair.refresh_token)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(current_user: CurrentUserDep, store: StoreDep) -> None:
    """Revoke the stored refresh token. Access tokens expire on their own."""
    await store.clear_refresh_token(current_user)
    logger.info("User logged out", user_id=str(current_user.id))


@router.get("/me", response_model=UserOut)
async def get_me(current_user: CurrentUserDep) -> User:
    """Return the authenticated user's profile."""
    return current_user


# ── Google OAuth ──────────────────────────────────────────────────────────────

@router.get("/google", include_in_schema=False)
async def google_login(oauth: OAuthDep) -> RedirectResponse:
    if not get_settings().google_oauth_enabled:
        raise ServiceUnavailable("Google login is not configured")
    state = secrets.token_urlsafe(24)
    response = RedirectResponse(oauth.authorization_url(state), status_code=status.HTTP_302_FOUND)
    response.set_cookie(_STATE_COOKIE, state, max_age=600, httponly=True, samesite="lax")
    return response


@router.get("/google/callback", include_in_schema=False)
async def google_callback(
    request: Request,
    oauth: OAuthDep,
    store: StoreDep,
    tokens: TokensDep,
    code: str = "",
    state: str = "",
) -> Response:
    settings = get_settings()
    if not settings.google_oauth_enabled:
        raise ServiceUnavailable("Google login is not configured")

    expected = request.cookies.get(_STATE_COOKIE, "")
    if not code or not state or not expected or not secrets.compare_digest(state, expected):
        raise BadRequest("Invalid OAuth state")

    profile = await oauth.fetch_profile(code)
    user = await store.link_or_create_external(profile)
    pair = tokens.issue_token_pair(user.id, user.username)
    await store.store_refresh_token(user, pair.refresh_token)
    logger.info("External login", user_id=str(user.id), provider=profile.provider)

    query = urlencode({"token": pair.access_token, "refresh": pair.refresh_token})
    target = f"{settings.frontend_url.rstrip('/')}/auth/callback?{query}"
    response = RedirectResponse(target, status_code=status.HTTP_302_FOUND)
    response.delete_cookie(_STATE_COOKIE)
    return response
