"""FastAPI dependency providers.

Identity resolution runs as a dependency in two variants:

* :func:`get_current_user` rejects the request with a generic 401 when the
  bearer token is missing, malformed, invalid, expired, or names a user
  that no longer exists;
* :func:`get_optional_user` runs the same resolution but yields ``None``
  on any failure so anonymous callers still get through.

Both attach the resolved user to ``request.state.user`` (the rate limiter
keys on it).
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from codeshare.core.ai import ExplanationService
from codeshare.core.config import get_settings
from codeshare.core.credentials import CredentialStore
from codeshare.core.database import get_session_factory
from codeshare.core.errors import Unauthenticated
from codeshare.core.logging import get_logger
from codeshare.core.oauth import GoogleOAuthClient
from codeshare.core.tokens import InvalidTokenError, TokenService
from codeshare.models.user import User

logger = get_logger(__name__)

# auto_error=False: missing/foreign schemes come back as None and are
# handled below, so both variants share one code path
bearer_scheme = HTTPBearer(auto_error=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield a database session for the duration of a request."""
    factory = get_session_factory()
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def get_token_service() -> TokenService:
    return TokenService(get_settings().token_config())


def get_credential_store(db: Annotated[AsyncSession, Depends(get_db)]) -> CredentialStore:
    return CredentialStore(db)


def get_explanation_service() -> ExplanationService:
    return ExplanationService(get_settings())


def get_oauth_client() -> GoogleOAuthClient:
    return GoogleOAuthClient(get_settings())


async def resolve_identity(
    credentials: HTTPAuthorizationCredentials | None,
    tokens: TokenService,
    store: CredentialStore,
) -> User:
    """Map bearer credentials to a stored user or raise Unauthenticated."""
    if credentials is None or not credentials.credentials:
        raise Unauthenticated("Access token required")

    try:
        payload = tokens.verify_access_token(credentials.credentials)
    except InvalidTokenError:
        raise Unauthenticated("Invalid or expired token") from None

    user = await store.find_by_id(payload.user_id)
    if user is None:
        # Same response as a bad token; operators can tell the cases apart here
        logger.warning("Valid token for unknown user", user_id=payload.user_id)
        raise Unauthenticated("Invalid or expired token")
    return user


async def get_current_user(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
    store: Annotated[CredentialStore, Depends(get_credential_store)],
) -> User:
    user = await resolve_identity(credentials, tokens, store)
    request.state.user = user
    return user


async def get_optional_user(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
    store: Annotated[CredentialStore, Depends(get_credential_store)],
) -> User | None:
    try:
        user = await resolve_identity(credentials, tokens, store)
    except Unauthenticated:
        return None
    request.state.user = user
    return user


DbDep = Annotated[AsyncSession, Depends(get_db)]
StoreDep = Annotated[CredentialStore, Depends(get_credential_store)]
TokensDep = Annotated[TokenService, Depends(get_token_service)]
CurrentUserDep = Annotated[User, Depends(get_current_user)]
OptionalUserDep = Annotated[User | None, Depends(get_optional_user)]
