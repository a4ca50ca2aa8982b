"""Access / refresh token issuance and verification.

Two token kinds share the same payload shape (user id + username) but are
signed with independent secrets and carry a ``type`` claim, so a refresh
token can never be accepted where an access token is expected and vice
versa.

The service is built from an explicit :class:`TokenConfig`; it never reads
settings at call time. ``Settings.token_config()`` produces the runtime
instance, tests build their own.
"""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt

ACCESS = "access"
REFRESH = "refresh"

_ISSUER = "codeshare"
_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$")
_UNITS = {"": 1, "s": 1, "m": 60, "h": 3600, "d": 86400}


class InvalidTokenError(Exception):
    """Raised when a token fails signature, expiry, shape or namespace checks."""


def parse_duration(value: str | int | timedelta) -> timedelta:
    """Parse ``"15m"``, ``"7d"``, ``"3600"`` (seconds) or a timedelta."""
    if isinstance(value, timedelta):
        return value
    if isinstance(value, int):
        return timedelta(seconds=value)
    match = _DURATION_RE.match(value)
    if not match:
        raise ValueError(f"Invalid duration: {value!r}")
    amount, unit = match.groups()
    return timedelta(seconds=int(amount) * _UNITS[unit])


@dataclass(frozen=True)
class TokenConfig:
    access_secret: str
    refresh_secret: str
    access_ttl: timedelta = timedelta(minutes=15)
    refresh_ttl: timedelta = timedelta(days=7)
    algorithm: str = "HS256"

    def __post_init__(self) -> None:
        if self.access_secret == self.refresh_secret:
            raise ValueError("access and refresh secrets must differ")


@dataclass(frozen=True)
class TokenPayload:
    user_id: str
    username: str
    issued_at: datetime
    expires_at: datetime


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


class TokenService:
    def __init__(self, config: TokenConfig) -> None:
        self._config = config

    @property
    def config(self) -> TokenConfig:
        return self._config

    # ── Issuance ─────────────────────────────────────────────────────────────

    def issue_access_token(self, user_id: uuid.UUID | str, username: str) -> str:
        return self._issue(ACCESS, str(user_id), username)

    def issue_refresh_token(self, user_id: uuid.UUID | str, username: str) -> str:
        return self._issue(REFRESH, str(user_id), username)

    def issue_token_pair(self, user_id: uuid.UUID | str, username: str) -> TokenPair:
        """Issue both tokens. Persisting the refresh token is the caller's job."""
        return TokenPair(
            access_token=self.issue_access_token(user_id, username),
            refresh_token=self.issue_refresh_token(user_id, username),
        )

    # ── Verification ─────────────────────────────────────────────────────────

    def verify_access_token(self, token: str) -> TokenPayload:
        return self._verify(ACCESS, token)

    def verify_refresh_token(self, token: str) -> TokenPayload:
        return self._verify(REFRESH, token)

    # ── Internals ────────────────────────────────────────────────────────────

    def _secret_and_ttl(self, kind: str) -> tuple[str, timedelta]:
        if kind == ACCESS:
            return self._config.access_secret, self._config.access_ttl
        return self._config.refresh_secret, self._config.refresh_ttl

    def _issue(self, kind: str, user_id: str, username: str) -> str:
        secret, ttl = self._secret_and_ttl(kind)
        now = datetime.now(timezone.utc)
        payload = {
            "sub": user_id,
            "username": username,
            "type": kind,
            # unique per token so two pairs minted in the same second differ
            "jti": uuid.uuid4().hex,
            "iat": now,
            "exp": now + ttl,
            "iss": _ISSUER,
        }
        return jwt.encode(payload, secret, algorithm=self._config.algorithm)

    def _verify(self, kind: str, token: str) -> TokenPayload:
        secret, _ = self._secret_and_ttl(kind)
        try:
            claims = jwt.decode(
                token,
                secret,
                algorithms=[self._config.algorithm],
                options={"require": ["sub", "exp", "iat", "iss"]},
                issuer=_ISSUER,
            )
        except jwt.InvalidTokenError as exc:
            raise InvalidTokenError(str(exc)) from exc

        if claims.get("type") != kind:
            raise InvalidTokenError(f"Expected a {kind} token")
        username = claims.get("username")
        if not isinstance(username, str):
            raise InvalidTokenError("Token has no username claim")

        return TokenPayload(
            user_id=claims["sub"],
            username=username,
            issued_at=datetime.fromtimestamp(claims["iat"], tz=timezone.utc),
            expires_at=datetime.fromtimestamp(claims["exp"], tz=timezone.utc),
        )
