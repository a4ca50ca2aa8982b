"""Google OAuth 2.0 client for external-identity login.

Only the authorization-code flow is supported: build the consent URL,
exchange the returned code for a provider access token, then read the
userinfo endpoint to obtain an :class:`ExternalProfile`.
"""

from __future__ import annotations

from urllib.parse import urlencode

import httpx

from codeshare.core.config import Settings
from codeshare.core.credentials import ExternalProfile
from codeshare.core.errors import BadGateway
from codeshare.core.logging import get_logger

logger = get_logger(__name__)

AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_URL = "https://oauth2.googleapis.com/token"
USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"
SCOPES = "openid email profile"


class GoogleOAuthClient:
    def __init__(
        self,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 10.0,
    ) -> None:
        self.client_id = settings.google_client_id
        self.client_secret = settings.google_client_secret
        self.redirect_uri = settings.google_callback_url
        self._transport = transport
        self._timeout = timeout

    def authorization_url(self, state: str) -> str:
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": SCOPES,
            "state": state,
            "prompt": "select_account",
        }
        return f"{AUTHORIZE_URL}?{urlencode(params)}"

    async def fetch_profile(self, code: str) -> ExternalProfile:
        """Exchange *code* and return the caller's Google profile."""
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                token_resp = await client.post(
                    TOKEN_URL,
                    data={
                        "code": code,
                        "client_id": self.client_id,
                        "client_secret": self.client_secret,
                        "redirect_uri": self.redirect_uri,
                        "grant_type": "authorization_code",
                    },
                )
                token_resp.raise_for_status()
                provider_token = token_resp.json()["access_token"]

                info_resp = await client.get(
                    USERINFO_URL, headers={"Authorization": f"Bearer {provider_token}"}
                )
                info_resp.raise_for_status()
                info = info_resp.json()
        except (httpx.HTTPError, KeyError, ValueError) as exc:
            logger.warning("Google OAuth exchange failed", error=str(exc))
            raise BadGateway("External login failed") from exc

        if not info.get("sub"):
            raise BadGateway("External login failed")

        return ExternalProfile(
            provider="google",
            subject=str(info["sub"]),
            email=info.get("email") if info.get("email_verified", True) else None,
            display_name=info.get("name"),
            picture=info.get("picture"),
        )
