"""Shared slowapi limiter.

Limits are counted per authenticated user when the request has one
(``request.state.user`` is set by the authentication dependencies), and per
client address otherwise. The moving-window strategy gives a sliding
window rather than fixed buckets.
"""

from __future__ import annotations

from slowapi import Limiter
from slowapi.util import get_remote_address
from fastapi import Request


def identity_key(request: Request) -> str:
    user = getattr(request.state, "user", None)
    if user is not None:
        return f"user:{user.id}"
    return get_remote_address(request)


limiter = Limiter(key_func=identity_key, strategy="moving-window")
