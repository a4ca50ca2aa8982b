"""HTTP-facing error taxonomy.

Every class is an ``HTTPException`` so FastAPI renders it as
``{"detail": ...}`` without a custom handler. Token-layer failures
(:class:`codeshare.core.tokens.InvalidTokenError`) are never raised to the
client directly; callers translate them to :class:`Unauthenticated`.
"""

from __future__ import annotations

from fastapi import HTTPException, status

_BEARER = {"WWW-Authenticate": "Bearer"}


class Unauthenticated(HTTPException):
    def __init__(self, detail: str = "Not authenticated") -> None:
        super().__init__(status.HTTP_401_UNAUTHORIZED, detail=detail, headers=_BEARER)


class InvalidCredentials(HTTPException):
    # Same message for unknown email and wrong password
    def __init__(self) -> None:
        super().__init__(
            status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password", headers=_BEARER
        )


class Conflict(HTTPException):
    def __init__(self, field: str, detail: str | None = None) -> None:
        self.field = field
        super().__init__(
            status.HTTP_409_CONFLICT, detail=detail or f"{field.capitalize()} already taken"
        )


class NotFound(HTTPException):
    def __init__(self, detail: str = "Not found") -> None:
        super().__init__(status.HTTP_404_NOT_FOUND, detail=detail)


class Forbidden(HTTPException):
    def __init__(self, detail: str = "Forbidden") -> None:
        super().__init__(status.HTTP_403_FORBIDDEN, detail=detail)


class BadRequest(HTTPException):
    def __init__(self, detail: str) -> None:
        super().__init__(status.HTTP_400_BAD_REQUEST, detail=detail)


class ServiceUnavailable(HTTPException):
    def __init__(self, detail: str) -> None:
        super().__init__(status.HTTP_503_SERVICE_UNAVAILABLE, detail=detail)


class BadGateway(HTTPException):
    def __init__(self, detail: str) -> None:
        super().__init__(status.HTTP_502_BAD_GATEWAY, detail=detail)
