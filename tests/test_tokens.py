"""Tests for core/tokens.py."""

import uuid
from datetime import timedelta

import jwt
import pytest

from codeshare.core.tokens import (
    InvalidTokenError,
    TokenConfig,
    TokenService,
    parse_duration,
)

CONFIG = TokenConfig(access_secret="access-a", refresh_secret="refresh-a")


@pytest.fixture
def tokens():
    return TokenService(CONFIG)


def test_access_token_round_trip(tokens):
    user_id = uuid.uuid4()
    payload = tokens.verify_access_token(tokens.issue_access_token(user_id, "alice"))
    assert payload.user_id == str(user_id)
    assert payload.username == "alice"
    assert payload.expires_at - payload.issued_at == timedelta(minutes=15)


def test_refresh_token_round_trip(tokens):
    user_id = uuid.uuid4()
    payload = tokens.verify_refresh_token(tokens.issue_refresh_token(user_id, "alice"))
    assert payload.user_id == str(user_id)
    assert payload.expires_at - payload.issued_at == timedelta(days=7)


def test_refresh_token_rejected_as_access_token(tokens):
    refresh = tokens.issue_refresh_token(uuid.uuid4(), "alice")
    with pytest.raises(InvalidTokenError):
        tokens.verify_access_token(refresh)


def test_access_token_rejected_as_refresh_token(tokens):
    access = tokens.issue_access_token(uuid.uuid4(), "alice")
    with pytest.raises(InvalidTokenError):
        tokens.verify_refresh_token(access)


def test_type_claim_checked_even_with_shared_key():
    # A token signed with the right key but the wrong type is still refused
    forged = jwt.encode(
        {"sub": "x", "username": "a", "type": "refresh", "iss": "codeshare",
         "iat": 1_700_000_000, "exp": 4_100_000_000},
        CONFIG.access_secret,
        algorithm="HS256",
    )
    with pytest.raises(InvalidTokenError):
        TokenService(CONFIG).verify_access_token(forged)


def test_expired_access_token_fails():
    expired = TokenService(
        TokenConfig(access_secret="access-a", refresh_secret="refresh-a",
                    access_ttl=timedelta(seconds=-5))
    )
    token = expired.issue_access_token(uuid.uuid4(), "alice")
    with pytest.raises(InvalidTokenError):
        TokenService(CONFIG).verify_access_token(token)


def test_token_from_other_secret_fails(tokens):
    other = TokenService(TokenConfig(access_secret="access-b", refresh_secret="refresh-b"))
    with pytest.raises(InvalidTokenError):
        tokens.verify_access_token(other.issue_access_token(uuid.uuid4(), "alice"))


def test_tampered_and_garbage_tokens_fail(tokens):
    token = tokens.issue_access_token(uuid.uuid4(), "alice")
    header, body, signature = token.split(".")
    tampered = f"{header}.{body}.{signature[:-2]}xx"
    for bad in (tampered, "malformed", ""):
        with pytest.raises(InvalidTokenError):
            tokens.verify_access_token(bad)


def test_token_pairs_are_unique(tokens):
    user_id = uuid.uuid4()
    first = tokens.issue_token_pair(user_id, "alice")
    second = tokens.issue_token_pair(user_id, "alice")
    assert first.access_token != first.refresh_token
    assert first.refresh_token != second.refresh_token
    assert first.access_token != second.access_token


def test_same_secret_for_both_kinds_rejected():
    with pytest.raises(ValueError):
        TokenConfig(access_secret="same", refresh_secret="same")


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("15m", timedelta(minutes=15)),
        ("7d", timedelta(days=7)),
        ("1h", timedelta(hours=1)),
        ("30s", timedelta(seconds=30)),
        ("3600", timedelta(hours=1)),
        (90, timedelta(seconds=90)),
    ],
)
def test_parse_duration(raw, expected):
    assert parse_duration(raw) == expected


@pytest.mark.parametrize("raw", ["", "fifteen", "15x", "-5m"])
def test_parse_duration_rejects_garbage(raw):
    with pytest.raises(ValueError):
        parse_duration(raw)
