"""
Unit tests for Session domain model.
"""

import time
from datetime import datetime, timezone

import jwt

from momentum_auth.domain.session import Session, decode_expiry
from conftest import make_token


def test_session_expiry_from_token():
    """Test expires_at is derived from the exp claim."""
    exp = int(time.time()) + 3600
    session = Session(access_token=make_token(exp=exp), refresh_token="r")

    assert session.expires_at == datetime.fromtimestamp(exp, tz=timezone.utc)
    assert not session.is_expired()


def test_session_expired_token():
    """Test an access token with exp in the past."""
    session = Session(access_token=make_token(expires_in=-10), refresh_token="r")

    assert session.is_expired()


def test_session_expiry_uses_given_clock():
    """Test is_expired compares against the supplied time."""
    exp = 1_700_000_000
    session = Session(access_token=make_token(exp=exp), refresh_token="r")

    assert not session.is_expired(now=exp - 1)
    assert not session.is_expired(now=exp)
    assert session.is_expired(now=exp + 1)


def test_session_without_exp_is_expired():
    """Test a token without an exp claim counts as expired."""
    token = jwt.encode({"sub": "usr_1"}, "secret", algorithm="HS256")
    session = Session(access_token=token, refresh_token="r")

    assert session.expires_at is None
    assert session.is_expired()


def test_decode_expiry_malformed():
    """Test malformed tokens decode to no expiry."""
    assert decode_expiry("not-a-jwt") is None
    assert decode_expiry("eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9.invalid") is None
    assert decode_expiry("") is None
    assert decode_expiry(None) is None


def test_decode_expiry_non_numeric_exp():
    """Test a non-numeric exp claim is ignored."""
    token = jwt.encode({"exp": "tomorrow"}, "secret", algorithm="HS256")
    assert decode_expiry(token) is None


def test_session_serialization():
    """Test to_dict and from_dict use the wire field names."""
    session = Session(access_token="A", refresh_token="B")

    data = session.to_dict()
    assert data == {"access": "A", "refresh": "B"}

    restored = Session.from_dict(data)
    assert restored == session


def test_session_repr_hides_tokens():
    """Test tokens never appear in repr (and therefore logs)."""
    session = Session(access_token="secret-access", refresh_token="secret-refresh")

    assert "secret-access" not in repr(session)
    assert "secret-refresh" not in repr(session)
