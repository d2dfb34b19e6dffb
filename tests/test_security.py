from __future__ import annotations

import pytest
from jose import jwt

from roster.core import config as core_config
from roster.core.security import (
    TokenError,
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)


@pytest.fixture(autouse=True)
def jwt_env(monkeypatch):
    monkeypatch.setenv("JWT_SECRET", "unit-secret")
    monkeypatch.delenv("APP_ENV", raising=False)
    core_config.get_settings.cache_clear()
    yield
    core_config.get_settings.cache_clear()


def test_hash_and_verify_password():
    stored = hash_password("correct horse")
    assert stored.startswith("argon2$")
    assert verify_password("correct horse", stored)
    assert not verify_password("wrong horse", stored)


def test_verify_rejects_unknown_formats():
    assert not verify_password("x", None)
    assert not verify_password("x", "plain-text")
    assert not verify_password("x", "argon2$not-a-hash")


def test_token_roundtrip_carries_subject_and_role():
    token = create_access_token("ada@x.com", role="admin")
    claims = decode_access_token(token)
    assert claims["sub"] == "ada@x.com"
    assert claims["role"] == "admin"
    assert claims["exp"] > claims["iat"]


def test_expired_token_is_rejected():
    token = create_access_token("ada@x.com", role="member", ttl_seconds=-10)
    with pytest.raises(TokenError, match="expired"):
        decode_access_token(token)


def test_token_signed_with_other_secret_is_rejected():
    forged = jwt.encode({"sub": "ada@x.com", "role": "admin"}, "other-secret", algorithm="HS256")
    with pytest.raises(TokenError):
        decode_access_token(forged)


def test_token_without_subject_is_rejected():
    token = jwt.encode({"role": "admin"}, "unit-secret", algorithm="HS256")
    with pytest.raises(TokenError):
        decode_access_token(token)


def test_prod_requires_real_secret(monkeypatch):
    monkeypatch.setenv("APP_ENV", "prod")
    monkeypatch.delenv("JWT_SECRET")
    core_config.get_settings.cache_clear()
    with pytest.raises(RuntimeError):
        core_config.get_settings()
