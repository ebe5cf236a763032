"""
Unit tests for vertragsdb/services/auth_service.py and the RBAC dependencies.

Tests: TokenSigner (rotation, unknown keys, startup configuration),
       access-token claims, require_roles, check_self_deletion.
"""

import pytest
from fastapi import HTTPException
from jose import JWTError

from vertragsdb.config import Settings
from vertragsdb.middleware.authorization import check_self_deletion, require_roles
from vertragsdb.models.user import Role
from vertragsdb.services.auth_service import (
    TokenSigner,
    create_access_token,
    hash_password,
    verify_access_token,
    verify_password,
)


# ---------------------------------------------------------------------------
# Passwords
# ---------------------------------------------------------------------------


def test_password_hash_roundtrip():
    hashed = hash_password("Secret123!")
    assert hashed != "Secret123!"
    assert verify_password("Secret123!", hashed)
    assert not verify_password("secret123!", hashed)


# ---------------------------------------------------------------------------
# TokenSigner
# ---------------------------------------------------------------------------


def test_signer_requires_secret():
    with pytest.raises(ValueError):
        TokenSigner(secret="")


def test_token_signed_with_previous_secret_still_verifies():
    old = TokenSigner(secret="old-secret")
    token = old.encode({"sub": "1", "type": "access"})

    rotated = TokenSigner(secret="new-secret", previous_secrets=["old-secret"])
    assert rotated.decode(token)["sub"] == "1"


def test_token_signed_with_unknown_secret_is_rejected():
    token = TokenSigner(secret="someone-else").encode({"sub": "1"})
    signer = TokenSigner(secret="new-secret", previous_secrets=["old-secret"])

    with pytest.raises(JWTError):
        signer.decode(token)


def test_new_tokens_use_current_secret():
    signer = TokenSigner(secret="new-secret", previous_secrets=["old-secret"])
    token = signer.encode({"sub": "1"})

    assert TokenSigner(secret="new-secret").decode(token)["sub"] == "1"
    with pytest.raises(JWTError):
        TokenSigner(secret="old-secret").decode(token)


def test_from_settings_reads_rotation_list():
    cfg = Settings(
        JWT_SECRET_KEY="current",
        JWT_PREVIOUS_SECRET_KEYS="older, oldest",
        ACCESS_TOKEN_EXPIRE_MINUTES=15,
    )
    signer = TokenSigner.from_settings(cfg)

    assert signer.secret == "current"
    assert signer.previous_secrets == ["older", "oldest"]
    assert signer.expire_minutes == 15


def test_production_without_secret_refuses_to_start():
    cfg = Settings(ENVIRONMENT="production", JWT_SECRET_KEY="")
    with pytest.raises(RuntimeError):
        TokenSigner.from_settings(cfg)


def test_development_without_secret_generates_one():
    cfg = Settings(ENVIRONMENT="development", JWT_SECRET_KEY="")
    first = TokenSigner.from_settings(cfg)
    second = TokenSigner.from_settings(cfg)

    assert first.secret
    assert first.secret != second.secret


# ---------------------------------------------------------------------------
# Access tokens
# ---------------------------------------------------------------------------


def test_access_token_claims():
    token = create_access_token(user_id=5, username="erika", role=Role.ADMIN)
    claims = verify_access_token(token)

    assert claims["sub"] == "5"
    assert claims["username"] == "erika"
    assert claims["role"] == "admin"
    assert claims["type"] == "access"
    assert claims["exp"] > claims["iat"]


def test_non_access_token_is_rejected():
    from vertragsdb.services.auth_service import get_token_signer

    token = get_token_signer().encode({"sub": "5", "type": "refresh"})
    with pytest.raises(JWTError):
        verify_access_token(token)


# ---------------------------------------------------------------------------
# RBAC
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_require_roles_allows_listed_role():
    check = require_roles(Role.ADMIN)
    assert await check(current_user={"user_id": 1, "username": "a", "role": Role.ADMIN}) is None


@pytest.mark.asyncio
async def test_require_roles_rejects_viewer():
    check = require_roles(Role.ADMIN)
    with pytest.raises(HTTPException) as exc:
        await check(current_user={"user_id": 2, "username": "v", "role": Role.VIEWER})

    assert exc.value.status_code == 403
    assert exc.value.detail["error"]["code"] == "INSUFFICIENT_PERMISSIONS"


def test_self_deletion_is_rejected():
    with pytest.raises(HTTPException) as exc:
        check_self_deletion(3, 3)
    assert exc.value.status_code == 400


def test_deleting_another_user_is_allowed():
    check_self_deletion(3, 4)
