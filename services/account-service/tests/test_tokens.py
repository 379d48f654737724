"""Tests for bearer token issuance and verification."""

from __future__ import annotations

import jwt
import pytest

from account_service.security.tokens import (
    BadSignatureError,
    ExpiredTokenError,
    MalformedTokenError,
    TokenService,
)

from conftest import TEST_ISSUER, TEST_SECRET, TEST_TTL


def _flip_signature_char(token: str) -> str:
    header, payload, signature = token.split(".")
    index = len(signature) // 2
    replacement = "A" if signature[index] != "A" else "B"
    tampered = signature[:index] + replacement + signature[index + 1 :]
    return ".".join([header, payload, tampered])


def test_verify_returns_subject_of_issued_token(token_service):
    issued = token_service.issue("alice@example.com")

    assert issued.expires_in == TEST_TTL
    assert token_service.verify(issued.token) == "alice@example.com"


def test_token_claims_carry_issue_and_expiry(token_service, clock):
    issued = token_service.issue("alice@example.com")

    claims = jwt.decode(
        issued.token,
        TEST_SECRET,
        algorithms=["HS256"],
        options={"verify_exp": False, "verify_iat": False},
        issuer=TEST_ISSUER,
    )
    assert claims["sub"] == "alice@example.com"
    assert claims["iat"] == int(clock.now)
    assert claims["exp"] == claims["iat"] + TEST_TTL


def test_token_is_valid_until_expiry(token_service, clock):
    issued = token_service.issue("alice@example.com")

    clock.advance(TEST_TTL)
    assert token_service.verify(issued.token) == "alice@example.com"


def test_token_expires_after_lifetime(token_service, clock):
    issued = token_service.issue("alice@example.com")

    clock.advance(TEST_TTL + 1)
    with pytest.raises(ExpiredTokenError):
        token_service.verify(issued.token)


def test_tampered_signature_is_rejected(token_service):
    issued = token_service.issue("alice@example.com")

    with pytest.raises(BadSignatureError):
        token_service.verify(_flip_signature_char(issued.token))


_BASE64URL = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_"


def _replace_signature_char(token: str, index: int, replacement: str) -> str:
    header, payload, signature = token.split(".")
    tampered = signature[:index] + replacement + signature[index + 1 :]
    return ".".join([header, payload, tampered])


def test_changed_final_signature_char_is_bad_signature(token_service):
    token = token_service.issue("alice@example.com").token
    last = token.rsplit(".", 1)[1][-1]
    neighbour = _BASE64URL[(_BASE64URL.index(last) + 1) % len(_BASE64URL)]

    with pytest.raises(BadSignatureError):
        token_service.verify(token[:-1] + neighbour)


def test_signature_char_outside_alphabet_is_bad_signature(token_service):
    token = token_service.issue("alice@example.com").token
    signature_length = len(token.rsplit(".", 1)[1])

    with pytest.raises(BadSignatureError):
        token_service.verify(_replace_signature_char(token, signature_length // 2, "*"))


def test_token_signed_with_rotated_secret_is_rejected(token_service, clock):
    issued = token_service.issue("alice@example.com")
    rotated = TokenService(
        secret=TEST_SECRET + "-rotated",
        ttl_seconds=TEST_TTL,
        issuer=TEST_ISSUER,
        clock=clock,
    )

    with pytest.raises(BadSignatureError):
        rotated.verify(issued.token)


@pytest.mark.parametrize("token", ["", "not-a-token", "a.b", "a.b.c"])
def test_garbage_tokens_are_malformed(token_service, token):
    with pytest.raises(MalformedTokenError):
        token_service.verify(token)


def test_token_from_another_issuer_is_malformed(token_service, clock):
    foreign = jwt.encode(
        {"iss": "someone-else", "sub": "alice@example.com", "iat": int(clock.now), "exp": int(clock.now) + 60},
        TEST_SECRET,
        algorithm="HS256",
    )

    with pytest.raises(MalformedTokenError):
        token_service.verify(foreign)


def test_token_without_subject_is_malformed(token_service, clock):
    anonymous = jwt.encode(
        {"iss": TEST_ISSUER, "iat": int(clock.now), "exp": int(clock.now) + 60},
        TEST_SECRET,
        algorithm="HS256",
    )

    with pytest.raises(MalformedTokenError):
        token_service.verify(anonymous)


def test_empty_secret_is_refused():
    with pytest.raises(ValueError):
        TokenService(secret="", ttl_seconds=60, issuer=TEST_ISSUER)
