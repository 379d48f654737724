"""Issuing and validating the service's bearer JWTs."""

from __future__ import annotations

import json
import time
from dataclasses import dataclass
from typing import Any, Callable

import jwt
from jwt.utils import base64url_decode, base64url_encode

ALGORITHM = "HS256"


class TokenError(Exception):
    """Base class for every reason a presented token is rejected."""


class MalformedTokenError(TokenError):
    pass


class BadSignatureError(TokenError):
    pass


class ExpiredTokenError(TokenError):
    pass


def _signature_segment(token: str) -> str | None:
    """Return the signature segment when header and payload decode to JSON objects."""
    parts = token.split(".")
    if len(parts) != 3:
        return None
    try:
        for segment in parts[:2]:
            if not isinstance(json.loads(base64url_decode(segment)), dict):
                return None
    except ValueError:
        return None
    return parts[2]


def _is_canonical_base64url(segment: str) -> bool:
    try:
        raw = base64url_decode(segment)
    except ValueError:
        return False
    return base64url_encode(raw).decode("ascii") == segment


@dataclass(slots=True)
class IssuedToken:
    token: str
    expires_in: int


class TokenService:
    """Signs and verifies time-bound tokens asserting an account email.

    Parameters
    ----------
    secret:
        Symmetric HS256 key. Rotating it invalidates every token issued under
        the previous key immediately; there is no grace window.
    ttl_seconds:
        Lifetime added to the issue time to produce the ``exp`` claim.
    issuer:
        Value written to and required in the ``iss`` claim.
    clock:
        Returns the current UNIX time in seconds. Defaults to ``time.time``.
    """

    def __init__(
        self,
        *,
        secret: str,
        ttl_seconds: int,
        issuer: str,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if not secret:
            raise ValueError("token secret must not be empty")
        self._secret = secret
        self._ttl_seconds = ttl_seconds
        self._issuer = issuer
        self._clock = clock

    def issue(self, subject: str) -> IssuedToken:
        """Create a signed JWT whose ``sub`` claim is ``subject``."""
        now = int(self._clock())
        payload: dict[str, Any] = {
            "iss": self._issuer,
            "sub": subject,
            "iat": now,
            "exp": now + self._ttl_seconds,
        }
        token = jwt.encode(payload, self._secret, algorithm=ALGORITHM)
        return IssuedToken(token=token, expires_in=self._ttl_seconds)

    def verify(self, token: str) -> str:
        """Return the subject email embedded in ``token``.

        Raises
        ------
        MalformedTokenError
            The token cannot be decoded, lacks required claims, or names
            another issuer.
        BadSignatureError
            The signature does not match the active secret.
        ExpiredTokenError
            The injected clock is past the ``exp`` claim.
        """
        signature = _signature_segment(token)
        # A readable token whose signature is not exact base64url has been
        # altered after signing, including in the final padding bits.
        if signature is not None and not _is_canonical_base64url(signature):
            raise BadSignatureError("signature mismatch")

        try:
            # Expiry is checked below against the injected clock instead of
            # PyJWT's wall-clock check.
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                issuer=self._issuer,
                options={
                    "require": ["sub", "iat", "exp"],
                    "verify_exp": False,
                    "verify_iat": False,
                },
            )
        except jwt.InvalidSignatureError as exc:
            raise BadSignatureError("signature mismatch") from exc
        except jwt.PyJWTError as exc:
            raise MalformedTokenError(str(exc)) from exc

        subject = claims["sub"]
        expires_at = claims["exp"]
        if not isinstance(subject, str) or not subject:
            raise MalformedTokenError("token subject is missing")
        if not isinstance(expires_at, int):
            raise MalformedTokenError("token expiry is not an integer")
        if self._clock() > expires_at:
            raise ExpiredTokenError("token expired")
        return subject
