"""Salted, cost-tunable password hashing."""

from __future__ import annotations

from passlib.context import CryptContext


class PasswordHasher:
    """One-way credential hashing backed by passlib's ``pbkdf2_sha256`` scheme.

    The salt and round count are embedded in every hash, so verification
    needs no key material and keeps working after the cost is raised.
    """

    def __init__(self, rounds: int = 29000) -> None:
        self._context = CryptContext(
            schemes=["pbkdf2_sha256"],
            deprecated="auto",
            pbkdf2_sha256__rounds=rounds,
        )

    def hash(self, plaintext: str) -> str:
        return self._context.hash(plaintext)

    def verify(self, plaintext: str, hashed: str) -> bool:
        """Return ``True`` when ``plaintext`` matches ``hashed``."""
        try:
            return self._context.verify(plaintext, hashed)
        except (ValueError, TypeError):
            # Unrecognised or corrupt stored hash.
            return False
