"""Domain-level request and result contracts shared by multiple layers."""

from __future__ import annotations

from dataclasses import dataclass, field

from .account import Account, Role


@dataclass(slots=True)
class RegistrationInput:
    """Validated inputs required to register an account."""

    email: str
    password: str
    first_name: str
    last_name: str
    mobile_number: str
    role: Role = Role.USER


@dataclass(slots=True)
class NewAccountRecord:
    """Values handed to the store on insert; the store assigns the identifier."""

    email: str
    password_hash: str
    first_name: str
    last_name: str
    mobile_number: str
    role: Role


@dataclass(slots=True)
class AuthResult:
    """Outcome of a successful signup or signin."""

    token: str
    expires_in: int
    account_id: str
    email: str


@dataclass(slots=True)
class AccountListing:
    """All accounts visible to an administrator plus their count."""

    accounts: list[Account] = field(default_factory=list)
    total: int = 0

    @property
    def is_empty(self) -> bool:
        return self.total == 0
