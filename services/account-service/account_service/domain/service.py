"""Account service orchestrating credentials, token issuance, and authorization."""

from __future__ import annotations

import logging
from typing import Protocol

from .account import Account, validate_names
from .contracts import AccountListing, AuthResult, NewAccountRecord, RegistrationInput
from .errors import AccountNotFoundError, EmailTakenError, ForbiddenError, InvalidCredentialsError
from .policy import AuthorizationPolicy
from ..security.passwords import PasswordHasher
from ..security.tokens import TokenError, TokenService

logger = logging.getLogger(__name__)


class AccountStore(Protocol):
    """Persistence operations the service relies on."""

    def find_by_id(self, account_id: str) -> Account | None: ...

    def find_by_email(self, email: str) -> Account | None: ...

    def find_all(self) -> list[Account]: ...

    def insert(self, record: NewAccountRecord) -> Account: ...

    def update_names(self, account_id: str, first_name: str, last_name: str) -> Account | None: ...


class AccountService:
    """Account workflows over an injected store, hasher, token service, and policy."""

    def __init__(
        self,
        repository: AccountStore,
        *,
        hasher: PasswordHasher,
        tokens: TokenService,
        policy: AuthorizationPolicy,
        email_case_sensitive: bool = True,
    ) -> None:
        """Store dependencies used to orchestrate persistence and token issuance."""
        self._repository = repository
        self._hasher = hasher
        self._tokens = tokens
        self._policy = policy
        self._email_case_sensitive = email_case_sensitive

    def normalize_email(self, email: str) -> str:
        email = email.strip()
        return email if self._email_case_sensitive else email.lower()

    def register(self, candidate: RegistrationInput) -> AuthResult:
        """Create an account and issue its first token.

        A duplicate email is reported as ``EmailTakenError`` whether it is
        caught by the lookup here or by the store's unique constraint when two
        signups race.
        """
        email = self.normalize_email(candidate.email)
        first_name, last_name = validate_names(candidate.first_name, candidate.last_name)
        if self._repository.find_by_email(email) is not None:
            logger.info("signup rejected: email already registered")
            raise EmailTakenError()

        record = NewAccountRecord(
            email=email,
            password_hash=self._hasher.hash(candidate.password),
            first_name=first_name,
            last_name=last_name,
            mobile_number=candidate.mobile_number.strip(),
            role=candidate.role,
        )
        account = self._repository.insert(record)
        logger.info("account registered account_id=%s role=%s", account.account_id, account.role.value)
        return self._authenticated(account)

    def login(self, email: str, password: str) -> AuthResult:
        """Check credentials and issue a fresh token."""
        account = self._repository.find_by_email(self.normalize_email(email))
        if account is None:
            raise AccountNotFoundError()
        if not self._hasher.verify(password, account.password_hash):
            logger.warning("signin rejected: invalid credentials for account_id=%s", account.account_id)
            raise InvalidCredentialsError()
        logger.info("account signed in account_id=%s", account.account_id)
        return self._authenticated(account)

    def update_profile(
        self, caller: Account, target_id: str, first_name: str, last_name: str
    ) -> Account:
        """Rename the target account when the caller owns it or is an admin."""
        target = self._repository.find_by_id(target_id)
        if target is None:
            raise AccountNotFoundError()
        if not self._policy.can_update(caller, target.account_id, target.email):
            logger.warning(
                "profile update forbidden caller=%s target=%s", caller.account_id, target.account_id
            )
            raise ForbiddenError("You are not allowed to update this user.")

        first, last = validate_names(first_name, last_name)
        updated = self._repository.update_names(target.account_id, first, last)
        if updated is None:
            raise AccountNotFoundError()
        logger.info("profile updated caller=%s target=%s", caller.account_id, updated.account_id)
        return updated

    def list_accounts(self, caller: Account) -> AccountListing:
        if not self._policy.can_list_all(caller):
            raise ForbiddenError("You are not permitted to access this data")
        accounts = self._repository.find_all()
        return AccountListing(accounts=accounts, total=len(accounts))

    def get_account(self, caller: Account, account_id: str) -> Account:
        if not self._policy.can_view_one(caller):
            raise ForbiddenError("You are not permitted to access this data")
        account = self._repository.find_by_id(account_id)
        if account is None:
            raise AccountNotFoundError()
        return account

    def resolve_caller(self, token: str) -> Account | None:
        """Map a bearer token to the account it names, or ``None`` if it cannot."""
        try:
            email = self._tokens.verify(token)
        except TokenError as exc:
            logger.info("bearer token rejected: %s", exc.__class__.__name__)
            return None
        account = self._repository.find_by_email(self.normalize_email(email))
        if account is None:
            logger.info("bearer token names an unknown account")
        return account

    def _authenticated(self, account: Account) -> AuthResult:
        issued = self._tokens.issue(account.email)
        return AuthResult(
            token=issued.token,
            expires_in=issued.expires_in,
            account_id=account.account_id,
            email=account.email,
        )
