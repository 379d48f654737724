from __future__ import annotations

import uuid
from dataclasses import replace
from datetime import datetime, timezone

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from account_service.api import routes
from account_service.api.errors import install_exception_handlers
from account_service.domain.account import Account
from account_service.domain.contracts import NewAccountRecord
from account_service.domain.errors import EmailTakenError
from account_service.domain.policy import AuthorizationPolicy
from account_service.domain.service import AccountService
from account_service.security.passwords import PasswordHasher
from account_service.security.tokens import TokenService

TEST_SECRET = "test-secret-with-enough-entropy-for-hs256"
TEST_ISSUER = "account-service-tests"
TEST_TTL = 3600


class FakeRepository:
    """In-memory repository mimicking the Postgres-backed behaviours."""

    def __init__(self) -> None:
        self._accounts: dict[str, Account] = {}

    def find_by_id(self, account_id: str):
        return self._accounts.get(account_id)

    def find_by_email(self, email: str):
        for account in self._accounts.values():
            if account.email == email:
                return account
        return None

    def find_all(self):
        return sorted(self._accounts.values(), key=lambda a: a.created_at)

    def insert(self, record: NewAccountRecord):
        if any(account.email == record.email for account in self._accounts.values()):
            raise EmailTakenError()
        now = datetime.now(timezone.utc)
        account = Account(
            account_id=str(uuid.uuid4()),
            email=record.email,
            password_hash=record.password_hash,
            first_name=record.first_name,
            last_name=record.last_name,
            mobile_number=record.mobile_number,
            role=record.role,
            created_at=now,
            updated_at=now,
        )
        self._accounts[account.account_id] = account
        return account

    def update_names(self, account_id: str, first_name: str, last_name: str):
        account = self._accounts.get(account_id)
        if account is None:
            return None
        updated = replace(
            account,
            first_name=first_name,
            last_name=last_name,
            updated_at=datetime.now(timezone.utc),
        )
        self._accounts[account_id] = updated
        return updated


class FakeClock:
    """Controllable replacement for ``time.time``."""

    def __init__(self, now: float = 1_700_000_000) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def token_service(clock: FakeClock) -> TokenService:
    return TokenService(secret=TEST_SECRET, ttl_seconds=TEST_TTL, issuer=TEST_ISSUER, clock=clock)


@pytest.fixture
def hasher() -> PasswordHasher:
    # Low cost keeps the suite fast; production uses the configured rounds.
    return PasswordHasher(rounds=1000)


@pytest.fixture
def repository() -> FakeRepository:
    return FakeRepository()


@pytest.fixture
def service(repository, hasher, token_service) -> AccountService:
    return AccountService(
        repository,
        hasher=hasher,
        tokens=token_service,
        policy=AuthorizationPolicy(),
    )


@pytest.fixture
def api_client(service):
    """Provide a FastAPI test client with isolated state."""
    app = FastAPI()
    install_exception_handlers(app)
    app.include_router(routes.router)
    app.state.account_service = service

    with TestClient(app) as client:
        yield client
