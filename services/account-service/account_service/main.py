"""FastAPI application wiring for the account service."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from psycopg_pool import ConnectionPool

from .api.errors import install_exception_handlers
from .api.routes import router as api_router
from .config import Settings, get_settings
from .domain.policy import AuthorizationPolicy
from .domain.service import AccountService
from .repository import AccountRepository
from .security.passwords import PasswordHasher
from .security.tokens import TokenService

logger = logging.getLogger(__name__)

settings = get_settings()


def build_account_service(repository: AccountRepository, settings: Settings) -> AccountService:
    """Construct the service and its collaborators once for the process."""
    return AccountService(
        repository,
        hasher=PasswordHasher(rounds=settings.password_hash_rounds),
        tokens=TokenService(
            secret=settings.jwt_secret,
            ttl_seconds=settings.jwt_ttl_seconds,
            issuer=settings.jwt_issuer,
        ),
        policy=AuthorizationPolicy(),
        email_case_sensitive=settings.email_case_sensitive,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialise shared resources (Postgres pool, services) for the app lifecycle."""
    pool = ConnectionPool(settings.database_url, open=False)
    pool.open()
    app.state.pool = pool
    repository = AccountRepository(pool)
    repository.ensure_schema()
    app.state.account_service = build_account_service(repository, settings)
    logger.info("account service ready (token ttl=%ss)", settings.jwt_ttl_seconds)
    try:
        yield
    finally:
        pool.close()
        pool.wait_close()


app = FastAPI(title=settings.app_name, version=settings.version, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    max_age=600,
)

install_exception_handlers(app)


@app.get("/healthz", tags=["health"])
def healthz() -> dict[str, str]:
    """Return a minimal readiness indicator used by orchestration systems."""
    return {"status": "ok"}


@app.get("/metrics")
def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


app.include_router(api_router)
