"""Dependency injection — session, identity, authorization and service singletons."""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator, Awaitable, Callable

import structlog
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from customer_records.core.database import Base
from customer_records.dao.customer_dao import CustomerDAO
from customer_records.dao.user_dao import UserDAO
from customer_records.services import AuthenticationError, ForbiddenError
from customer_records.services.auth_service import AuthService, Identity
from customer_records.services.authorization import DenyReason, Operation, authorize
from customer_records.services.customer_service import CustomerService
from customer_records.services.customer_validation import CustomerValidator

log = structlog.get_logger(__name__)

# ---------------------------------------------------------------------------
# DAO singletons
# ---------------------------------------------------------------------------
_user_dao = UserDAO()
_customer_dao = CustomerDAO()

# ---------------------------------------------------------------------------
# Service singletons
# ---------------------------------------------------------------------------
_auth_service = AuthService(_user_dao)
_customer_service = CustomerService(_customer_dao, CustomerValidator())

# ---------------------------------------------------------------------------
# Engine / session factory (initialised by app lifespan)
# ---------------------------------------------------------------------------
_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def init_session_factory(database_url: str | None = None) -> async_sessionmaker[AsyncSession]:
    """Create the async engine and session factory. Called once at startup."""
    global _engine, _session_factory  # noqa: PLW0603
    url = database_url or os.environ.get(
        "CUSTOMER_RECORDS_DATABASE_URL", "postgresql+asyncpg://localhost/customer_records"
    )
    _engine = create_async_engine(
        url,
        pool_pre_ping=True,
        pool_size=10,
        max_overflow=20,
        pool_recycle=1800,
    )
    _session_factory = async_sessionmaker(_engine, expire_on_commit=False)
    return _session_factory


async def create_schema() -> None:
    """Create any missing tables on the initialised engine."""
    if _engine is None:
        raise RuntimeError("call init_session_factory() before create_schema()")
    async with _engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine() -> None:
    """Dispose the async engine, closing all pooled connections."""
    global _engine  # noqa: PLW0603
    if _engine is not None:
        await _engine.dispose()
        _engine = None


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield a per-request session with automatic commit/rollback."""
    if _session_factory is None:
        raise RuntimeError("call init_session_factory() before handling requests")
    async with _session_factory() as session:
        async with session.begin():
            yield session


# ---------------------------------------------------------------------------
# Service getters (for Depends())
# ---------------------------------------------------------------------------


def get_auth_service() -> AuthService:
    return _auth_service


def get_customer_service() -> CustomerService:
    return _customer_service


# ---------------------------------------------------------------------------
# Identity and authorization
# ---------------------------------------------------------------------------

_bearer = HTTPBearer(auto_error=False)


async def get_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    auth: AuthService = Depends(get_auth_service),
) -> Identity | None:
    """Return the caller's verified identity, or None if no valid token was sent.

    An invalid token is treated like a missing one; whether that matters is
    decided by the operation's requirement.
    """
    if credentials is None:
        return None
    try:
        return auth.verify_credential(credentials.credentials)
    except AuthenticationError as exc:
        log.debug("auth.token_rejected", reason=str(exc))
        return None


def require(operation: Operation) -> Callable[..., Awaitable[Identity | None]]:
    """Build a dependency that gates *operation* before the endpoint runs."""

    async def _gate(identity: Identity | None = Depends(get_identity)) -> Identity | None:
        decision = authorize(operation, identity.claims if identity is not None else None)
        if decision.allowed:
            return identity
        log.info("auth.denied", operation=operation.value, reason=decision.reason.value)
        if decision.reason is DenyReason.UNAUTHENTICATED:
            raise AuthenticationError("authentication required")
        raise ForbiddenError(f"operation '{operation.value}' is not permitted")

    return _gate
