"""AuthService — registration, login, JWT issuing/verification, admin bootstrap."""

import os
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import bcrypt
import structlog
from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from customer_records.dao.user_dao import UserDAO
from customer_records.models.user import User
from customer_records.services import AuthenticationError, ConflictError
from customer_records.services.authorization import DELETE_CUSTOMER_CLAIM

log = structlog.get_logger(__name__)

# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------


def _hash_password(password: str) -> str:
    """Hash a plaintext password with bcrypt."""
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def _verify_password(password: str, password_hash: str) -> bool:
    """Verify a plaintext password against a bcrypt hash."""
    return bcrypt.checkpw(password.encode(), password_hash.encode())


# ---------------------------------------------------------------------------
# JWT configuration
# ---------------------------------------------------------------------------

# Pre-computed bcrypt hash for timing-safe login (user-not-found path)
_DUMMY_HASH = bcrypt.hashpw(b"dummy", bcrypt.gensalt()).decode()

_ALGORITHM = "HS256"
_TOKEN_TYPE = "access"
_DEFAULT_EXPIRE_MINUTES = 120
_DEFAULT_ISSUER = "customer-records"
_DEFAULT_AUDIENCE = "https://localhost"

MAX_FAILED_LOGINS = 5
LOCKOUT_DURATION = timedelta(minutes=5)

# Environment variable keys
_ENV_JWT_SECRET = "CUSTOMER_RECORDS_JWT_SECRET"
_ENV_JWT_ISSUER = "CUSTOMER_RECORDS_JWT_ISSUER"
_ENV_JWT_AUDIENCE = "CUSTOMER_RECORDS_JWT_AUDIENCE"
_ENV_JWT_EXPIRE_MINUTES = "CUSTOMER_RECORDS_JWT_EXPIRE_MINUTES"
_ENV_ADMIN_EMAIL = "CUSTOMER_RECORDS_ADMIN_EMAIL"
_ENV_ADMIN_PASSWORD = "CUSTOMER_RECORDS_ADMIN_PASSWORD"
_ENV_ADMIN_CLAIMS = "CUSTOMER_RECORDS_ADMIN_CLAIMS"


def _get_secret() -> str:
    """Read JWT secret from environment. Raises if not set."""
    secret = os.environ.get(_ENV_JWT_SECRET)
    if not secret:
        raise RuntimeError(f"{_ENV_JWT_SECRET} environment variable is required")
    return secret


def _get_issuer() -> str:
    return os.environ.get(_ENV_JWT_ISSUER, _DEFAULT_ISSUER)


def _get_audience() -> str:
    return os.environ.get(_ENV_JWT_AUDIENCE, _DEFAULT_AUDIENCE)


def _get_expiry() -> timedelta:
    raw = os.environ.get(_ENV_JWT_EXPIRE_MINUTES)
    return timedelta(minutes=int(raw) if raw else _DEFAULT_EXPIRE_MINUTES)


def _parse_claims(raw: str) -> list[str]:
    return [c.strip() for c in raw.split(",") if c.strip()]


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Identity:
    """A caller proven by a verified access token."""

    user_id: uuid.UUID
    email: str
    claims: frozenset[str]


@dataclass(frozen=True)
class LoginResult:
    """Access token plus the identity it was issued for."""

    access_token: str
    expires_in: int
    user_id: uuid.UUID
    email: str
    claims: list[str]
    token_type: str = "bearer"


@dataclass(frozen=True)
class LoginRejected:
    """A refused login attempt; ``reason`` is reported to the caller."""

    reason: str


# ---------------------------------------------------------------------------
# AuthService
# ---------------------------------------------------------------------------


class AuthService:
    """Identity provider for the API.

    Tokens are self-contained: verification needs no database access and
    the caller's claims are read from the token itself.
    """

    def __init__(self, user_dao: UserDAO) -> None:
        self._user_dao = user_dao

    # -- Bootstrap ---------------------------------------------------------

    async def ensure_admin_exists(self, session: AsyncSession) -> None:
        """Create the initial admin user from environment variables.

        Reads ``CUSTOMER_RECORDS_ADMIN_EMAIL`` and
        ``CUSTOMER_RECORDS_ADMIN_PASSWORD``; silently skips if either is
        missing. The admin receives the comma-separated claims in
        ``CUSTOMER_RECORDS_ADMIN_CLAIMS`` (default ``DeleteCustomer``).
        """
        email = os.environ.get(_ENV_ADMIN_EMAIL)
        password = os.environ.get(_ENV_ADMIN_PASSWORD)

        if not all([email, password]):
            return

        claims = _parse_claims(os.environ.get(_ENV_ADMIN_CLAIMS, DELETE_CUSTOMER_CLAIM))
        await self._user_dao.upsert(
            session,
            email=email,
            password_hash=_hash_password(password),
            claims=claims,
        )
        log.info("auth.admin_ensured", email=email, claims=claims)

    # -- Registration / Login ----------------------------------------------

    async def register(self, session: AsyncSession, email: str, password: str) -> LoginResult:
        """Create a user without claims and sign them in.

        Raises :class:`ConflictError` if the email is already registered.
        """
        existing = await self._user_dao.get_by_email(session, email)
        if existing is not None:
            raise ConflictError(f"email '{email}' is already registered")

        user = await self._user_dao.create(
            session,
            email=email,
            password_hash=_hash_password(password),
            claims=[],
        )
        log.info("auth.registered", user_id=str(user.id))
        return self._login_result(user)

    async def login(
        self, session: AsyncSession, email: str, password: str
    ) -> LoginResult | LoginRejected:
        """Verify credentials and return an access token.

        Does not distinguish between "user not found" and "wrong password".
        After ``MAX_FAILED_LOGINS`` consecutive failures the account is
        locked for ``LOCKOUT_DURATION``.

        A refused attempt is returned as :class:`LoginRejected` instead of
        raised: the failed-login counter written on *session* must survive
        the request transaction, which rolls back on any exception.
        """
        user = await self._user_dao.get_by_email(session, email)
        if user is None:
            # Constant-time: run bcrypt even when user doesn't exist
            _verify_password(password, _DUMMY_HASH)
            return LoginRejected("invalid email or password")

        now = datetime.now(timezone.utc)
        if user.lockout_end is not None and user.lockout_end > now:
            log.info("auth.login_locked_out", user_id=str(user.id))
            return LoginRejected("user is locked out")

        if not _verify_password(password, user.password_hash):
            failed = user.failed_login_count + 1
            lockout_end = None
            if failed >= MAX_FAILED_LOGINS:
                lockout_end = now + LOCKOUT_DURATION
                failed = 0
            await self._user_dao.record_failed_login(
                session, user.id, failed_count=failed, lockout_end=lockout_end
            )
            log.info("auth.login_failed", user_id=str(user.id), locked=lockout_end is not None)
            return LoginRejected("invalid email or password")

        if user.failed_login_count or user.lockout_end is not None:
            await self._user_dao.reset_failed_logins(session, user.id)

        return self._login_result(user)

    # -- Credentials -------------------------------------------------------

    def issue_credential(self, user: User) -> str:
        """Mint a signed access token carrying the user's claims."""
        now = datetime.now(timezone.utc)
        return jwt.encode(
            {
                "sub": str(user.id),
                "email": user.email,
                "claims": list(user.claims or []),
                "type": _TOKEN_TYPE,
                "iat": now,
                "exp": now + _get_expiry(),
                "iss": _get_issuer(),
                "aud": _get_audience(),
            },
            _get_secret(),
            algorithm=_ALGORITHM,
        )

    def verify_credential(self, token: str) -> Identity:
        """Decode an access token and return the identity it proves.

        Raises :class:`AuthenticationError` on a bad signature, expiry,
        wrong issuer/audience, wrong token type or malformed payload.
        """
        try:
            payload = jwt.decode(
                token,
                _get_secret(),
                algorithms=[_ALGORITHM],
                audience=_get_audience(),
                issuer=_get_issuer(),
            )
        except JWTError:
            raise AuthenticationError("invalid access token")

        if payload.get("type") != _TOKEN_TYPE:
            raise AuthenticationError("invalid token type")

        claims = payload.get("claims", [])
        if not isinstance(claims, list):
            raise AuthenticationError("invalid token payload")

        try:
            user_id = uuid.UUID(payload["sub"])
            email = payload["email"]
        except (KeyError, ValueError):
            raise AuthenticationError("invalid token payload")

        return Identity(user_id=user_id, email=email, claims=frozenset(claims))

    def _login_result(self, user: User) -> LoginResult:
        return LoginResult(
            access_token=self.issue_credential(user),
            expires_in=int(_get_expiry().total_seconds()),
            user_id=user.id,
            email=user.email,
            claims=list(user.claims or []),
        )
