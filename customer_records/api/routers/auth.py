"""Auth router — register, login."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from customer_records.api.deps import get_auth_service, get_session
from customer_records.api.errors import service_error_response
from customer_records.api.schemas.auth import (
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    UserToken,
)
from customer_records.services import AuthenticationError
from customer_records.services.auth_service import AuthService, LoginRejected, LoginResult

router = APIRouter()


def _to_response(result: LoginResult) -> LoginResponse:
    return LoginResponse(
        access_token=result.access_token,
        token_type=result.token_type,
        expires_in=result.expires_in,
        user=UserToken(id=result.user_id, email=result.email, claims=result.claims),
    )


@router.post("/register", response_model=LoginResponse, name="register_user")
async def register(
    body: RegisterRequest,
    session: AsyncSession = Depends(get_session),
    auth: AuthService = Depends(get_auth_service),
) -> LoginResponse:
    result = await auth.register(session, body.email, body.password)
    return _to_response(result)


@router.post("/login", response_model=LoginResponse, name="login_user")
async def login(
    body: LoginRequest,
    session: AsyncSession = Depends(get_session),
    auth: AuthService = Depends(get_auth_service),
) -> LoginResponse | JSONResponse:
    outcome = await auth.login(session, body.email, body.password)
    if isinstance(outcome, LoginRejected):
        # Returned, not raised, so get_session commits the failed-login counter.
        return service_error_response(AuthenticationError(outcome.reason))
    return _to_response(outcome)
