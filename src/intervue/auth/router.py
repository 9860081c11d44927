"""Authentication router: /api/auth/* and /api/me."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.ext.asyncio import AsyncSession

from intervue.auth.dependencies import get_current_user
from intervue.auth.jwt import SESSION_COOKIE, create_session_token
from intervue.auth.password import PasswordStrengthError
from intervue.auth.schemas import AuthResult, MeResponse, SignInRequest, SignInResponse, SignUpRequest
from intervue.auth.service import EmailAlreadyRegisteredError, authenticate_user, register_user
from intervue.config import get_settings
from intervue.database import get_session
from intervue.db.models import User

logger = structlog.get_logger()

router = APIRouter(prefix="/api/auth", tags=["Authentication"])
me_router = APIRouter(prefix="/api", tags=["Authentication"])


@router.post("/sign-up", response_model=AuthResult, status_code=201)
async def sign_up(
    body: SignUpRequest,
    db: AsyncSession = Depends(get_session),
) -> AuthResult:
    """Create an account. The caller signs in separately."""
    try:
        await register_user(db, name=body.name, email=body.email, password=body.password)
    except PasswordStrengthError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except EmailAlreadyRegisteredError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e

    return AuthResult(success=True, message="Account created successfully. Please sign in.")


@router.post("/sign-in", response_model=SignInResponse)
async def sign_in(
    body: SignInRequest,
    response: Response,
    db: AsyncSession = Depends(get_session),
) -> SignInResponse:
    """Check credentials, then set the session cookie and return the token."""
    user = await authenticate_user(db, body.email, body.password)
    if user is None:
        raise HTTPException(status_code=401, detail="Invalid credentials. Please try again.")

    settings = get_settings()
    token = create_session_token(user.id)
    response.set_cookie(
        SESSION_COOKIE,
        token,
        max_age=settings.session_duration_seconds,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
        path="/",
    )
    logger.info("user_signed_in", user_id=user.id)
    return SignInResponse(success=True, message="Signed in successfully.", token=token)


@router.post("/sign-out", response_model=AuthResult)
async def sign_out(response: Response) -> AuthResult:
    """Clear the session cookie."""
    response.delete_cookie(SESSION_COOKIE, path="/")
    return AuthResult(success=True, message="Signed out.")


@me_router.get("/me", response_model=MeResponse)
async def me(user: User = Depends(get_current_user)) -> MeResponse:
    """The signed-in user."""
    return MeResponse(user_id=user.id, name=user.name, email=user.email, profile_url=user.profile_url)
