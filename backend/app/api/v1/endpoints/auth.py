from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_
from starlette.concurrency import run_in_threadpool
from datetime import datetime
import uuid

from app.core.database import get_db
from app.core.security import (
    verify_password,
    get_password_hash,
    create_access_token,
    create_refresh_token,
    decode_token,
    token_claims_for,
)
from app.core.logging_config import logger, set_user_id
from app.models.user import User
from app.schemas.auth import (
    UserRegister,
    UserLogin,
    Token,
    RefreshTokenRequest,
    LoginResponse,
    UserResponse,
    GoogleAuthRequest,
    OAuthTokenResponse,
)
from app.modules.auth.dependencies import get_current_user, get_google_oauth, is_bypass_email
from app.modules.oauth.google_provider import GoogleOAuthProvider
from app.core.rate_limiter import auth_rate_limit, strict_rate_limit

router = APIRouter()


def _client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def _auto_approve_bypass(user: User) -> None:
    """The bypass account never waits in the approval queue"""
    if is_bypass_email(user.email) and not user.approved:
        user.approved = True
        user.approved_at = datetime.utcnow()
        user.approved_by = "system"


def _issue_tokens(user: User) -> dict:
    claims = token_claims_for(user)
    return {
        "access_token": create_access_token(claims),
        "refresh_token": create_refresh_token(claims),
        "token_type": "bearer",
    }


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
@strict_rate_limit()
async def register(
    request: Request,
    user_data: UserRegister,
    db: AsyncSession = Depends(get_db)
):
    """Register new user (rate limited: 3/min). New accounts wait for admin approval."""
    client_ip = _client_ip(request)
    email = user_data.email.lower()

    result = await db.execute(select(User).where(User.email == email))
    if result.scalar_one_or_none():
        logger.log_auth_event(
            event="register",
            success=False,
            user_email=email,
            reason="Email already registered",
            client_ip=client_ip
        )
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered"
        )

    user = User(
        email=email,
        hashed_password=get_password_hash(user_data.password),
        full_name=user_data.full_name,
    )
    _auto_approve_bypass(user)

    db.add(user)
    await db.commit()
    await db.refresh(user)

    logger.log_auth_event(
        event="register",
        success=True,
        user_email=email,
        client_ip=client_ip,
        approved=user.approved
    )
    return user


@router.post("/login", response_model=LoginResponse)
@auth_rate_limit()
async def login(
    request: Request,
    credentials: UserLogin,
    db: AsyncSession = Depends(get_db)
):
    """Login user (rate limited: 5/min)"""
    client_ip = _client_ip(request)
    email = credentials.email.lower()

    result = await db.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()

    if not user or not user.hashed_password or not verify_password(credentials.password, user.hashed_password):
        logger.log_auth_event(
            event="login",
            success=False,
            user_email=email,
            reason="Invalid credentials",
            client_ip=client_ip
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password"
        )

    if not user.is_active:
        logger.log_auth_event(
            event="login",
            success=False,
            user_email=email,
            reason="Account inactive",
            client_ip=client_ip
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is inactive"
        )

    _auto_approve_bypass(user)
    user.last_login = datetime.utcnow()
    await db.commit()
    await db.refresh(user)

    set_user_id(str(user.id))
    logger.log_auth_event(
        event="login",
        success=True,
        user_email=user.email,
        client_ip=client_ip,
        approved=user.approved
    )

    return {**_issue_tokens(user), "user": UserResponse.model_validate(user)}


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    current_user: User = Depends(get_current_user)
):
    """Get current user info"""
    return current_user


@router.post("/refresh", response_model=Token)
async def refresh_token(
    token_request: RefreshTokenRequest,
    request: Request,
    db: AsyncSession = Depends(get_db)
):
    """
    Exchange a refresh token for a new token pair.

    Claims are rebuilt from the database so approval and tier changes made
    since the last login reach the client.
    """
    client_ip = _client_ip(request)

    payload = decode_token(token_request.refresh_token)

    if payload.get("type") != "refresh":
        logger.log_auth_event(
            event="token_refresh",
            success=False,
            reason="Invalid token type",
            client_ip=client_ip
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token type - expected refresh token"
        )

    user_id = payload.get("sub")
    try:
        uuid.UUID(str(user_id))
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid user ID format"
        )

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if not user:
        logger.log_auth_event(
            event="token_refresh",
            success=False,
            reason="User not found",
            client_ip=client_ip
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found"
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is inactive"
        )

    logger.log_auth_event(
        event="token_refresh",
        success=True,
        user_email=user.email,
        client_ip=client_ip
    )
    return _issue_tokens(user)


# ============================================
# OAuth Endpoints - Google
# ============================================

@router.post("/google/token", response_model=OAuthTokenResponse)
@auth_rate_limit()
async def google_id_token_login(
    request: Request,
    auth_request: GoogleAuthRequest,
    db: AsyncSession = Depends(get_db),
    google_oauth: GoogleOAuthProvider = Depends(get_google_oauth)
):
    """
    Login with Google ID token from frontend Google Sign-In.

    The first sign-in creates the account; it starts unapproved like any
    registration.
    """
    if not google_oauth.configured:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Google OAuth is not configured"
        )

    user_data = await run_in_threadpool(google_oauth.verify_id_token, auth_request.credential)

    if not user_data:
        logger.log_auth_event(
            event="google_login",
            success=False,
            reason="Invalid Google token",
            client_ip=_client_ip(request)
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid Google token"
        )

    google_id = user_data["google_id"]
    email = user_data["email"].lower()

    result = await db.execute(
        select(User).where(
            or_(User.google_id == google_id, User.email == email)
        )
    )
    user = result.scalar_one_or_none()

    is_new_user = user is None
    if user:
        if not user.is_active:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Account is inactive"
            )
        if not user.google_id:
            user.google_id = google_id
            user.oauth_provider = "google"
        if user_data.get("avatar_url") and not user.avatar_url:
            user.avatar_url = user_data["avatar_url"]
    else:
        user = User(
            email=email,
            google_id=google_id,
            full_name=user_data.get("full_name") or None,
            avatar_url=user_data.get("avatar_url") or None,
            oauth_provider="google",
        )
        db.add(user)

    _auto_approve_bypass(user)
    user.last_login = datetime.utcnow()
    await db.commit()
    await db.refresh(user)

    set_user_id(str(user.id))
    logger.log_auth_event(
        event="google_login",
        success=True,
        user_email=user.email,
        client_ip=_client_ip(request),
        is_new_user=is_new_user
    )

    return OAuthTokenResponse(
        **_issue_tokens(user),
        user=UserResponse.model_validate(user),
        is_new_user=is_new_user
    )
