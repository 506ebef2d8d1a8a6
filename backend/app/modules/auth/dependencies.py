from fastapi import Depends, HTTPException, Request, status, Path
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
import uuid

from app.core.config import settings
from app.core.database import get_db
from app.core.logging_config import set_user_id
from app.core.security import decode_token
from app.models.chat_session import ChatSession, ChatSessionStatus
from app.models.user import User
from app.modules.oauth.google_provider import GoogleOAuthProvider

security = HTTPBearer()


def is_bypass_email(email: str) -> bool:
    """The configured DEV_BYPASS_EMAIL account is always approved and acts as admin"""
    return bool(settings.DEV_BYPASS_EMAIL) and email.lower() == settings.DEV_BYPASS_EMAIL.lower()


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> User:
    """Get current authenticated user"""

    payload = decode_token(credentials.credentials)

    if payload.get("type") != "access":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token type"
        )

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload"
        )

    try:
        uuid.UUID(user_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid user ID format"
        )

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found"
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is inactive"
        )

    # Rate limiter and log context key on the user from here on
    request.state.user_id = user.id
    set_user_id(user.id)
    return user


async def get_approved_user(
    current_user: User = Depends(get_current_user)
) -> User:
    """Builder, sessions and billing are only open to approved accounts"""
    if not current_user.approved and not is_bypass_email(current_user.email):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account pending approval"
        )
    return current_user


async def get_current_admin(
    current_user: User = Depends(get_current_user)
) -> User:
    """Get current admin user"""
    if not current_user.is_admin and not is_bypass_email(current_user.email):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )
    return current_user


def get_google_oauth(request: Request) -> GoogleOAuthProvider:
    return request.app.state.google_oauth


# ==================== Chat Session Ownership ====================

async def get_user_chat_session(
    session_id: str = Path(..., description="Chat session ID"),
    current_user: User = Depends(get_approved_user),
    db: AsyncSession = Depends(get_db)
) -> ChatSession:
    """
    Load a chat session owned by the current user.
    404 when it does not exist or was deleted, 403 when it belongs to someone else.

    Usage:
        @router.get("/{session_id}")
        async def get_session(chat_session: ChatSession = Depends(get_user_chat_session)):
            return chat_session
    """
    result = await db.execute(select(ChatSession).where(ChatSession.id == session_id))
    chat_session = result.scalar_one_or_none()

    if not chat_session or chat_session.status == ChatSessionStatus.DELETED.value:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Session not found"
        )

    if chat_session.user_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied"
        )

    return chat_session
