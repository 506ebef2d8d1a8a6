"""
Admin User Management endpoints: the approval queue.
"""
from fastapi import APIRouter, Depends, Query, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, or_
from datetime import datetime
from typing import Optional

from app.core.database import get_db
from app.core.logging_config import logger
from app.models import User, ChatSession, AuditLog
from app.modules.auth.dependencies import get_current_admin
from app.schemas.admin import (
    AdminUserResponse, AdminUsersResponse,
    UserApprovalRequest, UserApprovalResponse,
)
from app.utils.pagination import paginate

router = APIRouter()


def log_admin_action(
    db: AsyncSession,
    admin_id: Optional[str],
    action: str,
    target_type: str,
    target_id: str = None,
    details: dict = None,
    request: Request = None
) -> AuditLog:
    """Add an audit log entry; it is committed with the action it records"""
    log = AuditLog(
        admin_id=admin_id,
        action=action,
        target_type=target_type,
        target_id=target_id,
        details=details,
        ip_address=request.client.host if request and request.client else None,
    )
    db.add(log)
    return log


async def _admin_user_response(db: AsyncSession, user: User) -> AdminUserResponse:
    sessions_count = await db.scalar(
        select(func.count(ChatSession.id)).where(ChatSession.user_id == user.id)
    )
    return AdminUserResponse(
        id=str(user.id),
        email=user.email,
        full_name=user.full_name,
        role=user.role.value,
        tier=user.tier.value,
        is_active=user.is_active,
        approved=user.approved,
        approved_at=user.approved_at,
        approved_by=user.approved_by,
        oauth_provider=user.oauth_provider,
        avatar_url=user.avatar_url,
        created_at=user.created_at,
        last_login=user.last_login,
        chat_sessions_count=sessions_count or 0,
    )


@router.get("", response_model=AdminUsersResponse)
async def list_users(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    search: Optional[str] = None,
    approved: Optional[bool] = None,
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    """List users, newest first. approved=false gives the pending queue."""
    query = select(User)

    if search:
        search_term = f"%{search}%"
        query = query.where(or_(
            User.email.ilike(search_term),
            User.full_name.ilike(search_term),
        ))

    if approved is not None:
        query = query.where(User.approved == approved)

    page_data = await paginate(db, query.order_by(User.created_at.desc()), page=page, page_size=page_size)
    page_data["items"] = [await _admin_user_response(db, user) for user in page_data["items"]]
    return AdminUsersResponse(**page_data)


@router.post("/approve", response_model=UserApprovalResponse)
async def approve_user(
    request: Request,
    approval: UserApprovalRequest,
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    """Approve a user, or revoke approval with approved=false"""
    user = await db.get(User, approval.user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    if approval.approved:
        user.approved = True
        user.approved_at = datetime.utcnow()
        user.approved_by = current_admin.email
    else:
        user.approved = False
        user.approved_at = None
        user.approved_by = None

    action = "user_approved" if approval.approved else "user_approval_revoked"
    log_admin_action(
        db,
        admin_id=current_admin.id,
        action=action,
        target_type="user",
        target_id=str(user.id),
        details={"email": user.email},
        request=request
    )
    await db.commit()
    await db.refresh(user)

    logger.info(f"[Admin] {current_admin.email} {action.replace('_', ' ')}: {user.email}")
    return UserApprovalResponse(user=await _admin_user_response(db, user))
