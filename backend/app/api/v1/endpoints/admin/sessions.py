"""
Abandoned draft session cleanup.

GET is a dry run for admins. POST deletes and is called by the daily cron
with `Authorization: Bearer <CRON_SECRET>`.
"""
from fastapi import APIRouter, Depends, Header, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from app.api.v1.endpoints.admin.users import log_admin_action
from app.core.config import settings
from app.core.database import get_db
from app.core.logging_config import logger
from app.core.security import secrets_match
from app.models import User
from app.modules.auth.dependencies import get_current_admin
from app.schemas.admin import CleanupDryRunResponse, CleanupResultResponse
from app.services.session_cleanup import delete_abandoned_sessions, find_abandoned_sessions

router = APIRouter()


def verify_cron_secret(authorization: Optional[str] = Header(None)) -> None:
    if not settings.CRON_SECRET:
        logger.error("[Cleanup] CRON_SECRET not configured")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server configuration error"
        )

    token = authorization[7:] if authorization and authorization.startswith("Bearer ") else None
    if not secrets_match(token, settings.CRON_SECRET):
        logger.warning("[Cleanup] Unauthorized cleanup attempt")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized"
        )


@router.get("", response_model=CleanupDryRunResponse)
async def preview_cleanup(
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    """What a cleanup run would delete right now"""
    report = await find_abandoned_sessions(db, settings.SESSION_CLEANUP_THRESHOLD_HOURS)
    return CleanupDryRunResponse(
        threshold_hours=report.threshold_hours,
        cutoff_time=report.cutoff_time,
        would_delete=len(report.sessions),
        total_files=report.total_files,
        total_size_mb=report.total_size_mb,
        sessions=[s.to_dict() for s in report.sessions],
    )


@router.post("", response_model=CleanupResultResponse, dependencies=[Depends(verify_cron_secret)])
async def run_cleanup(
    request: Request,
    db: AsyncSession = Depends(get_db)
):
    stats = await delete_abandoned_sessions(db, settings.SESSION_CLEANUP_THRESHOLD_HOURS)

    if stats["sessions_deleted"]:
        log_admin_action(
            db,
            admin_id=None,
            action="sessions_cleaned",
            target_type="chat_session",
            details={
                "sessions_deleted": stats["sessions_deleted"],
                "files_deleted": stats["files_deleted"],
                "messages_deleted": stats["messages_deleted"],
                "threshold_hours": stats["threshold_hours"],
            },
            request=request
        )
    await db.commit()
    return stats
