"""
Abandoned Draft Session Cleanup
===============================
A draft chat session is abandoned when:
- status = 'draft'
- last_message_at IS NULL (no message was ever sent)
- created_at is older than SESSION_CLEANUP_THRESHOLD_HOURS

A daily cron calls POST /admin/cleanup-sessions (CRON_SECRET bearer) to
delete them; GET runs the same query as a dry run.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.logging_config import logger
from app.models.chat_session import ChatMessage, ChatSession, ChatSessionStatus, UploadedFile


@dataclass
class AbandonedSession:
    id: str
    user_id: str
    created_at: datetime
    age_hours: int
    file_count: int
    total_file_size: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "created_at": self.created_at.isoformat(),
            "age_hours": self.age_hours,
            "file_count": self.file_count,
            "total_file_size": self.total_file_size,
        }


@dataclass
class CleanupReport:
    threshold_hours: int
    cutoff_time: datetime
    sessions: List[AbandonedSession] = field(default_factory=list)

    @property
    def total_files(self) -> int:
        return sum(s.file_count for s in self.sessions)

    @property
    def total_size_mb(self) -> float:
        return round(sum(s.total_file_size for s in self.sessions) / 1024 / 1024, 2)

    @property
    def unique_users(self) -> int:
        return len({s.user_id for s in self.sessions})

    @property
    def oldest_session_age(self) -> int:
        return max((s.age_hours for s in self.sessions), default=0)


def cutoff_for(threshold_hours: int, now: Optional[datetime] = None) -> datetime:
    return (now or datetime.utcnow()) - timedelta(hours=threshold_hours)


async def find_abandoned_sessions(
    db: AsyncSession, threshold_hours: int, now: Optional[datetime] = None
) -> CleanupReport:
    now = now or datetime.utcnow()
    cutoff = cutoff_for(threshold_hours, now)

    result = await db.execute(
        select(ChatSession)
        .options(selectinload(ChatSession.uploaded_files))
        .where(
            ChatSession.status == ChatSessionStatus.DRAFT.value,
            ChatSession.last_message_at.is_(None),
            ChatSession.created_at < cutoff,
        )
        .order_by(ChatSession.created_at.asc())
    )

    report = CleanupReport(threshold_hours=threshold_hours, cutoff_time=cutoff)
    for chat_session in result.scalars().all():
        report.sessions.append(AbandonedSession(
            id=chat_session.id,
            user_id=chat_session.user_id,
            created_at=chat_session.created_at,
            age_hours=int((now - chat_session.created_at).total_seconds() // 3600),
            file_count=len(chat_session.uploaded_files),
            total_file_size=sum(f.file_size or 0 for f in chat_session.uploaded_files),
        ))
    return report


async def delete_abandoned_sessions(
    db: AsyncSession, threshold_hours: int, now: Optional[datetime] = None
) -> Dict[str, Any]:
    """Delete abandoned drafts with their files and messages. Caller commits."""
    report = await find_abandoned_sessions(db, threshold_hours, now)
    logger.info(
        f"[Cleanup] Found {len(report.sessions)} abandoned draft sessions "
        f"(cutoff {report.cutoff_time.isoformat()}, threshold {threshold_hours}h)"
    )

    stats: Dict[str, Any] = {
        "success": True,
        "threshold_hours": threshold_hours,
        "cutoff_time": report.cutoff_time.isoformat(),
        "sessions_deleted": 0,
        "files_deleted": 0,
        "messages_deleted": 0,
        "oldest_session_age": report.oldest_session_age,
        "unique_users": report.unique_users,
        "sessions": [
            {"id": s.id, "created_at": s.created_at.isoformat(), "age_hours": s.age_hours, "file_count": s.file_count}
            for s in report.sessions
        ],
    }

    if not report.sessions:
        stats["message"] = "No abandoned sessions found"
        return stats

    session_ids = [s.id for s in report.sessions]
    files = await db.execute(delete(UploadedFile).where(UploadedFile.session_id.in_(session_ids)))
    messages = await db.execute(delete(ChatMessage).where(ChatMessage.session_id.in_(session_ids)))
    sessions = await db.execute(delete(ChatSession).where(ChatSession.id.in_(session_ids)))

    stats["files_deleted"] = files.rowcount
    stats["messages_deleted"] = messages.rowcount
    stats["sessions_deleted"] = sessions.rowcount

    logger.info(
        f"[Cleanup] Deleted {sessions.rowcount} sessions, {files.rowcount} files, "
        f"{messages.rowcount} messages for {report.unique_users} users"
    )
    return stats
