"""
Chat session persistence for the builder.

The browser owns session and message ids so saves can be retried safely:
creating an existing session returns 409 and saving a message twice
updates it in place.
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from datetime import datetime, timezone
from typing import Optional

from app.core.database import get_db
from app.core.logging_config import logger
from app.models.chat_session import ChatSession, ChatSessionStatus, ChatMessage, UploadedFile
from app.models.user import User
from app.modules.auth.dependencies import get_approved_user, get_user_chat_session
from app.schemas.session import (
    SessionStatusFilter,
    ChatSessionCreate,
    ChatSessionUpdate,
    ChatSessionResponse,
    ChatSessionListItem,
    ChatSessionDetail,
    ChatSessionListResponse,
    ChatMessageResponse,
    ActivateSessionResponse,
    SaveMessagesRequest,
    SaveMessagesResponse,
    MessageListResponse,
    UploadedFileResponse,
    SessionFilesResponse,
)
from app.utils.pagination import offset_pagination

router = APIRouter()


def _naive_utc(value: datetime) -> datetime:
    """Columns store naive UTC; clients send ISO strings with or without an offset"""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


async def _latest_message(db: AsyncSession, session_id: str) -> Optional[ChatMessage]:
    result = await db.execute(
        select(ChatMessage)
        .where(ChatMessage.session_id == session_id)
        .order_by(ChatMessage.timestamp.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


# ==================== Sessions ====================

@router.get("", response_model=ChatSessionListResponse)
async def list_sessions(
    status_filter: SessionStatusFilter = Query("active", alias="status"),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(get_approved_user),
    db: AsyncSession = Depends(get_db)
):
    """List the user's sessions, most recent activity first, with a last-message preview"""
    conditions = (ChatSession.user_id == current_user.id, ChatSession.status == status_filter)

    total = await db.scalar(select(func.count(ChatSession.id)).where(*conditions)) or 0

    result = await db.execute(
        select(ChatSession)
        .where(*conditions)
        .order_by(ChatSession.last_message_at.desc().nulls_last(), ChatSession.created_at.desc())
        .offset(offset)
        .limit(limit)
    )

    sessions = []
    for chat_session in result.scalars().all():
        last = await _latest_message(db, chat_session.id)
        sessions.append(ChatSessionListItem(
            **ChatSessionResponse.model_validate(chat_session).model_dump(),
            last_message=ChatMessageResponse.model_validate(last) if last else None,
        ))

    return ChatSessionListResponse(
        sessions=sessions,
        pagination=offset_pagination(total, limit, offset),
    )


@router.post("", response_model=ChatSessionResponse, status_code=status.HTTP_201_CREATED)
async def create_session(
    session_data: ChatSessionCreate,
    current_user: User = Depends(get_approved_user),
    db: AsyncSession = Depends(get_db)
):
    """Create a session with the id generated by the browser"""
    existing = await db.get(ChatSession, session_data.session_id)
    if existing:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Session already exists"
        )

    chat_session = ChatSession(
        id=session_data.session_id,
        user_id=current_user.id,
        title=session_data.title,
        current_stage=1,
        status=ChatSessionStatus.ACTIVE.value,
    )
    db.add(chat_session)
    await db.commit()
    await db.refresh(chat_session)

    logger.info(f"[Sessions] Created session {chat_session.id} for user {current_user.id}")
    return chat_session


@router.get("/{session_id}", response_model=ChatSessionDetail)
async def get_session(
    chat_session: ChatSession = Depends(get_user_chat_session),
    db: AsyncSession = Depends(get_db)
):
    """Session with all of its messages in timestamp order"""
    result = await db.execute(
        select(ChatMessage)
        .where(ChatMessage.session_id == chat_session.id)
        .order_by(ChatMessage.timestamp.asc())
    )
    return ChatSessionDetail(
        **ChatSessionResponse.model_validate(chat_session).model_dump(),
        messages=[ChatMessageResponse.model_validate(m) for m in result.scalars().all()],
    )


@router.patch("/{session_id}", response_model=ChatSessionResponse)
async def update_session(
    update: ChatSessionUpdate,
    chat_session: ChatSession = Depends(get_user_chat_session),
    db: AsyncSession = Depends(get_db)
):
    """Update whitelisted session fields; fields left out of the body are untouched"""
    for field, value in update.model_dump(exclude_unset=True).items():
        if field == "last_message_at" and value is not None:
            value = _naive_utc(value)
        setattr(chat_session, field, value)
    chat_session.updated_at = datetime.utcnow()

    await db.commit()
    await db.refresh(chat_session)
    return chat_session


@router.delete("/{session_id}", response_model=ChatSessionResponse)
async def delete_session(
    chat_session: ChatSession = Depends(get_user_chat_session),
    db: AsyncSession = Depends(get_db)
):
    """Soft delete: the row stays with status 'deleted'"""
    chat_session.status = ChatSessionStatus.DELETED.value
    chat_session.updated_at = datetime.utcnow()

    await db.commit()
    await db.refresh(chat_session)

    logger.info(f"[Sessions] Soft deleted session {chat_session.id}")
    return chat_session


@router.post("/{session_id}/activate", response_model=ActivateSessionResponse)
async def activate_session(
    chat_session: ChatSession = Depends(get_user_chat_session),
    db: AsyncSession = Depends(get_db)
):
    """Turn a draft into an active session when the first message is sent"""
    if chat_session.status == ChatSessionStatus.ACTIVE.value and chat_session.first_message_at:
        return ActivateSessionResponse(message="Session already active", session=ChatSessionResponse.model_validate(chat_session))

    previous_status = chat_session.status
    now = datetime.utcnow()
    chat_session.status = ChatSessionStatus.ACTIVE.value
    chat_session.first_message_at = now
    chat_session.last_message_at = now

    await db.commit()
    await db.refresh(chat_session)

    logger.info(f"[Sessions] Activated session {chat_session.id} ({previous_status} -> active)")
    return ActivateSessionResponse(message="Session activated successfully", session=ChatSessionResponse.model_validate(chat_session))


# ==================== Messages ====================

@router.post("/{session_id}/messages", response_model=SaveMessagesResponse)
async def save_messages(
    batch: SaveMessagesRequest,
    chat_session: ChatSession = Depends(get_user_chat_session),
    db: AsyncSession = Depends(get_db)
):
    """
    Upsert a batch of messages.

    Existing messages get the new payload; their user text is only replaced
    by a non-empty value. A message id already used by another session is
    counted as failed.
    """
    saved = 0
    failed = 0
    latest: Optional[datetime] = None
    created = {}

    for msg in batch.messages:
        timestamp = _naive_utc(msg.timestamp)
        existing = created.get(msg.id) or await db.get(ChatMessage, msg.id)

        if existing is not None and existing.session_id != chat_session.id:
            logger.warning(f"[Sessions] Message {msg.id} belongs to another session, skipping")
            failed += 1
            continue

        if existing is not None:
            existing.payload = msg.payload
            if msg.user_text:
                existing.user_text = msg.user_text
        else:
            created[msg.id] = ChatMessage(
                id=msg.id,
                session_id=chat_session.id,
                message_type=msg.message_type,
                timestamp=timestamp,
                payload=msg.payload,
                user_text=msg.user_text or None,
            )
            db.add(created[msg.id])

        saved += 1
        if latest is None or timestamp > latest:
            latest = timestamp

    if saved:
        chat_session.last_message_at = latest
        chat_session.updated_at = datetime.utcnow()

    await db.commit()

    if failed:
        logger.warning(f"[Sessions] Saved {saved}/{len(batch.messages)} messages for {chat_session.id}")

    return SaveMessagesResponse(
        success=failed == 0,
        saved=saved,
        failed=failed,
        total=len(batch.messages),
    )


@router.get("/{session_id}/messages", response_model=MessageListResponse)
async def list_messages(
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    message_type: Optional[str] = Query(None),
    chat_session: ChatSession = Depends(get_user_chat_session),
    db: AsyncSession = Depends(get_db)
):
    conditions = [ChatMessage.session_id == chat_session.id]
    if message_type:
        conditions.append(ChatMessage.message_type == message_type)

    total = await db.scalar(select(func.count(ChatMessage.id)).where(*conditions)) or 0
    result = await db.execute(
        select(ChatMessage)
        .where(*conditions)
        .order_by(ChatMessage.timestamp.asc())
        .offset(offset)
        .limit(limit)
    )

    return MessageListResponse(
        messages=[ChatMessageResponse.model_validate(m) for m in result.scalars().all()],
        pagination=offset_pagination(total, limit, offset),
    )


# ==================== Files ====================

@router.get("/{session_id}/files", response_model=SessionFilesResponse)
async def list_session_files(
    chat_session: ChatSession = Depends(get_user_chat_session),
    db: AsyncSession = Depends(get_db)
):
    result = await db.execute(
        select(UploadedFile)
        .where(UploadedFile.session_id == chat_session.id)
        .order_by(UploadedFile.uploaded_at.desc())
    )
    files = [UploadedFileResponse.model_validate(f) for f in result.scalars().all()]
    return SessionFilesResponse(files=files, count=len(files))
