from pydantic import BaseModel, Field
from typing import Any, Dict, List, Literal, Optional
from datetime import datetime


SessionStatusFilter = Literal["draft", "active", "archived", "deleted"]
UpdatableStatus = Literal["active", "archived", "deleted"]


class ChatSessionCreate(BaseModel):
    session_id: str = Field(..., min_length=1, max_length=36)
    title: Optional[str] = Field(None, max_length=255)


class ChatSessionUpdate(BaseModel):
    """Only these fields may be changed by the owner; omitted fields are left alone"""
    title: Optional[str] = Field(None, max_length=255)
    current_stage: Optional[int] = Field(None, ge=1, le=6)
    strawman_preview_url: Optional[str] = None
    final_presentation_url: Optional[str] = None
    strawman_presentation_id: Optional[str] = None
    final_presentation_id: Optional[str] = None
    slide_count: Optional[int] = Field(None, ge=0)
    status: Optional[UpdatableStatus] = None
    is_favorite: Optional[bool] = None
    last_message_at: Optional[datetime] = None


class ChatMessageResponse(BaseModel):
    id: str
    session_id: str
    message_type: str
    timestamp: datetime
    payload: Any
    user_text: Optional[str] = None

    class Config:
        from_attributes = True


class ChatSessionResponse(BaseModel):
    id: str
    user_id: str
    title: Optional[str] = None
    status: str
    current_stage: int
    strawman_preview_url: Optional[str] = None
    final_presentation_url: Optional[str] = None
    strawman_presentation_id: Optional[str] = None
    final_presentation_id: Optional[str] = None
    slide_count: Optional[int] = None
    is_favorite: bool
    created_at: datetime
    updated_at: Optional[datetime] = None
    first_message_at: Optional[datetime] = None
    last_message_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ChatSessionListItem(ChatSessionResponse):
    last_message: Optional[ChatMessageResponse] = None


class ChatSessionDetail(ChatSessionResponse):
    messages: List[ChatMessageResponse] = []


class SessionPagination(BaseModel):
    total: int
    limit: int
    offset: int
    has_more: bool


class ChatSessionListResponse(BaseModel):
    sessions: List[ChatSessionListItem]
    pagination: SessionPagination


class ActivateSessionResponse(BaseModel):
    success: bool = True
    message: str
    session: ChatSessionResponse


class MessageIn(BaseModel):
    id: str = Field(..., min_length=1, max_length=255)
    message_type: str = Field(..., min_length=1, max_length=50)
    timestamp: datetime
    payload: Dict[str, Any]
    user_text: Optional[str] = None


class SaveMessagesRequest(BaseModel):
    messages: List[MessageIn] = Field(..., min_length=1)


class SaveMessagesResponse(BaseModel):
    success: bool
    saved: int
    failed: int
    total: int


class MessageListResponse(BaseModel):
    messages: List[ChatMessageResponse]
    pagination: SessionPagination


class UploadedFileResponse(BaseModel):
    id: str
    file_name: str
    file_size: int
    file_type: Optional[str] = None
    store_name: Optional[str] = None
    store_file_id: Optional[str] = None
    uploaded_at: datetime

    class Config:
        from_attributes = True


class SessionFilesResponse(BaseModel):
    files: List[UploadedFileResponse]
    count: int
