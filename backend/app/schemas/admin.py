from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional
from datetime import datetime


# ==================== User Approval Schemas ====================

class AdminUserResponse(BaseModel):
    """User row as shown on the approval screen"""
    id: str
    email: str
    full_name: Optional[str]
    role: str
    tier: str
    is_active: bool
    approved: bool
    approved_at: Optional[datetime]
    approved_by: Optional[str]
    oauth_provider: Optional[str]
    avatar_url: Optional[str]
    created_at: datetime
    last_login: Optional[datetime]

    chat_sessions_count: int = 0


class AdminUsersResponse(BaseModel):
    """Paginated users response for admin"""
    items: List[AdminUserResponse]
    total: int
    page: int
    page_size: int
    total_pages: int
    has_next: bool
    has_previous: bool


class UserApprovalRequest(BaseModel):
    user_id: str
    approved: bool = True


class UserApprovalResponse(BaseModel):
    success: bool = True
    user: AdminUserResponse


# ==================== Session Cleanup Schemas ====================

class AbandonedSessionInfo(BaseModel):
    id: str
    user_id: str
    created_at: datetime
    age_hours: int
    file_count: int
    total_file_size: int


class CleanupDryRunResponse(BaseModel):
    dry_run: bool = True
    threshold_hours: int
    cutoff_time: datetime
    would_delete: int
    total_files: int
    total_size_mb: float
    sessions: List[AbandonedSessionInfo] = Field(default_factory=list)


class CleanupResultResponse(BaseModel):
    """Result of a cleanup run; message is set when nothing was deleted"""
    success: bool
    threshold_hours: int
    cutoff_time: datetime
    sessions_deleted: int = 0
    files_deleted: int = 0
    messages_deleted: int = 0
    oldest_session_age: int = 0
    unique_users: int = 0
    sessions: List[Dict[str, Any]] = Field(default_factory=list)
    message: Optional[str] = None
