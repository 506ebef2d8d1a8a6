# Authentication module

from app.modules.auth.dependencies import (
    get_current_user,
    get_approved_user,
    get_current_admin,
    get_google_oauth,
    get_user_chat_session,
    is_bypass_email,
)

__all__ = [
    "get_current_user",
    "get_approved_user",
    "get_current_admin",
    "get_google_oauth",
    "get_user_chat_session",
    "is_bypass_email",
]
