# Pydantic schemas
from app.schemas.auth import (
    UserRegister,
    UserLogin,
    Token,
    UserResponse,
    LoginResponse,
    GoogleAuthRequest,
)
from app.schemas.session import (
    ChatSessionCreate,
    ChatSessionUpdate,
    ChatSessionResponse,
    ChatSessionListResponse,
    SaveMessagesRequest,
)
from app.schemas.builder import (
    ElementCommandRequest,
    ElementCommandResult,
    TextLabsForm,
)

__all__ = [
    "UserRegister",
    "UserLogin",
    "Token",
    "UserResponse",
    "LoginResponse",
    "GoogleAuthRequest",
    "ChatSessionCreate",
    "ChatSessionUpdate",
    "ChatSessionResponse",
    "ChatSessionListResponse",
    "SaveMessagesRequest",
    "ElementCommandRequest",
    "ElementCommandResult",
    "TextLabsForm",
]
