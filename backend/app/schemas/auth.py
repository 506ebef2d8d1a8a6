from pydantic import BaseModel, EmailStr, Field, field_serializer
from typing import Optional
from datetime import datetime

from app.models.user import UserRole, UserTier


class UserRegister(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    full_name: Optional[str] = None


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class Token(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class RefreshTokenRequest(BaseModel):
    refresh_token: str


class UserResponse(BaseModel):
    id: str
    email: str
    full_name: Optional[str] = None
    role: UserRole
    tier: UserTier
    is_active: bool
    approved: bool
    approved_at: Optional[datetime] = None
    created_at: datetime
    avatar_url: Optional[str] = None
    oauth_provider: Optional[str] = None

    @field_serializer('role', 'tier')
    def serialize_enum(self, value) -> str:
        return value.value

    class Config:
        from_attributes = True


class LoginResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    user: UserResponse


# ============================================
# OAuth Schemas
# ============================================

class GoogleAuthRequest(BaseModel):
    """Request for Google sign-in with the ID token from the Sign-In button."""
    credential: str


class OAuthTokenResponse(LoginResponse):
    """Login response for OAuth sign-in; is_new_user lets the frontend show onboarding"""
    is_new_user: bool = False
