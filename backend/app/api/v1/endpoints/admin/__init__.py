"""
Admin API endpoints.
User approval requires an admin; cleanup runs are authorized by the cron secret.
"""
from fastapi import APIRouter

from app.api.v1.endpoints.admin import users, sessions

admin_router = APIRouter(prefix="/admin", tags=["Admin"])

admin_router.include_router(users.router, prefix="/users", tags=["Admin Users"])
admin_router.include_router(sessions.router, prefix="/cleanup-sessions", tags=["Admin Sessions"])
