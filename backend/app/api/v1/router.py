from fastapi import APIRouter
from app.api.v1.endpoints import auth, sessions, builder, billing, content, health
from app.api.v1.endpoints.admin import admin_router

api_router = APIRouter()

# /health, /health/ready, /health/services
api_router.include_router(health.router, prefix="/health", tags=["Health"])

api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(sessions.router, prefix="/sessions", tags=["Chat Sessions"])
api_router.include_router(builder.router, prefix="/builder", tags=["Builder"])
api_router.include_router(billing.router, prefix="/billing", tags=["Billing"])
api_router.include_router(content.router, prefix="/content", tags=["Content"])

# Admin routes
api_router.include_router(admin_router)
