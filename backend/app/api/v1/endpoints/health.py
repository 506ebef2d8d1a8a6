"""
Health Check Endpoints

- /health           - Liveness (also served at the application root)
- /health/ready     - Readiness: database reachable and tables created
- /health/services  - Builder service reachability (Text Labs)
"""

from fastapi import APIRouter, Depends, HTTPException, status
from datetime import datetime
from typing import Dict, Any
import time

from sqlalchemy import text

from app.core.config import settings
from app.core.database import get_session_local
from app.core.logging_config import logger
from app.modules.builder.dependencies import get_textlabs
from app.services.textlabs_client import TextLabsClient


router = APIRouter()


async def check_database() -> Dict[str, Any]:
    """Check database connectivity and that the schema exists"""
    start = time.time()
    try:
        session_factory = get_session_local()
        async with session_factory() as session:
            await session.execute(text("SELECT 1"))
            try:
                await session.execute(text("SELECT COUNT(*) FROM users"))
                tables_ok = True
            except Exception:
                tables_ok = False

        return {
            "status": "healthy",
            "latency_ms": round((time.time() - start) * 1000, 2),
            "tables_ready": tables_ok,
        }
    except Exception as e:
        logger.error(f"[HealthCheck] Database check failed: {e}")
        return {
            "status": "unhealthy",
            "latency_ms": round((time.time() - start) * 1000, 2),
            "tables_ready": False,
            "error": str(e),
        }


@router.get("")
@router.get("/live")
async def liveness_check():
    """Liveness probe - the process is up"""
    return {
        "status": "alive",
        "timestamp": datetime.utcnow().isoformat(),
        "app": settings.APP_NAME,
        "environment": settings.ENVIRONMENT,
    }


@router.get("/ready")
async def readiness_check():
    """Readiness probe - 503 until the database answers and the schema exists"""
    db_check = await check_database()
    is_ready = db_check["status"] == "healthy" and db_check["tables_ready"]

    response = {
        "status": "ready" if is_ready else "not_ready",
        "timestamp": datetime.utcnow().isoformat(),
        "checks": {"database": db_check},
    }

    if not is_ready:
        logger.warning(f"[HealthCheck] Readiness check failed: {response}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=response
        )
    return response


@router.get("/services")
async def services_health_check(textlabs: TextLabsClient = Depends(get_textlabs)):
    """Text Labs reachability; degraded rather than failing so the builder can warn the user"""
    start = time.time()
    textlabs_ok = await textlabs.health_check()

    return {
        "status": "healthy" if textlabs_ok else "degraded",
        "timestamp": datetime.utcnow().isoformat(),
        "services": {
            "textlabs": {
                "status": "healthy" if textlabs_ok else "unhealthy",
                "url": textlabs.base_url,
                "latency_ms": round((time.time() - start) * 1000, 2),
            }
        },
    }
