"""
Health check endpoints
"""

import psutil
from fastapi import APIRouter, Depends

from app.api.deps import get_result_store
from app.core.cache import question_cache
from app.core.config import settings
from app.core.database import check_connection
from app.stores import ResultStore, SQLResultStore

router = APIRouter()


@router.get("/health")
def health_check():
    """Basic health check"""
    return {
        "status": "healthy",
        "service": settings.PROJECT_NAME,
        "version": settings.APP_VERSION,
    }


@router.get("/health/detailed")
def detailed_health_check(store: ResultStore = Depends(get_result_store)):
    """Detailed health check"""
    health_status = {
        "status": "healthy",
        "service": settings.PROJECT_NAME,
        "version": settings.APP_VERSION,
        "checks": {"storage_backend": settings.STORAGE_BACKEND},
    }

    # Check database
    if isinstance(store, SQLResultStore):
        database = check_connection()
        health_status["checks"]["database"] = database
        if database["status"] != "healthy":
            health_status["status"] = "degraded"

    # Check Redis
    health_status["checks"]["redis"] = "healthy" if question_cache.connected else "disconnected"

    # Check system resources
    memory = psutil.virtual_memory()
    health_status["checks"]["resources"] = {
        "cpu_percent": psutil.cpu_percent(interval=None),
        "memory_percent": memory.percent,
        "memory_available_mb": round(memory.available / (1024 * 1024), 1),
    }

    return health_status
