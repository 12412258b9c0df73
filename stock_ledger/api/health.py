from fastapi import APIRouter
from stock_ledger.utils.cache import redis_client, cache_service
from stock_ledger.database import engine
from sqlalchemy import text

router = APIRouter(prefix="/health", tags=["Health"])


@router.get(
    "/",
    summary="Health check",
    description="Basic health check endpoint."
)
def health_check():
    """Simple health check."""
    return {"status": "healthy"}


@router.get(
    "/ready",
    summary="Readiness check",
    description="Check if all services (DB, Redis) are ready."
)
def readiness_check():
    """
    Readiness check for all dependencies.

    Returns status of:
    - Database connection
    - Redis connection (reported as disabled when caching is off)
    """
    checks = {
        "database": False,
        "redis": False
    }

    # Check database
    if engine is None:
        checks["database_error"] = "Database not configured"
    else:
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
                checks["database"] = True
        except Exception as e:
            checks["database_error"] = str(e)

    # Check Redis
    if not cache_service.enabled:
        checks["redis"] = "disabled"
    else:
        try:
            cache_service.ping()
            checks["redis"] = True
        except Exception as e:
            checks["redis_error"] = str(e)

    # Determine overall status
    all_healthy = checks["database"] is True and checks["redis"] in (True, "disabled")

    return {
        "status": "ready" if all_healthy else "not_ready",
        "checks": checks
    }


@router.get(
    "/cache/stats",
    summary="Cache statistics",
    description="Get Redis cache statistics."
)
def cache_stats():
    """Get cache statistics."""
    if not cache_service.enabled:
        return {"enabled": False}
    try:
        info = redis_client.info()
        return {
            "enabled": True,
            "connected_clients": info.get("connected_clients"),
            "used_memory": info.get("used_memory_human"),
            "total_keys": redis_client.dbsize(),
            "uptime_seconds": info.get("uptime_in_seconds")
        }
    except Exception as e:
        return {"error": str(e)}
