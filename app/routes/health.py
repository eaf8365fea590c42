# app/routes/health.py
"""
Health check endpoints with record store monitoring.
"""

import time

from fastapi import APIRouter, Request

from app.config import settings

router = APIRouter()


@router.get("/healthz")
async def healthz():
    """Basic health check - always returns 200 if app is running."""
    return {"status": "ok", "service": "employee-records-api"}


@router.get("/readyz")
async def readyz(request: Request):
    """
    Readiness check: the user service is initialized and configuration is usable.
    """
    checks = {}
    overall_ok = True

    # 1) User service
    t0 = time.time()
    service = getattr(request.app.state, "user_service", None)
    if service is None:
        checks["user_service"] = {"ok": False, "error": "User service not initialized"}
        overall_ok = False
    else:
        try:
            stats = service.stats()
            checks["user_service"] = {
                "ok": True,
                "latency_ms": round((time.time() - t0) * 1000, 1),
                **stats,
            }
        except Exception as e:
            checks["user_service"] = {"ok": False, "error": f"{type(e).__name__}: {e}"}
            overall_ok = False

    # 2) Configuration checks
    config_issues = []
    try:
        settings.get_jwt_config()
    except ValueError as e:
        config_issues.append(str(e))

    checks["configuration"] = {
        "ok": not config_issues,
        "issues": config_issues or None,
        "environment": settings.environment,
    }
    overall_ok = overall_ok and not config_issues

    return {"overall_ok": overall_ok, "checks": checks, "timestamp": time.time()}
