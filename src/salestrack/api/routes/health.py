"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


def _get_routing_health_check():
    """Lazy import to avoid startup failures."""
    from ...services.tracking.routing_client import RoutingConfig, check_health
    return RoutingConfig, check_health


@router.get("/health/routing", status_code=status.HTTP_200_OK)
def health_routing() -> dict:
    """Check the directions service used for path reconstruction."""
    try:
        RoutingConfig, check_health = _get_routing_health_check()
        config = RoutingConfig.from_settings()
        if not config.is_available:
            return {
                "service": "routing",
                "configured": False,
                "healthy": False,
                "message": "Directions service not configured; paths are drawn as straight lines.",
            }
        return {"service": "routing", "configured": True, "healthy": check_health(config)}
    except Exception as e:
        return {"service": "routing", "healthy": False, "error": str(e)}


@router.get("/health/database", status_code=status.HTTP_200_OK)
def check_database() -> dict:
    """Check database connection."""
    from ...db.supabase import get_supabase_client

    supabase = get_supabase_client()
    if not supabase:
        return {
            "configured": False,
            "message": "Supabase not configured. Set SALESTRACK_SUPABASE_URL and SALESTRACK_SUPABASE_KEY environment variables.",
        }

    try:
        supabase.table("routes").select("id").limit(1).execute()
        return {
            "configured": True,
            "connected": True,
            "message": "Database connected.",
        }
    except Exception as exc:
        return {
            "configured": True,
            "connected": False,
            "error": str(exc),
            "message": f"Database connection error: {exc}",
        }
