import os
from datetime import datetime, timezone
from typing import Dict, Any, Optional
from fastapi import APIRouter
from fastapi.responses import JSONResponse

router = APIRouter()

# Global state for last refresh tracking
_last_refresh: Optional[Dict[str, Any]] = None


def _utc_now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def update_last_refresh(
    source: str,
    event_count: int,
    duration_ms: Optional[float] = None,
    success: bool = True,
    error: Optional[str] = None
) -> None:
    """
    Update the last refresh information.

    Args:
        source: The calendar provider used
        event_count: Number of events fetched (0 on failure)
        duration_ms: Optional duration in milliseconds
        success: Whether the fetch succeeded
        error: Optional error message
    """
    global _last_refresh

    _last_refresh = {
        "time": _utc_now(),
        "source": source,
        "event_count": event_count,
        "success": success,
    }

    if duration_ms is not None:
        _last_refresh["duration_ms"] = round(duration_ms, 2)

    if error is not None:
        _last_refresh["error"] = error


def get_last_refresh() -> Optional[Dict[str, Any]]:
    """Get the last refresh information."""
    return _last_refresh


@router.get("/healthz")
async def health_check() -> JSONResponse:
    """
    Health check endpoint with last refresh information.

    Returns:
        JSON response with status and last refresh metadata
    """
    response = {
        "status": "ok",
        "timestamp": _utc_now(),
    }

    last_refresh = get_last_refresh()
    if last_refresh:
        response["last_refresh"] = last_refresh

    obs_enabled = os.getenv("OBS_ENABLED", "false").lower() == "true"
    response["observability"] = {
        "enabled": obs_enabled,
        "sentry_configured": bool(os.getenv("SENTRY_DSN")),
    }

    return JSONResponse(status_code=200, content=response)
