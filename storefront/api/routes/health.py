from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Request

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check(request: Request) -> dict:
    """Health check endpoint.

    Used by load balancers and monitoring systems to determine service health.
    Reports which protections are active on this instance.
    """

    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "security": {
            "rate_limit": request.app.state.rate_limit_enabled,
            "login_guard": True,
            "cors": True,
        },
    }
