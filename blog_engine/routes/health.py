"""
Health check endpoint for monitoring system status.
"""

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends

from blog_engine.models import EntityKind
from blog_engine.routes.deps import get_store
from blog_engine.store import Store

router = APIRouter(prefix="/health", tags=["health"])

VERSION = "1.0.0"


def check_store_health(store: Store) -> Dict[str, Any]:
    """
    Check that the store answers and report its collection sizes.

    Returns:
        Dict with status and per-kind record counts
    """
    with store.transaction():
        counts = {kind.value: store.count(kind) for kind in EntityKind}
    return {"status": "ok", "records": counts}


@router.get("/")
def health_check(store: Store = Depends(get_store)) -> Dict[str, Any]:
    """
    Health check.

    Returns:
        Dict containing:
        - status: "ok"
        - store: store status and record counts
        - version: API version
        - timestamp: current UTC timestamp
    """
    return {
        "status": "ok",
        "store": check_store_health(store),
        "version": VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
