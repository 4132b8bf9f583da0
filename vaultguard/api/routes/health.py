"""Liveness probe. Always 200 while the process is up; never touches the ledger."""

from datetime import datetime, timezone

from fastapi import APIRouter, status

router = APIRouter(tags=["health"])


@router.get("/healthz", status_code=status.HTTP_200_OK)
def health_check():
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}
