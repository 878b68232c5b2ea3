# app/routers/health.py
from datetime import datetime, timezone

from fastapi import APIRouter

router = APIRouter(prefix="/api", tags=["health"])

@router.get("/health")
async def health():
    return {"ok": True, "now": datetime.now(timezone.utc).isoformat()}
