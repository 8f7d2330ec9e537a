# app/api/routers/health.py
from __future__ import annotations

from fastapi import APIRouter, Depends

from app.api.deps import get_result_cache
from app.services.result_cache import ResultCache

router = APIRouter(tags=["ops"])


@router.get("/health")
async def health(cache: ResultCache = Depends(get_result_cache)):
    return {"status": "ok", "cache": cache.stats()}
