"""
Liveness and readiness probes.

``GET /`` answers plain ``OK`` for platform health checks that only
look at the status code and body.  ``GET /health`` also reports
whether the storage backend is reachable.  ``GET /api/test`` is a
smoke endpoint the front end calls to confirm the API is up.
"""

import time
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.concurrency import run_in_threadpool

from quiz_intake_api.app.api.deps import get_storage
from quiz_intake_api.app.storage.base import Storage


router = APIRouter()
api_router = APIRouter()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/", response_class=PlainTextResponse, include_in_schema=False)
async def root() -> str:
    return "OK"


@router.get("/health", summary="Service health")
async def health(request: Request, storage: Storage = Depends(get_storage)) -> JSONResponse:
    reachable = await run_in_threadpool(storage.ping)
    body: Dict[str, Any] = {
        "status": "ok",
        "database": "connected" if reachable else "disconnected",
        "storage": storage.name,
        "timestamp": _now(),
        "uptime": round(time.monotonic() - request.app.state.started_at, 3),
    }
    return JSONResponse(body)


@api_router.get("/test", summary="API smoke test")
async def api_test() -> Dict[str, Any]:
    return {"success": True, "message": "API is working!", "timestamp": _now()}
