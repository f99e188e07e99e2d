# File: src/api/routers/utility_routes.py

from fastapi import APIRouter, Request
from fastapi.responses import RedirectResponse, PlainTextResponse

from common.utils.date_utils import utc_now

router = APIRouter()


@router.get("/", response_class=RedirectResponse)
async def root():
    return RedirectResponse(url="/docs")


@router.get("/favicon.ico", response_class=PlainTextResponse)
async def favicon():
    return ""


@router.get("/health", status_code=200)
async def health_check(request: Request):
    monitor = getattr(request.app.state, "sla_monitor", None)
    return {
        "status": "healthy",
        "sla_monitor": "running" if monitor is not None and monitor.running else "stopped",
        "timestamp": utc_now().isoformat()
    }
