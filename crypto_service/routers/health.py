"""健康检查路由"""

import time

from fastapi import APIRouter, Request

from crypto_service import __version__

router = APIRouter(tags=["健康检查"])


@router.get("/health")
async def health(request: Request):
    """服务健康检查"""
    state = request.app.state
    return {
        "status": "ok",
        "version": __version__,
        "timestamp": int(time.time()),
        "service": "Crypto Tracker Service",
        "assets": state.market_state.asset_keys,
        "scheduler_running": state.scheduler.running,
        "updates": state.update_service.status(),
    }


@router.get("/healthz")
async def healthz():
    """Kubernetes liveness probe"""
    return {"status": "ok"}


@router.get("/readyz")
async def readyz(request: Request):
    """Kubernetes readiness probe：至少成功拉取过一次行情"""
    return {"ready": request.app.state.market_state.has_data()}
