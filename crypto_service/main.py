"""
加密货币行情服务
独立 FastAPI 应用程序入口

启动方式:
    uvicorn crypto_service.main:app --host 0.0.0.0 --port 3000
    python -m crypto_service.main
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from crypto_service import __version__
from crypto_service.config import CryptoServiceSettings, settings
from crypto_service.errors import InvalidAssetError
from crypto_service.layers.acquisition import QuoteFetcher
from crypto_service.layers.cache import MarketState
from crypto_service.routers import crypto, health
from crypto_service.services.query_service import QueryService
from crypto_service.services.scheduler import UpdateScheduler
from crypto_service.services.update_service import UpdateService

# ── 日志配置 ──────────────────────────────────────────────
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


# ── 生命周期管理 ──────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用启动/关闭生命周期钩子"""
    cfg: CryptoServiceSettings = app.state.settings
    scheduler: UpdateScheduler = app.state.scheduler

    logger.info("=" * 60)
    logger.info(f"🚀 Crypto Tracker Service v{__version__} 启动中")
    logger.info(f"   资产      : {', '.join(cfg.ASSET_KEYS)}")
    logger.info(f"   数据源    : {cfg.COINGECKO_BASE_URL}")
    logger.info(f"   更新间隔  : {cfg.UPDATE_INTERVAL_SECONDS} 秒")
    logger.info("=" * 60)

    if cfg.SCHEDULER_ENABLED:
        scheduler.start()
    if cfg.FETCH_ON_STARTUP:
        # 首次定时触发前先拉取一次，不阻塞启动
        scheduler.request_update()

    yield

    logger.info("🔄 行情服务正在关闭...")
    await scheduler.stop()
    await app.state.fetcher.aclose()
    logger.info("✅ 行情服务已关闭")


def create_app(
    config: Optional[CryptoServiceSettings] = None,
    fetcher: Optional[QuoteFetcher] = None,
) -> FastAPI:
    """
    创建应用实例，并组装进程级状态与服务

    Args:
        config: 服务配置，默认读取环境变量
        fetcher: 行情获取实现，测试时可替换
    """
    cfg = config or settings

    app = FastAPI(
        title="Crypto Tracker Service",
        description=(
            "定时拉取 CoinGecko 行情并在内存中缓存：\n"
            "- 📊 最新快照（价格 / 市值 / 24h 涨跌幅）\n"
            f"- 📈 最近 {cfg.HISTORY_SIZE} 次价格的总体标准差\n"
        ),
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # ── 进程级状态 ────────────────────────────────────────
    state = MarketState(cfg.ASSETS, history_size=cfg.HISTORY_SIZE)
    fetcher = fetcher or QuoteFetcher(cfg)
    update_service = UpdateService(state, fetcher)

    app.state.settings = cfg
    app.state.market_state = state
    app.state.fetcher = fetcher
    app.state.update_service = update_service
    app.state.query_service = QueryService(state)
    app.state.scheduler = UpdateScheduler(
        update_service,
        interval_seconds=cfg.UPDATE_INTERVAL_SECONDS,
        align_to_interval=cfg.ALIGN_TO_INTERVAL,
    )

    # ── CORS 中间件 ───────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── 请求计时中间件 ─────────────────────────────────────
    @app.middleware("http")
    async def add_process_time(request: Request, call_next):
        start = time.time()
        response = await call_next(request)
        response.headers["X-Process-Time"] = f"{(time.time() - start) * 1000:.1f}ms"
        return response

    # ── 异常处理 ──────────────────────────────────────────
    @app.exception_handler(InvalidAssetError)
    async def invalid_asset_handler(request: Request, exc: InvalidAssetError):
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"未处理的异常: {exc}", exc_info=True)
        return JSONResponse(status_code=500, content={"error": "internal server error"})

    # ── 注册路由 ──────────────────────────────────────────
    app.include_router(crypto.router)
    app.include_router(health.router)

    @app.get("/", include_in_schema=False)
    async def root():
        return {
            "service": "Crypto Tracker Service",
            "version": __version__,
            "docs": "/docs",
            "health": "/health",
        }

    return app


# ── 应用实例 ──────────────────────────────────────────────
app = create_app()


# ── 直接运行入口 ──────────────────────────────────────────
if __name__ == "__main__":
    uvicorn.run(
        "crypto_service.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
