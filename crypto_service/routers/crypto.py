"""
行情数据路由
GET /crypto                 - 全部资产最新快照
GET /stats?coin=<key>       - 单个资产价格 / 市值 / 24h 涨跌幅
GET /deviation?coin=<key>   - 单个资产价格历史的总体标准差
"""

from typing import Dict, Optional

from fastapi import APIRouter, Depends, Query, Request

from crypto_service.models.market import Snapshot
from crypto_service.models.response import DeviationResponse, ErrorResponse, StatsResponse
from crypto_service.services.query_service import QueryService

router = APIRouter(tags=["行情数据"])

_COIN_DESCRIPTION = "资产 ID，如 bitcoin / matic-network / ethereum"


async def get_query_service(request: Request) -> QueryService:
    """
    获取查询服务

    尚无任何行情数据时（启动拉取失败、或首次定时触发之前），
    在后台触发一次按需更新，本次请求不等待其完成。
    """
    state = request.app.state
    if state.settings.ON_DEMAND_FETCH and not state.market_state.has_data():
        state.scheduler.request_update()
    return state.query_service


@router.get("/crypto", response_model=Dict[str, Snapshot])
async def get_crypto(svc: QueryService = Depends(get_query_service)):
    """获取全部资产的最新行情快照（尚未拉取成功的资产不出现）"""
    return svc.get_snapshot()


@router.get(
    "/stats",
    response_model=StatsResponse,
    responses={400: {"model": ErrorResponse}},
)
async def get_stats(
    coin: Optional[str] = Query(default=None, description=_COIN_DESCRIPTION),
    svc: QueryService = Depends(get_query_service),
):
    """获取单个资产的价格、市值与 24 小时涨跌幅"""
    price, market_cap, change = svc.get_stats(coin)
    return StatsResponse(price=price, marketCap=market_cap, change_24h=change)


@router.get(
    "/deviation",
    response_model=DeviationResponse,
    responses={400: {"model": ErrorResponse}},
)
async def get_deviation(
    coin: Optional[str] = Query(default=None, description=_COIN_DESCRIPTION),
    svc: QueryService = Depends(get_query_service),
):
    """获取单个资产最近价格（最多 100 条）的总体标准差"""
    return DeviationResponse(deviation=svc.get_deviation(coin))
