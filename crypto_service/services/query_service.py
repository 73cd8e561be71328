"""
行情查询服务
只读访问缓存层，将快照 / 价格历史转换为响应数据
"""

import logging
from typing import Dict, Optional, Tuple

from crypto_service.errors import InvalidAssetError
from crypto_service.layers.analysis import price_deviation
from crypto_service.layers.cache import MarketState
from crypto_service.models.market import Snapshot

logger = logging.getLogger(__name__)


class QueryService:
    """行情查询服务"""

    def __init__(self, state: MarketState):
        self._state = state

    def _check_configured(self, asset_key: Optional[str]) -> str:
        if not asset_key:
            raise InvalidAssetError(asset_key, "缺少 coin 参数")
        if not self._state.is_configured(asset_key):
            supported = ", ".join(self._state.asset_keys)
            logger.info(f"查询了未配置的资产: {asset_key!r}")
            raise InvalidAssetError(asset_key, f"不支持的资产: {asset_key}，支持的资产: {supported}")
        return asset_key

    def get_snapshot(self) -> Dict[str, Snapshot]:
        """全部已有快照；从未成功拉取的资产不出现在结果中"""
        return self._state.snapshots()

    def get_stats(self, asset_key: Optional[str]) -> Tuple[float, float, float]:
        """
        获取单个资产的 (价格, 市值, 24h 涨跌幅)

        Raises:
            InvalidAssetError: 资产未配置或尚无快照
        """
        key = self._check_configured(asset_key)
        snap = self._state.snapshot(key)
        if snap is None:
            logger.debug(f"资产 {key} 尚无快照")
            raise InvalidAssetError(key, f"资产 {key} 暂无行情数据")
        return snap.current_price, snap.market_cap, snap.change_24h

    def get_deviation(self, asset_key: Optional[str]) -> float:
        """
        获取单个资产价格历史的总体标准差（两位小数）

        Raises:
            InvalidAssetError: 资产未配置或价格历史为空
        """
        key = self._check_configured(asset_key)
        prices = self._state.history(key)
        if not prices:
            logger.debug(f"资产 {key} 价格历史为空，无法计算标准差")
            raise InvalidAssetError(key, f"资产 {key} 暂无价格历史")
        return price_deviation(prices)
