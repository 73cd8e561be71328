"""
行情更新服务
一次更新周期 = 拉取全部资产报价 + 整批写入缓存层。
拉取失败时不修改任何状态，等待下一次定时触发。
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Dict, Optional

from crypto_service.errors import FetchError
from crypto_service.layers.acquisition import QuoteFetcher
from crypto_service.layers.cache import MarketState
from crypto_service.models.market import Snapshot

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


class UpdateService:
    """行情更新周期"""

    def __init__(
        self,
        state: MarketState,
        fetcher: QuoteFetcher,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._state = state
        self._fetcher = fetcher
        self._clock = clock

        self.last_success_at: Optional[datetime] = None
        self.last_error: Optional[str] = None
        self.success_count = 0
        self.failure_count = 0

    async def run_update(self) -> None:
        """执行一次更新周期；不向调用方抛出异常"""
        keys = self._state.asset_keys
        try:
            quotes = await self._fetcher.fetch_quotes(keys)
        except FetchError as exc:
            self._record_failure(str(exc))
            logger.error(f"行情拉取失败，保留上一次数据: {exc}")
            return
        except Exception as exc:
            self._record_failure(str(exc))
            logger.exception(f"行情更新出现未预期异常: {exc}")
            return

        missing = [k for k in keys if k not in quotes]
        if missing:
            self._record_failure(f"缺少资产 {missing}")
            logger.error(f"行情数据不完整（缺少 {missing}），本次更新作废")
            return

        now = self._clock()
        batch: Dict[str, Snapshot] = {
            key: Snapshot(
                coinId=key,
                name=self._state.asset_name(key),
                current_price=quotes[key].price,
                market_cap=quotes[key].market_cap,
                change_24h=quotes[key].change_24h,
                updated_at=now,
            )
            for key in keys
        }
        # 同步写入，中途不 await
        self._state.apply_batch(batch)

        self.last_success_at = now
        self.last_error = None
        self.success_count += 1
        logger.info(f"✅ 行情数据更新成功（{len(batch)} 个资产）")

    def _record_failure(self, message: str) -> None:
        self.last_error = message
        self.failure_count += 1

    def status(self) -> dict:
        return {
            "last_success_at": self.last_success_at.isoformat() if self.last_success_at else None,
            "last_error": self.last_error,
            "success_count": self.success_count,
            "failure_count": self.failure_count,
        }
