"""
Layer 1 – 行情获取层
调用 CoinGecko simple/price 接口，一次请求拉取全部已配置资产的报价，
规范化为 Quote 后向上层提供。任一资产缺失即视为整体失败，不返回部分结果。
"""

import logging
import math
from typing import Any, Dict, List, Optional

import httpx

from crypto_service.config import CryptoServiceSettings, settings as default_settings
from crypto_service.errors import FetchError
from crypto_service.models.market import Quote

logger = logging.getLogger(__name__)

_SIMPLE_PRICE_PATH = "/simple/price"


def _to_float(value: Any, field: str, asset_key: str) -> float:
    # bool 是 int 的子类，需单独排除
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise FetchError(f"资产 {asset_key} 的字段 {field} 非数值: {value!r}")
    result = float(value)
    if not math.isfinite(result):
        raise FetchError(f"资产 {asset_key} 的字段 {field} 非有限数值: {value!r}")
    return result


class QuoteFetcher:
    """行情获取层：封装 CoinGecko 报价接口"""

    def __init__(
        self,
        config: Optional[CryptoServiceSettings] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._config = config or default_settings
        self._currency = self._config.VS_CURRENCY.lower()
        self._owns_client = client is None
        self._client = client

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            headers = {"Accept": "application/json"}
            if self._config.COINGECKO_API_KEY:
                headers["x-cg-demo-api-key"] = self._config.COINGECKO_API_KEY
            self._client = httpx.AsyncClient(
                base_url=self._config.COINGECKO_BASE_URL,
                headers=headers,
                timeout=self._config.FETCH_TIMEOUT,
            )
        return self._client

    async def fetch_quotes(self, asset_keys: List[str]) -> Dict[str, Quote]:
        """
        拉取指定资产的报价

        Args:
            asset_keys: CoinGecko 资产 ID 列表

        Returns:
            { asset_key: Quote }，包含全部请求的资产

        Raises:
            FetchError: 网络错误、非 2xx 响应、响应格式错误或任一资产数据缺失
        """
        params = {
            "ids": ",".join(asset_keys),
            "vs_currencies": self._currency,
            "include_market_cap": "true",
            "include_24hr_change": "true",
        }
        try:
            resp = await self._get_client().get(_SIMPLE_PRICE_PATH, params=params)
            resp.raise_for_status()
            payload = resp.json()
        except httpx.HTTPStatusError as exc:
            raise FetchError(f"行情接口返回错误状态码: {exc.response.status_code}", exc) from exc
        except httpx.HTTPError as exc:
            raise FetchError(f"行情接口请求失败: {exc}", exc) from exc
        except ValueError as exc:
            raise FetchError(f"行情接口响应不是合法 JSON: {exc}", exc) from exc

        quotes = self._parse(payload, asset_keys)
        logger.debug(f"行情获取成功，共 {len(quotes)} 个资产")
        return quotes

    def _parse(self, payload: Any, asset_keys: List[str]) -> Dict[str, Quote]:
        if not isinstance(payload, dict):
            raise FetchError(f"行情接口响应格式错误: 期望 JSON 对象，实际为 {type(payload).__name__}")

        cur = self._currency
        fields = {
            "price": cur,
            "market_cap": f"{cur}_market_cap",
            "change_24h": f"{cur}_24h_change",
        }
        quotes: Dict[str, Quote] = {}
        for key in asset_keys:
            data = payload.get(key)
            if not isinstance(data, dict):
                raise FetchError(f"行情接口响应缺少资产: {key}")
            values = {}
            for name, upstream in fields.items():
                if upstream not in data:
                    raise FetchError(f"资产 {key} 缺少字段: {upstream}")
                values[name] = _to_float(data[upstream], upstream, key)
            quotes[key] = Quote(**values)
        return quotes

    async def aclose(self) -> None:
        """关闭自行创建的 HTTP 客户端"""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
