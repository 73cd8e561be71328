"""
加密货币行情服务配置模块
支持从环境变量及 .env 文件读取配置
"""

from functools import lru_cache
from typing import List

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AssetConfig(BaseModel):
    """单个跟踪资产：CoinGecko 资产 ID + 展示名称"""

    key: str
    name: str


def _default_assets() -> List[AssetConfig]:
    return [
        AssetConfig(key="bitcoin", name="Bitcoin"),
        AssetConfig(key="matic-network", name="Matic"),
        AssetConfig(key="ethereum", name="Ethereum"),
    ]


class CryptoServiceSettings(BaseSettings):
    """行情服务配置"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── 基础配置 ──────────────────────────────────────────
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=3000)
    DEBUG: bool = Field(default=False)
    ALLOWED_ORIGINS: List[str] = Field(
        default_factory=lambda: ["*"]
    )

    # ── 行情数据源（CoinGecko） ───────────────────────────
    COINGECKO_BASE_URL: str = Field(default="https://api.coingecko.com/api/v3")
    COINGECKO_API_KEY: str = Field(default="")
    VS_CURRENCY: str = Field(default="usd")
    FETCH_TIMEOUT: float = Field(default=10.0)     # 单次请求超时（秒）

    # ── 跟踪资产 / 历史窗口 ───────────────────────────────
    ASSETS: List[AssetConfig] = Field(default_factory=_default_assets)
    HISTORY_SIZE: int = Field(default=100, gt=0)

    # ── 定时任务 ──────────────────────────────────────────
    UPDATE_INTERVAL_SECONDS: int = Field(default=7200, gt=0)  # 每 2 小时
    ALIGN_TO_INTERVAL: bool = Field(default=True)   # 对齐整点（等价于 cron 0 */2 * * *）
    FETCH_ON_STARTUP: bool = Field(default=True)
    ON_DEMAND_FETCH: bool = Field(default=True)     # 无数据时由请求触发一次拉取
    SCHEDULER_ENABLED: bool = Field(default=True)

    # ── 日志配置 ──────────────────────────────────────────
    LOG_LEVEL: str = Field(default="INFO")

    @property
    def ASSET_KEYS(self) -> List[str]:
        return [a.key for a in self.ASSETS]


@lru_cache
def get_settings() -> CryptoServiceSettings:
    """获取全局配置（单例）"""
    return CryptoServiceSettings()


settings = get_settings()
