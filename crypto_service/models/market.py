"""行情数据模型"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class Quote(BaseModel):
    """上游返回的单个资产报价（计价货币原始单位）"""

    model_config = ConfigDict(frozen=True)

    price: float
    market_cap: float
    change_24h: float


class Snapshot(BaseModel):
    """
    单个资产的最新行情快照

    每次成功拉取后整体替换，不做字段级合并。
    字段名与 GET /crypto 的 JSON 输出保持一致。
    """

    model_config = ConfigDict(frozen=True)

    coinId: str
    name: str
    current_price: float
    market_cap: float
    change_24h: float
    updated_at: datetime
