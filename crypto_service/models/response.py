"""API 响应模型"""

from pydantic import BaseModel, ConfigDict, Field


class StatsResponse(BaseModel):
    """GET /stats 响应"""

    model_config = ConfigDict(populate_by_name=True)

    price: float
    marketCap: float
    change_24h: float = Field(alias="24hChange")


class DeviationResponse(BaseModel):
    """GET /deviation 响应"""
    deviation: float


class ErrorResponse(BaseModel):
    """4xx / 5xx 错误响应"""
    error: str
