"""
Layer 3 – 统计分析层
在价格历史上计算统计指标
"""

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence

import pandas as pd

logger = logging.getLogger(__name__)

_TWO_PLACES = Decimal("0.01")


def round_half_up(value: float, places: Decimal = _TWO_PLACES) -> float:
    """
    十进制四舍五入（0.125 → 0.13）

    以 float 的最短十进制表示为准，避免 round() 的银行家舍入与二进制误差。
    """
    return float(Decimal(repr(value)).quantize(places, rounding=ROUND_HALF_UP))


def population_std(prices: Sequence[float]) -> float:
    """
    总体标准差（除数为 n，而非 n-1）

    Raises:
        ValueError: prices 为空
    """
    if len(prices) == 0:
        raise ValueError("价格序列为空，无法计算标准差")
    series = pd.Series(prices, dtype="float64")
    return float(series.std(ddof=0))


def price_deviation(prices: Sequence[float]) -> float:
    """价格总体标准差，保留两位小数"""
    deviation = round_half_up(population_std(prices))
    logger.debug(f"价格标准差计算完成: n={len(prices)}, deviation={deviation}")
    return deviation
