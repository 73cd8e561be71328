"""
加密货币行情服务
定时拉取 CoinGecko 报价，在内存中缓存最新快照与滚动价格历史，并提供 HTTP 查询接口

架构分层：
  数据获取层 (Acquisition)  → 从 CoinGecko 拉取报价
  缓存层     (Cache)        → 最新快照 + 定长价格历史（纯内存）
  分析层     (Analysis)     → 价格标准差等统计
"""

__version__ = "1.0.0"
