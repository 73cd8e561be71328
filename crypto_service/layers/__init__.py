"""
数据流分层架构
  Layer 1 – Acquisition  : 行情获取（CoinGecko simple/price）
  Layer 2 – Cache        : 内存缓存（最新快照 + 定长价格历史）
  Layer 3 – Analysis     : 统计计算（总体标准差）
"""
