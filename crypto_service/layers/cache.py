"""
Layer 2 – 内存缓存层
每个资产保存一份最新快照 + 一个定长价格历史（FIFO，最旧的先淘汰）。
进程重启即丢失，不做持久化。
"""

import logging
import threading
from collections import deque
from typing import Deque, Dict, List, Mapping, Optional

from crypto_service.config import AssetConfig
from crypto_service.models.market import Snapshot

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_SIZE = 100


class MarketState:
    """
    进程级行情状态：快照表 + 价格历史表

    写入只有 apply_batch 一个入口（由更新周期调用），读取均返回副本。
    整批写入与每次读取都在同一把锁内完成，读方不会看到新旧数据混杂的状态。
    """

    def __init__(self, assets: List[AssetConfig], history_size: int = DEFAULT_HISTORY_SIZE):
        if history_size <= 0:
            raise ValueError(f"history_size 必须为正数: {history_size}")
        self._assets: Dict[str, AssetConfig] = {a.key: a for a in assets}
        self._history_size = history_size
        self._snapshots: Dict[str, Snapshot] = {}
        self._history: Dict[str, Deque[float]] = {
            key: deque(maxlen=history_size) for key in self._assets
        }
        self._lock = threading.Lock()

    # ── 配置信息 ──────────────────────────────────────────

    @property
    def asset_keys(self) -> List[str]:
        return list(self._assets)

    @property
    def history_size(self) -> int:
        return self._history_size

    def is_configured(self, asset_key: str) -> bool:
        return asset_key in self._assets

    def asset_name(self, asset_key: str) -> str:
        return self._assets[asset_key].name

    # ── 写入 ──────────────────────────────────────────────

    def apply_batch(self, snapshots: Mapping[str, Snapshot]) -> None:
        """
        整批替换快照并追加价格历史

        必须覆盖全部已配置资产；校验在加锁前完成，校验失败时不做任何修改。
        """
        missing = [k for k in self._assets if k not in snapshots]
        unknown = [k for k in snapshots if k not in self._assets]
        if missing or unknown:
            logger.warning(f"拒绝批量更新: 缺少 {missing}，未配置 {unknown}")
            raise ValueError(f"批量更新资产不匹配: 缺少 {missing}，未配置 {unknown}")

        with self._lock:
            for key, snap in snapshots.items():
                self._snapshots[key] = snap
                # deque(maxlen) 在满时自动淘汰最旧的一条
                self._history[key].append(snap.current_price)

    # ── 读取 ──────────────────────────────────────────────

    def snapshots(self) -> Dict[str, Snapshot]:
        with self._lock:
            return {k: self._snapshots[k] for k in self._assets if k in self._snapshots}

    def snapshot(self, asset_key: str) -> Optional[Snapshot]:
        with self._lock:
            return self._snapshots.get(asset_key)

    def history(self, asset_key: str) -> List[float]:
        """返回价格历史副本（最旧在前）；未配置的资产返回空列表"""
        with self._lock:
            return list(self._history.get(asset_key, ()))

    def has_data(self) -> bool:
        with self._lock:
            return bool(self._snapshots)
