"""
定时调度器
按固定间隔触发行情更新周期（默认每 2 小时，对齐整点，等价于 cron `0 */2 * * *`）。
无抖动、无退避、不跳过正在执行的周期；失败由下一次触发自然重试。
"""

import asyncio
import logging
import time
from typing import Callable, Optional, Set

from crypto_service.services.update_service import UpdateService

logger = logging.getLogger(__name__)


def seconds_until_next_tick(now: float, interval: float, align: bool = True) -> float:
    """
    距离下一次触发的秒数

    align=True 时触发点为 Unix 纪元起 interval 的整数倍（UTC），
    否则固定等待一个完整间隔。
    """
    if not align:
        return interval
    remainder = now % interval
    return interval - remainder


class UpdateScheduler:
    """行情更新定时器"""

    def __init__(
        self,
        update_service: UpdateService,
        interval_seconds: float,
        align_to_interval: bool = True,
        clock: Callable[[], float] = time.time,
    ):
        if interval_seconds <= 0:
            raise ValueError(f"interval_seconds 必须为正数: {interval_seconds}")
        self._update = update_service
        self._interval = interval_seconds
        self._align = align_to_interval
        self._clock = clock
        self._loop_task: Optional[asyncio.Task] = None
        self._runs: Set[asyncio.Task] = set()
        self._on_demand: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._loop_task is not None and not self._loop_task.done()

    @property
    def pending_update(self) -> Optional[asyncio.Task]:
        """进行中的按需更新任务（没有则为 None）"""
        if self._on_demand is not None and not self._on_demand.done():
            return self._on_demand
        return None

    def trigger(self) -> asyncio.Task:
        """立即触发一次更新（不阻塞调用方）"""
        task = asyncio.create_task(self._update.run_update())
        self._runs.add(task)
        task.add_done_callback(self._runs.discard)
        return task

    def request_update(self) -> asyncio.Task:
        """按需触发更新；同一时刻最多一个按需更新在执行，重复请求复用该任务"""
        pending = self.pending_update
        if pending is not None:
            return pending
        logger.info("按需触发：拉取加密货币行情")
        self._on_demand = self.trigger()
        return self._on_demand

    def _next_target(self, target: float, now: float) -> float:
        # 从上一个目标时间推进；墙钟大幅跳跃时按当前时间重新对齐
        target += self._interval
        if target <= now:
            target = now + seconds_until_next_tick(now, self._interval, self._align)
        return target

    async def _run_forever(self) -> None:
        now = self._clock()
        target = now + seconds_until_next_tick(now, self._interval, self._align)
        while True:
            delay = target - self._clock()
            if delay > 0:
                # asyncio.sleep 基于单调时钟，可能早于墙钟目标醒来，需补足剩余时间
                logger.debug(f"下一次行情更新将在 {delay:.0f} 秒后执行")
                await asyncio.sleep(delay)
                continue
            logger.info("⏰ 定时任务触发：拉取加密货币行情")
            self.trigger()
            target = self._next_target(target, self._clock())

    def start(self) -> None:
        if self.running:
            return
        self._loop_task = asyncio.create_task(self._run_forever())
        logger.info(f"定时调度器已启动，间隔 {self._interval:.0f} 秒")

    async def stop(self) -> None:
        """停止调度循环并取消进行中的更新（仅在关闭时调用）"""
        tasks = list(self._runs)
        if self._loop_task is not None:
            tasks.append(self._loop_task)
            self._loop_task = None
        for task in tasks:
            task.cancel()
        for task in tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._runs.clear()
        self._on_demand = None
        logger.info("定时调度器已停止")
