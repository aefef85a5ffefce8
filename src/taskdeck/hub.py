"""ChangeHub -- 内存中的存储变更广播器

每个订阅者持有一个 asyncio.Queue，支持 subscribe/unsubscribe/broadcast。
渲染层订阅变更后自行重新计算视图，TaskStore 不直接调用渲染逻辑。
"""

import asyncio

import structlog

from .models.event import StoreChange

log = structlog.get_logger()


class ChangeHub:
    """存储变更广播器 -- 基于 asyncio.Queue 的发布/订阅模式"""

    def __init__(self, queue_maxsize: int = 100) -> None:
        self._subscribers: set[asyncio.Queue] = set()
        self._queue_maxsize = queue_maxsize

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self) -> asyncio.Queue:
        """订阅变更流

        Returns:
            asyncio.Queue 实例，新的 StoreChange 会被推送到此队列
        """
        queue: asyncio.Queue = asyncio.Queue(maxsize=self._queue_maxsize)
        self._subscribers.add(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue) -> None:
        """取消订阅"""
        self._subscribers.discard(queue)

    async def broadcast(self, change: StoreChange) -> None:
        """向所有订阅者广播变更

        队列已满的订阅者视为失效并被移除。
        """
        dead_queues = []
        for queue in self._subscribers:
            try:
                queue.put_nowait(change)
            except asyncio.QueueFull:
                dead_queues.append(queue)

        for q in dead_queues:
            self._subscribers.discard(q)
        if dead_queues:
            log.warning("change_subscribers_dropped", count=len(dead_queues))
