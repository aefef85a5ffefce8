"""Store Protocol 接口定义

PersistenceGateway 只负责整体读写任务集合，不含任何业务逻辑。
使用 Python Protocol 实现结构化子类型（duck typing）。
"""

from collections.abc import Sequence
from typing import Protocol

from ..models.task import Task


class PersistenceGateway(Protocol):
    """任务集合持久化接口

    读写失败均抛出 PersistenceError。
    """

    async def load(self) -> list[Task]:
        """读取任务集合，无历史数据时返回空列表"""
        ...

    async def save(self, tasks: Sequence[Task]) -> None:
        """整体写入任务集合（按集合顺序）"""
        ...

    async def close(self) -> None:
        """释放底层资源"""
        ...
