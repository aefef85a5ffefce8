"""时钟抽象 -- 注入 now() 能力，便于测试中控制时间"""

from datetime import UTC, datetime
from typing import Protocol


class Clock(Protocol):
    """时钟接口"""

    def now(self) -> datetime:
        """返回当前时间（带时区）"""
        ...


class SystemClock:
    """系统时钟，返回 UTC 当前时间"""

    def now(self) -> datetime:
        return datetime.now(UTC)
