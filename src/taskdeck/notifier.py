"""提醒投递

EventSink 接收 ReminderEngine 发出的提醒事件，负责实际投递。
LogNotifier 将提醒写入日志；CollectingSink 将提醒保存在内存中（应用内横幅、测试）。
"""

from typing import Protocol

import structlog

from .models.enums import ReminderKind
from .models.event import ReminderEvent

log = structlog.get_logger()


class EventSink(Protocol):
    """提醒事件接收方"""

    async def emit(self, event: ReminderEvent) -> None:
        """投递一条提醒"""
        ...


def format_reminder(event: ReminderEvent) -> str:
    """生成面向用户的提醒文本"""
    if event.kind == ReminderKind.DUE_SOON:
        return f'Reminder: "{event.task.title}" is due soon!'
    return f'"{event.task.title}" is overdue!'


class LogNotifier:
    """将提醒写入 structlog 日志"""

    async def emit(self, event: ReminderEvent) -> None:
        message = format_reminder(event)
        if event.kind == ReminderKind.OVERDUE:
            await log.aerror("task_overdue", task_id=event.task.id, message=message)
        else:
            await log.awarning("task_due_soon", task_id=event.task.id, message=message)


class CollectingSink:
    """按顺序收集提醒事件"""

    def __init__(self) -> None:
        self.events: list[ReminderEvent] = []

    async def emit(self, event: ReminderEvent) -> None:
        self.events.append(event)

    def drain(self) -> list[ReminderEvent]:
        """取出并清空已收集的事件"""
        events, self.events = self.events, []
        return events
