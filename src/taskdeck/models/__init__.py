"""taskdeck Domain Models -- 公共类型导出

所有公共模型类型从此入口导入。
"""

from .enums import ALL_CATEGORIES, Category, ChangeType, Priority, ReminderKind
from .event import ReminderEvent, StoreChange
from .task import Task, TaskInput

__all__ = [
    # 枚举
    "Category",
    "Priority",
    "ChangeType",
    "ReminderKind",
    "ALL_CATEGORIES",
    # Task
    "Task",
    "TaskInput",
    # Event
    "StoreChange",
    "ReminderEvent",
]
