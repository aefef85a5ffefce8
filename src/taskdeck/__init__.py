"""taskdeck -- 个人任务清单核心

任务集合与变更、筛选/搜索视图、拖拽排序、到期提醒，以及本地持久化。
"""

from .app import TaskDeck, create_task_deck
from .clock import Clock, SystemClock
from .config import TaskDeckConfig, load_config
from .exceptions import NotFoundError, PersistenceError, TaskDeckError, ValidationError
from .hub import ChangeHub
from .logging_config import setup_logging
from .models import (
    ALL_CATEGORIES,
    Category,
    ChangeType,
    Priority,
    ReminderEvent,
    ReminderKind,
    StoreChange,
    Task,
    TaskInput,
)
from .notifier import CollectingSink, EventSink, LogNotifier
from .projection import TaskStats, TaskView, compute_stats, due_label, is_overdue, project
from .reminder import ReminderEngine
from .reorder import ReorderController
from .store import (
    JsonFilePersistenceGateway,
    PersistenceGateway,
    SqlitePersistenceGateway,
    TaskStore,
)

__all__ = [
    # 装配
    "TaskDeck",
    "create_task_deck",
    "TaskDeckConfig",
    "load_config",
    "Clock",
    "SystemClock",
    "setup_logging",
    # 模型
    "Task",
    "TaskInput",
    "Category",
    "Priority",
    "ChangeType",
    "ReminderKind",
    "ALL_CATEGORIES",
    "StoreChange",
    "ReminderEvent",
    # 存储
    "TaskStore",
    "PersistenceGateway",
    "SqlitePersistenceGateway",
    "JsonFilePersistenceGateway",
    "ChangeHub",
    # 视图
    "project",
    "TaskView",
    "TaskStats",
    "compute_stats",
    "is_overdue",
    "due_label",
    # 提醒与排序
    "ReminderEngine",
    "EventSink",
    "LogNotifier",
    "CollectingSink",
    "ReorderController",
    # 异常
    "TaskDeckError",
    "ValidationError",
    "NotFoundError",
    "PersistenceError",
]
