"""枚举定义

包含任务分类 Category、优先级 Priority、存储变更类型 ChangeType、
提醒类型 ReminderKind，以及筛选时表示"全部分类"的 ALL_CATEGORIES 常量。
"""

from enum import StrEnum


class Category(StrEnum):
    """任务分类"""

    WORK = "work"
    PERSONAL = "personal"
    SHOPPING = "shopping"
    HEALTH = "health"
    OTHER = "other"


class Priority(StrEnum):
    """任务优先级"""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# 分类筛选的通配值，不属于 Category 本身
ALL_CATEGORIES: str = "all"


class ChangeType(StrEnum):
    """TaskStore 变更类型，随 StoreChange 广播"""

    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"
    TOGGLED = "toggled"
    REORDERED = "reordered"
    NOTIFIED = "notified"


class ReminderKind(StrEnum):
    """到期提醒类型"""

    DUE_SOON = "due_soon"
    OVERDUE = "overdue"
