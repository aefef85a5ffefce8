"""Task Domain Model

持久化字段名采用 camelCase（dueDate / createdAt / notifiedDueSoon ...），
Python 侧使用 snake_case 属性，两者都可用于构造。
无时区的时间一律按 UTC 解释。
"""

from datetime import UTC, datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .enums import Category, Priority


def _as_utc(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _blank_to_none(value: Any) -> Any:
    # 表单未填写截止时间时提交的是空字符串
    if isinstance(value, str) and not value.strip():
        return None
    return value


class TaskInput(BaseModel):
    """创建/编辑任务时用户可修改的字段

    title 会去除首尾空白；是否为空由 TaskStore 校验。
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str = Field(description="任务标题")
    description: str = Field(default="", description="任务描述")
    category: Category = Field(default=Category.OTHER, description="任务分类")
    priority: Priority = Field(default=Priority.MEDIUM, description="优先级")
    due_date: datetime | None = Field(default=None, description="截止时间")

    @field_validator("title", mode="before")
    @classmethod
    def _strip_title(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("description", mode="before")
    @classmethod
    def _none_description(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("due_date", mode="before")
    @classmethod
    def _blank_due_date(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @field_validator("due_date")
    @classmethod
    def _due_date_utc(cls, value: datetime | None) -> datetime | None:
        return _as_utc(value)


class Task(BaseModel):
    """Task 数据模型

    集合顺序即显示顺序，由 TaskStore 维护。
    notified_due_soon / notified_overdue 单调置位，仅在截止时间被修改时清零。
    旧版数据中的 notified / overdueNotified 字段在读取时映射到新字段。
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(description="唯一标识，ULID 格式，按生成时间有序")
    title: str = Field(description="任务标题")
    description: str = Field(default="", description="任务描述")
    category: Category = Field(default=Category.OTHER, description="任务分类")
    priority: Priority = Field(default=Priority.MEDIUM, description="优先级")
    due_date: datetime | None = Field(default=None, description="截止时间")
    completed: bool = Field(default=False, description="是否已完成")
    created_at: datetime = Field(description="创建时间，不可变")
    notified_due_soon: bool = Field(
        default=False,
        validation_alias=AliasChoices("notifiedDueSoon", "notified_due_soon", "notified"),
        description="是否已发送即将到期提醒",
    )
    notified_overdue: bool = Field(
        default=False,
        validation_alias=AliasChoices(
            "notifiedOverdue", "notified_overdue", "overdueNotified"
        ),
        description="是否已发送逾期提醒",
    )

    @field_validator("description", mode="before")
    @classmethod
    def _none_description(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("due_date", mode="before")
    @classmethod
    def _blank_due_date(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @field_validator("due_date", "created_at")
    @classmethod
    def _datetime_utc(cls, value: datetime | None) -> datetime | None:
        return _as_utc(value)
