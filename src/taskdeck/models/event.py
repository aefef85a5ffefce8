"""事件模型

StoreChange: TaskStore 每次变更后广播，携带变更后的集合快照。
ReminderEvent: ReminderEngine 发出的到期提醒，由 EventSink 负责投递。
"""

from datetime import datetime

from pydantic import BaseModel, Field

from .enums import ChangeType, ReminderKind
from .task import Task


class StoreChange(BaseModel):
    """任务集合变更通知"""

    type: ChangeType = Field(description="变更类型")
    task_id: str | None = Field(default=None, description="受影响的任务 ID")
    ts: datetime = Field(description="变更时间")
    tasks: tuple[Task, ...] = Field(default=(), description="变更后的集合快照")


class ReminderEvent(BaseModel):
    """到期提醒事件"""

    event_id: str = Field(description="唯一标识，ULID 格式")
    kind: ReminderKind = Field(description="提醒类型")
    task: Task = Field(description="触发提醒时的任务副本")
    ts: datetime = Field(description="触发时间")
