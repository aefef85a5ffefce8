"""TaskStore -- 有序任务集合及其变更操作

集合顺序即显示顺序：新任务插入到最前面，其余顺序只通过 reorder 改变。
每次变更都会在返回前整体持久化，并向 ChangeHub 广播 StoreChange。

写入失败策略：保留内存中的变更，标记 dirty，记录告警并抛出 PersistenceError；
下一次变更（或 flush()）会重新写入整个集合。
"""

import asyncio
from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import Any

import structlog
from pydantic import ValidationError as PydanticValidationError
from ulid import ULID

from ..clock import Clock, SystemClock
from ..exceptions import NotFoundError, PersistenceError, ValidationError
from ..hub import ChangeHub
from ..models.enums import ChangeType, ReminderKind
from ..models.event import StoreChange
from ..models.task import Task, TaskInput
from .protocols import PersistenceGateway

log = structlog.get_logger()

_EDITABLE_FIELDS = ("title", "description", "category", "priority", "due_date")


class TaskStore:
    """任务集合的唯一所有者

    所有变更通过 asyncio.Lock 串行执行，提醒扫描不会观察到半完成的变更。
    对外只暴露副本（snapshot / get），调用方修改副本不影响集合。
    """

    def __init__(
        self,
        gateway: PersistenceGateway,
        tasks: Sequence[Task] = (),
        *,
        clock: Clock | None = None,
        hub: ChangeHub | None = None,
    ) -> None:
        self._gateway = gateway
        self._tasks: list[Task] = list(tasks)
        self._clock = clock or SystemClock()
        self._hub = hub
        self._lock = asyncio.Lock()
        self._dirty = False
        self._last_id: ULID | None = None

    @classmethod
    async def open(
        cls,
        gateway: PersistenceGateway,
        *,
        clock: Clock | None = None,
        hub: ChangeHub | None = None,
    ) -> "TaskStore":
        """从持久化存储加载集合并创建 TaskStore

        Raises:
            PersistenceError: 读取失败或数据无法解析
        """
        tasks = await gateway.load()
        log.info("task_store_opened", task_count=len(tasks))
        return cls(gateway, tasks, clock=clock, hub=hub)

    @property
    def dirty(self) -> bool:
        """最近一次写入是否失败（内存状态尚未落盘）"""
        return self._dirty

    def __len__(self) -> int:
        return len(self._tasks)

    # ---- 查询 ----

    def snapshot(self) -> tuple[Task, ...]:
        """返回当前集合的只读快照（按集合顺序的副本）"""
        return tuple(task.model_copy() for task in self._tasks)

    def get(self, task_id: str) -> Task:
        """根据 ID 获取任务副本

        Raises:
            NotFoundError: 任务不存在
        """
        return self._tasks[self._require_index(task_id)].model_copy()

    # ---- 变更 ----

    async def create(self, data: TaskInput | Mapping[str, Any]) -> Task:
        """创建任务并插入到集合最前面

        Raises:
            ValidationError: 标题为空或字段不合法
            PersistenceError: 写入失败（任务已加入内存集合）
        """
        task_input = self._coerce_input(data)
        async with self._lock:
            now = self._clock.now()
            task = Task(
                id=self._new_id(),
                title=task_input.title,
                description=task_input.description,
                category=task_input.category,
                priority=task_input.priority,
                due_date=task_input.due_date,
                created_at=now,
            )
            self._tasks.insert(0, task)
            log.info("task_created", task_id=task.id, category=task.category.value)
            await self._commit(ChangeType.CREATED, task.id)
        return task.model_copy()

    async def update(self, task_id: str, data: TaskInput | Mapping[str, Any]) -> Task:
        """替换任务的可编辑字段，位置、完成状态和创建时间保持不变

        截止时间发生变化时，两个提醒标记同时清零。

        Raises:
            NotFoundError: 任务不存在
            ValidationError: 标题为空或字段不合法
        """
        task_input = self._coerce_input(data)
        async with self._lock:
            index = self._require_index(task_id)
            current = self._tasks[index]
            changes: dict[str, Any] = {
                name: getattr(task_input, name) for name in _EDITABLE_FIELDS
            }
            due_date_changed = task_input.due_date != current.due_date
            if due_date_changed:
                changes["notified_due_soon"] = False
                changes["notified_overdue"] = False
            updated = current.model_copy(update=changes)
            self._tasks[index] = updated
            log.info(
                "task_updated",
                task_id=task_id,
                due_date_changed=due_date_changed,
            )
            await self._commit(ChangeType.UPDATED, task_id)
        return updated.model_copy()

    async def delete(self, task_id: str) -> None:
        """删除任务

        Raises:
            NotFoundError: 任务不存在（包括重复删除）
        """
        async with self._lock:
            index = self._require_index(task_id)
            del self._tasks[index]
            log.info("task_deleted", task_id=task_id)
            await self._commit(ChangeType.DELETED, task_id)

    async def toggle_complete(self, task_id: str) -> Task:
        """切换完成状态

        Raises:
            NotFoundError: 任务不存在
        """
        async with self._lock:
            index = self._require_index(task_id)
            task = self._tasks[index]
            updated = task.model_copy(update={"completed": not task.completed})
            self._tasks[index] = updated
            log.info("task_toggled", task_id=task_id, completed=updated.completed)
            await self._commit(ChangeType.TOGGLED, task_id)
        return updated.model_copy()

    async def reorder(self, source_id: str, target_id: str) -> bool:
        """将 source 任务移到 target 任务当前所在的位置

        先移除 source，再插入到 target 原来的下标：
        source 在前时，中间的任务前移一位；source 在后时，中间的任务后移一位。
        这是位置移动而不是交换。

        ID 相同或任一 ID 不存在时静默忽略（拖拽手势不报错）。

        Returns:
            True 如果集合顺序发生了变化
        """
        if source_id == target_id:
            return False
        async with self._lock:
            source_index = self._index_of(source_id)
            target_index = self._index_of(target_id)
            if source_index == -1 or target_index == -1:
                log.debug(
                    "task_reorder_ignored",
                    source_id=source_id,
                    target_id=target_id,
                )
                return False
            task = self._tasks.pop(source_index)
            self._tasks.insert(target_index, task)
            log.info(
                "task_reordered",
                task_id=source_id,
                from_index=source_index,
                to_index=target_index,
            )
            await self._commit(ChangeType.REORDERED, source_id)
        return True

    async def mark_notified(
        self,
        task_id: str,
        kind: ReminderKind,
        expected_due: datetime | None = None,
    ) -> bool:
        """置位提醒标记，仅供 ReminderEngine 调用

        Args:
            expected_due: 提醒所依据的截止时间；给出时，若任务已完成或截止时间
                已被修改则不置位（提醒已过时）

        Returns:
            True 如果标记已置位

        Raises:
            NotFoundError: 任务已被删除
        """
        field = "notified_due_soon" if kind == ReminderKind.DUE_SOON else "notified_overdue"
        async with self._lock:
            index = self._require_index(task_id)
            current = self._tasks[index]
            if expected_due is not None and (
                current.completed or current.due_date != expected_due
            ):
                log.debug("reminder_flag_stale", task_id=task_id, kind=kind.value)
                return False
            self._tasks[index] = current.model_copy(update={field: True})
            await self._commit(ChangeType.NOTIFIED, task_id)
        return True

    async def flush(self) -> None:
        """重新写入整个集合（用于 PersistenceError 之后的手动重试）"""
        async with self._lock:
            await self._save()

    # ---- 内部 ----

    async def _commit(self, change_type: ChangeType, task_id: str | None) -> None:
        """持久化集合并广播变更（调用方须持有锁）

        即使写入失败也会广播，因为内存中的变更已经生效。
        """
        change = StoreChange(
            type=change_type,
            task_id=task_id,
            ts=self._clock.now(),
            tasks=self.snapshot(),
        )
        try:
            await self._save()
        finally:
            if self._hub is not None:
                await self._hub.broadcast(change)

    async def _save(self) -> None:
        try:
            await self._gateway.save(list(self._tasks))
        except Exception as e:
            self._dirty = True
            await log.awarning(
                "task_persist_failed",
                task_count=len(self._tasks),
                error_type=type(e).__name__,
            )
            if isinstance(e, PersistenceError):
                raise
            raise PersistenceError("任务集合保存失败", e) from e
        self._dirty = False

    def _index_of(self, task_id: str) -> int:
        for index, task in enumerate(self._tasks):
            if task.id == task_id:
                return index
        return -1

    def _require_index(self, task_id: str) -> int:
        index = self._index_of(task_id)
        if index == -1:
            raise NotFoundError(task_id)
        return index

    def _new_id(self) -> str:
        """生成严格递增的 ULID

        同一毫秒内（或时钟回拨时）在上一个 ID 的基础上加一，ID 顺序即生成顺序。
        """
        existing = {task.id for task in self._tasks}
        while True:
            candidate = ULID.from_datetime(self._clock.now())
            if self._last_id is not None and int(candidate) <= int(self._last_id):
                candidate = ULID.from_int(int(self._last_id) + 1)
            self._last_id = candidate
            if str(candidate) not in existing:
                return str(candidate)

    @staticmethod
    def _coerce_input(data: TaskInput | Mapping[str, Any]) -> TaskInput:
        if isinstance(data, TaskInput):
            task_input = data
        else:
            try:
                task_input = TaskInput.model_validate(dict(data))
            except PydanticValidationError as e:
                first = e.errors()[0]
                field = ".".join(str(part) for part in first.get("loc", ()))
                raise ValidationError(f"任务字段不合法: {first.get('msg', '')}", field) from e
        if not task_input.title:
            raise ValidationError("任务标题不能为空", "title")
        return task_input
