"""ReminderEngine -- 到期提醒状态机

每个 tick 读取 TaskStore 快照，对未完成且设置了截止时间的任务做两项独立检查：
- now < due <= now + window 且未发送过即将到期提醒 -> DUE_SOON
- due < now 且未发送过逾期提醒 -> OVERDUE
先投递事件，再通过 TaskStore.mark_notified 置位标记，保证每次越过阈值只提醒一次。
快照只提供 ID 列表；每项检查都重新读取任务，置位时再核对截止时间，
投递期间用户完成或改期的任务不会被误判或误置位。

除定时器句柄外不持有任何状态。
"""

import asyncio
import contextlib
from datetime import datetime, timedelta

import structlog
from ulid import ULID

from .clock import Clock, SystemClock
from .config import DEFAULT_DUE_SOON_HOURS, DEFAULT_REMINDER_INTERVAL_S
from .exceptions import NotFoundError, PersistenceError
from .models.enums import ReminderKind
from .models.event import ReminderEvent
from .models.task import Task
from .notifier import EventSink
from .store.task_store import TaskStore

log = structlog.get_logger()


class ReminderEngine:
    """周期性扫描任务集合并发出到期提醒"""

    def __init__(
        self,
        store: TaskStore,
        sink: EventSink,
        *,
        clock: Clock | None = None,
        interval_s: float = DEFAULT_REMINDER_INTERVAL_S,
        window: timedelta = timedelta(hours=DEFAULT_DUE_SOON_HOURS),
    ) -> None:
        self._store = store
        self._sink = sink
        self._clock = clock or SystemClock()
        self._interval_s = interval_s
        self._window = window
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def tick(self) -> list[ReminderEvent]:
        """执行一次扫描

        Returns:
            本次发出的提醒事件（按集合顺序）

        Raises:
            Exception: EventSink 投递失败时向上抛出，对应标记不会置位，下次扫描重试
        """
        now = self._clock.now()
        horizon = now + self._window
        emitted: list[ReminderEvent] = []

        for task_id in [t.id for t in self._store.snapshot()]:
            for kind in (ReminderKind.DUE_SOON, ReminderKind.OVERDUE):
                # 每项检查前重新读取：投递期间的完成、改期、删除立即生效
                try:
                    task = self._store.get(task_id)
                except NotFoundError:
                    log.debug("reminder_task_vanished", task_id=task_id)
                    break
                if _is_due(task, kind, now, horizon):
                    emitted.append(await self._fire(kind, task, now))

        if emitted:
            log.info("reminder_tick_emitted", count=len(emitted))
        return emitted

    async def _fire(self, kind: ReminderKind, task: Task, now: datetime) -> ReminderEvent:
        event = ReminderEvent(
            event_id=str(ULID.from_datetime(now)),
            kind=kind,
            task=task,
            ts=now,
        )
        await self._sink.emit(event)
        try:
            await self._store.mark_notified(task.id, kind, expected_due=task.due_date)
        except NotFoundError:
            # 投递期间任务已被删除
            log.debug("reminder_task_vanished", task_id=task.id, kind=kind.value)
        except PersistenceError:
            # 标记已在内存中置位，下次变更时随集合一起写入
            log.warning("reminder_flag_not_persisted", task_id=task.id, kind=kind.value)
        return event

    def start(self) -> None:
        """启动后台扫描（需在运行中的事件循环内调用），立即执行第一次扫描"""
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="taskdeck-reminders")
        log.info("reminder_engine_started", interval_s=self._interval_s)

    async def stop(self) -> None:
        """停止后台扫描并等待其退出"""
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        log.info("reminder_engine_stopped")

    async def _run(self) -> None:
        while True:
            try:
                await self.tick()
            except Exception:
                log.exception("reminder_tick_failed")
            await asyncio.sleep(self._interval_s)


def _is_due(task: Task, kind: ReminderKind, now: datetime, horizon: datetime) -> bool:
    if task.completed or task.due_date is None:
        return False
    if kind == ReminderKind.DUE_SOON:
        return now < task.due_date <= horizon and not task.notified_due_soon
    return task.due_date < now and not task.notified_overdue
