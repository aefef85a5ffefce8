"""应用装配 -- 按配置创建存储、变更广播、提醒引擎和拖拽控制器

典型用法：

    deck = await create_task_deck()
    deck.start()
    ...
    await deck.close()
"""

import structlog

from .clock import Clock, SystemClock
from .config import TaskDeckConfig, load_config
from .hub import ChangeHub
from .notifier import EventSink, LogNotifier
from .reminder import ReminderEngine
from .reorder import ReorderController
from .store import PersistenceGateway, TaskStore, create_gateway

log = structlog.get_logger()


class TaskDeck:
    """组件实例组 -- 共享同一个 TaskStore"""

    def __init__(
        self,
        config: TaskDeckConfig,
        gateway: PersistenceGateway,
        store: TaskStore,
        hub: ChangeHub,
        reminders: ReminderEngine,
    ) -> None:
        self.config = config
        self.gateway = gateway
        self.store = store
        self.hub = hub
        self.reminders = reminders
        self.reorder = ReorderController(store)

    def start(self) -> None:
        """启动提醒扫描"""
        self.reminders.start()

    async def close(self) -> None:
        """停止提醒扫描并释放存储资源"""
        await self.reminders.stop()
        await self.gateway.close()


async def create_task_deck(
    config: TaskDeckConfig | None = None,
    *,
    clock: Clock | None = None,
    sink: EventSink | None = None,
) -> TaskDeck:
    """创建 TaskDeck 实例组

    Args:
        config: 配置，为空时从环境变量加载
        clock: 时钟，默认系统时钟
        sink: 提醒接收方，默认写日志

    Returns:
        已加载任务集合的 TaskDeck（提醒尚未启动）
    """
    config = config or load_config()
    clock = clock or SystemClock()

    gateway = await create_gateway(config)
    hub = ChangeHub()
    try:
        store = await TaskStore.open(gateway, clock=clock, hub=hub)
    except Exception:
        await gateway.close()
        raise

    reminders = ReminderEngine(
        store,
        sink or LogNotifier(),
        clock=clock,
        interval_s=config.reminder_interval_s,
        window=config.due_soon_window,
    )
    log.info(
        "task_deck_ready",
        storage=config.storage,
        task_count=len(store),
    )
    return TaskDeck(config, gateway, store, hub, reminders)
