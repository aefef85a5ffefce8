"""taskdeck Store -- 任务集合与持久化

提供工厂函数按配置创建 PersistenceGateway。
"""

from ..config import TaskDeckConfig
from .codec import decode_tasks, encode_tasks
from .json_gateway import JsonFilePersistenceGateway
from .protocols import PersistenceGateway
from .sqlite_gateway import SqlitePersistenceGateway
from .sqlite_init import init_db
from .task_store import TaskStore


async def create_gateway(config: TaskDeckConfig) -> PersistenceGateway:
    """按配置创建持久化网关

    Args:
        config: taskdeck 配置

    Returns:
        SQLite 或 JSON 文件网关
    """
    if config.storage == "json":
        return JsonFilePersistenceGateway(config.get_json_path())
    return await SqlitePersistenceGateway.connect(config.get_db_path())


__all__ = [
    "PersistenceGateway",
    "SqlitePersistenceGateway",
    "JsonFilePersistenceGateway",
    "TaskStore",
    "create_gateway",
    "encode_tasks",
    "decode_tasks",
    "init_db",
]
