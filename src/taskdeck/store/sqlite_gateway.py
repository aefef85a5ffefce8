"""PersistenceGateway 的 SQLite 实现

整个任务集合作为一条记录写入 kv_store，写入即提交。
"""

from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path

import aiosqlite
import structlog

from ..exceptions import PersistenceError
from ..models.task import Task
from .codec import decode_tasks, encode_tasks
from .sqlite_init import init_db, verify_wal_mode

log = structlog.get_logger()


class SqlitePersistenceGateway:
    """基于 aiosqlite 的任务集合存储"""

    STORAGE_KEY = "tasks"

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    @classmethod
    async def connect(cls, db_path: str | Path) -> "SqlitePersistenceGateway":
        """打开（必要时创建）数据库并初始化表结构

        Args:
            db_path: SQLite 数据库文件路径

        Raises:
            PersistenceError: 数据库无法打开或初始化
        """
        path = Path(db_path)
        try:
            # 确保数据库目录存在
            path.parent.mkdir(parents=True, exist_ok=True)
            conn = await aiosqlite.connect(str(path))
            await init_db(conn)
            wal = await verify_wal_mode(conn)
        except (OSError, aiosqlite.Error) as e:
            raise PersistenceError(f"无法打开数据库: {path}", e) from e
        if not wal:
            # 内存数据库或只读文件系统上 WAL 不可用，退回默认日志模式
            log.warning("sqlite_wal_unavailable", db_path=str(path))
        return cls(conn)

    @property
    def conn(self) -> aiosqlite.Connection:
        return self._conn

    async def load(self) -> list[Task]:
        try:
            cursor = await self._conn.execute(
                "SELECT value FROM kv_store WHERE key = ?",
                (self.STORAGE_KEY,),
            )
            row = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise PersistenceError("读取任务集合失败", e) from e
        if row is None:
            return []
        return decode_tasks(row[0])

    async def save(self, tasks: Sequence[Task]) -> None:
        blob = encode_tasks(tasks)
        try:
            await self._conn.execute(
                """
                INSERT INTO kv_store (key, value, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE
                SET value = excluded.value, updated_at = excluded.updated_at
                """,
                (self.STORAGE_KEY, blob, datetime.now(UTC).isoformat()),
            )
            await self._conn.commit()
        except aiosqlite.Error as e:
            await self._rollback()
            raise PersistenceError("写入任务集合失败", e) from e
        log.debug("tasks_saved", backend="sqlite", task_count=len(tasks))

    async def close(self) -> None:
        await self._conn.close()

    async def _rollback(self) -> None:
        try:
            await self._conn.rollback()
        except aiosqlite.Error:
            log.warning("sqlite_rollback_failed", exc_info=True)
