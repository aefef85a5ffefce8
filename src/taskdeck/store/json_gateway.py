"""PersistenceGateway 的 JSON 文件实现

任务集合写入单个 JSON 文件；先写临时文件再原子替换，避免写到一半的文件。
"""

from collections.abc import Sequence
from pathlib import Path

import structlog

from ..exceptions import PersistenceError
from ..models.task import Task
from .codec import decode_tasks, encode_tasks

log = structlog.get_logger()


class JsonFilePersistenceGateway:
    """基于本地 JSON 文件的任务集合存储"""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    async def load(self) -> list[Task]:
        if not self._path.exists():
            return []
        try:
            blob = self._path.read_text(encoding="utf-8")
        except OSError as e:
            raise PersistenceError(f"读取任务文件失败: {self._path}", e) from e
        return decode_tasks(blob)

    async def save(self, tasks: Sequence[Task]) -> None:
        blob = encode_tasks(tasks)
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(blob, encoding="utf-8")
            tmp_path.replace(self._path)
        except OSError as e:
            raise PersistenceError(f"写入任务文件失败: {self._path}", e) from e
        log.debug("tasks_saved", backend="json", path=str(self._path), task_count=len(tasks))

    async def close(self) -> None:
        """文件存储无常驻资源"""
        return
