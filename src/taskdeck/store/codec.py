"""任务集合序列化

存储格式为单个 JSON 数组，字段名使用 camelCase，时间为 ISO-8601 字符串，
未设置的 dueDate 直接省略（不写 null）。
"""

from collections.abc import Iterable

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from ..exceptions import PersistenceError
from ..models.task import Task

_TASK_LIST = TypeAdapter(list[Task])


def encode_tasks(tasks: Iterable[Task]) -> str:
    """将任务集合编码为 JSON 字符串"""
    return _TASK_LIST.dump_json(list(tasks), by_alias=True, exclude_none=True).decode("utf-8")


def decode_tasks(blob: str | bytes | None) -> list[Task]:
    """将 JSON 字符串解码为任务集合

    Raises:
        PersistenceError: 数据不是合法的任务数组
    """
    if not blob:
        return []
    try:
        return _TASK_LIST.validate_json(blob)
    except PydanticValidationError as e:
        raise PersistenceError("任务数据无法解析", e) from e
