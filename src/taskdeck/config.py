"""TaskDeckConfig -- 配置加载

从环境变量加载配置：存储后端、数据路径、提醒扫描间隔与即将到期窗口。

环境变量:
    TASKDECK_DATA_DIR: 数据基础目录（默认 data）
    TASKDECK_STORAGE: 存储后端 sqlite / json（默认 sqlite）
    TASKDECK_DB_PATH: SQLite 数据库路径（默认 <data>/sqlite/taskdeck.db）
    TASKDECK_JSON_PATH: JSON 文件路径（默认 <data>/tasks.json）
    TASKDECK_REMINDER_INTERVAL_S: 提醒扫描间隔（秒，默认 60）
    TASKDECK_DUE_SOON_HOURS: 即将到期窗口（小时，默认 24）
"""

import os
from datetime import timedelta
from pathlib import Path
from typing import Literal

import structlog
from pydantic import BaseModel, Field

log = structlog.get_logger()

DEFAULT_REMINDER_INTERVAL_S: int = 60
DEFAULT_DUE_SOON_HOURS: int = 24


class TaskDeckConfig(BaseModel):
    """taskdeck 配置"""

    data_dir: Path = Field(default=Path("data"), description="数据基础目录")
    storage: Literal["sqlite", "json"] = Field(
        default="sqlite",
        description="存储后端：sqlite / json",
    )
    db_path: Path | None = Field(default=None, description="SQLite 数据库路径")
    json_path: Path | None = Field(default=None, description="JSON 文件路径")
    reminder_interval_s: int = Field(
        default=DEFAULT_REMINDER_INTERVAL_S,
        ge=1,
        description="提醒扫描间隔（秒）",
    )
    due_soon_hours: int = Field(
        default=DEFAULT_DUE_SOON_HOURS,
        ge=1,
        description="即将到期窗口（小时）",
    )

    def get_db_path(self) -> Path:
        """获取 SQLite 数据库路径"""
        return self.db_path or self.data_dir / "sqlite" / "taskdeck.db"

    def get_json_path(self) -> Path:
        """获取 JSON 存储文件路径"""
        return self.json_path or self.data_dir / "tasks.json"

    @property
    def due_soon_window(self) -> timedelta:
        return timedelta(hours=self.due_soon_hours)


def _read_int(env_var: str, fallback: int) -> int | None:
    """读取整数环境变量；未设置返回 None，非法值记录告警并返回 fallback"""
    val = os.environ.get(env_var)
    if not val:
        return None
    try:
        parsed = int(val)
    except ValueError:
        parsed = 0
    if parsed < 1:
        log.warning(
            "invalid_int_config",
            env_var=env_var,
            value=val,
            fallback=fallback,
        )
        # 使用默认值，不阻塞启动
        return fallback
    return parsed


def load_config() -> TaskDeckConfig:
    """从环境变量加载配置

    Returns:
        TaskDeckConfig 实例
    """
    kwargs: dict = {}

    if val := os.environ.get("TASKDECK_DATA_DIR"):
        kwargs["data_dir"] = Path(val)

    if val := os.environ.get("TASKDECK_STORAGE"):
        kwargs["storage"] = val.strip().lower()

    if val := os.environ.get("TASKDECK_DB_PATH"):
        kwargs["db_path"] = Path(val)

    if val := os.environ.get("TASKDECK_JSON_PATH"):
        kwargs["json_path"] = Path(val)

    interval = _read_int("TASKDECK_REMINDER_INTERVAL_S", DEFAULT_REMINDER_INTERVAL_S)
    if interval is not None:
        kwargs["reminder_interval_s"] = interval

    hours = _read_int("TASKDECK_DUE_SOON_HOURS", DEFAULT_DUE_SOON_HOURS)
    if hours is not None:
        kwargs["due_soon_hours"] = hours

    return TaskDeckConfig(**kwargs)
