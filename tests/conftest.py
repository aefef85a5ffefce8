"""taskdeck 测试配置 -- 时钟、网关与 TaskStore fixture"""

from pathlib import Path

import pytest
import pytest_asyncio
from taskdeck.hub import ChangeHub
from taskdeck.store.task_store import TaskStore

from .fakes import FakeClock, MemoryGateway


@pytest.fixture
def clock() -> FakeClock:
    """固定在 2026-01-01 09:00 UTC 的时钟"""
    return FakeClock()


@pytest.fixture
def gateway() -> MemoryGateway:
    """内存网关"""
    return MemoryGateway()


@pytest.fixture
def hub() -> ChangeHub:
    return ChangeHub()


@pytest_asyncio.fixture
async def store(gateway: MemoryGateway, clock: FakeClock, hub: ChangeHub) -> TaskStore:
    """空集合的 TaskStore"""
    return await TaskStore.open(gateway, clock=clock, hub=hub)


@pytest.fixture
def tmp_db_path(tmp_path: Path) -> Path:
    """临时 SQLite 数据库路径"""
    return tmp_path / "sqlite" / "test.db"
