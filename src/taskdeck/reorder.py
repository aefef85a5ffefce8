"""ReorderController -- 拖拽手势到 TaskStore.reorder 的转换

记录正在拖动的任务和当前悬停的目标（用于高亮），
放下时若目标不是自身则调用一次 reorder。
"""

from .store.task_store import TaskStore


class ReorderController:
    """拖拽排序控制器"""

    def __init__(self, store: TaskStore) -> None:
        self._store = store
        self._dragged_id: str | None = None
        self._hover_id: str | None = None

    @property
    def dragged_id(self) -> str | None:
        return self._dragged_id

    @property
    def hover_id(self) -> str | None:
        """当前高亮的放置目标"""
        return self._hover_id

    def drag_start(self, task_id: str) -> None:
        self._dragged_id = task_id
        self._hover_id = None

    def drag_enter(self, task_id: str) -> None:
        if self._dragged_id is not None and task_id != self._dragged_id:
            self._hover_id = task_id

    def drag_leave(self, task_id: str) -> None:
        if self._hover_id == task_id:
            self._hover_id = None

    async def drop(self, target_id: str) -> bool:
        """在目标任务上放下

        Returns:
            True 如果集合顺序发生了变化
        """
        source_id = self._dragged_id
        self._hover_id = None
        if source_id is None or source_id == target_id:
            return False
        return await self._store.reorder(source_id, target_id)

    def drag_end(self) -> None:
        """手势结束（无论是否放下），清空状态"""
        self._dragged_id = None
        self._hover_id = None
