"""taskdeck 异常体系

所有异常均可由调用方恢复：
- ValidationError: 输入不合法（如标题为空），提示用户重新输入
- NotFoundError: 引用的任务 ID 已不存在，通常源于过期的界面快照
- PersistenceError: 读写存储失败，内存中的变更保留，下次变更时重新写入
"""


class TaskDeckError(Exception):
    """taskdeck 基础异常"""

    def __init__(self, message: str, recoverable: bool = True) -> None:
        """
        Args:
            message: 错误描述
            recoverable: 调用方是否可通过刷新或重试恢复
        """
        super().__init__(message)
        self.recoverable = recoverable


class ValidationError(TaskDeckError):
    """任务输入校验失败"""

    def __init__(self, message: str, field: str | None = None) -> None:
        """
        Args:
            message: 错误描述
            field: 出错的字段名（可选）
        """
        super().__init__(message, recoverable=True)
        self.field = field


class NotFoundError(TaskDeckError):
    """任务 ID 不在集合中"""

    def __init__(self, task_id: str) -> None:
        super().__init__(f"任务不存在: {task_id}", recoverable=True)
        self.task_id = task_id


class PersistenceError(TaskDeckError):
    """任务集合读写失败

    写入失败时内存状态已经变更，TaskStore 保留该变更并标记为 dirty。
    """

    def __init__(self, message: str, original_error: Exception | None = None) -> None:
        """
        Args:
            message: 错误描述
            original_error: 原始异常
        """
        if original_error is not None:
            message = f"{message} -- {original_error}"
        super().__init__(message, recoverable=True)
        self.original_error = original_error
