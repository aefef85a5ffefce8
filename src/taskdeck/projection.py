"""视图投影模块

从任务集合推导出用于显示的筛选+搜索视图，保持原有顺序。
project() 是纯函数；TaskView 只保存当前的筛选条件和搜索词。
另提供统计（总数/已完成/进度百分比）、逾期判断和截止时间标签，供渲染层使用。
"""

from collections.abc import Iterable
from datetime import datetime, timedelta

from pydantic import BaseModel, Field

from .models.enums import ALL_CATEGORIES
from .models.task import Task

# 标签固定使用英文月份缩写，不随 locale 变化
_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def project(
    tasks: Iterable[Task],
    filter_category: str = ALL_CATEGORIES,
    search_query: str = "",
) -> list[Task]:
    """按分类和搜索词筛选任务

    Args:
        tasks: 源任务集合（按集合顺序）
        filter_category: 分类，"all" 表示不筛选
        search_query: 搜索词，对标题和描述做不区分大小写的子串匹配；
            空白搜索词视为不搜索

    Returns:
        同时满足两个条件的任务，保持源集合中的相对顺序；可能为空
    """
    result = list(tasks)

    if filter_category != ALL_CATEGORIES:
        result = [t for t in result if t.category == filter_category]

    query = search_query.strip().casefold()
    if query:
        result = [
            t
            for t in result
            if query in t.title.casefold() or query in t.description.casefold()
        ]

    return result


class TaskView:
    """列表视图状态：当前分类筛选 + 搜索词"""

    def __init__(self, filter_category: str = ALL_CATEGORIES, search_query: str = "") -> None:
        self.filter_category = filter_category
        self.search_query = search_query

    def set_filter(self, category: str) -> None:
        self.filter_category = category

    def set_search(self, query: str) -> None:
        self.search_query = query

    def apply(self, tasks: Iterable[Task]) -> list[Task]:
        """对任务集合应用当前视图条件"""
        return project(tasks, self.filter_category, self.search_query)


class TaskStats(BaseModel):
    """任务统计"""

    total: int = Field(description="任务总数")
    completed: int = Field(description="已完成数")
    progress_percent: int = Field(description="完成百分比（四舍五入）")


def compute_stats(tasks: Iterable[Task]) -> TaskStats:
    """统计任务总数、已完成数和完成进度"""
    items = list(tasks)
    total = len(items)
    completed = sum(1 for t in items if t.completed)
    # 四舍五入（.5 进位）
    progress = (completed * 200 + total) // (total * 2) if total else 0
    return TaskStats(total=total, completed=completed, progress_percent=progress)


def is_overdue(task: Task, now: datetime) -> bool:
    """未完成且截止时间早于 now 的任务视为逾期"""
    return task.due_date is not None and task.due_date < now and not task.completed


def due_label(task: Task, now: datetime) -> str | None:
    """截止时间的显示标签

    按剩余整天数（向下取整）：
    <0 -> "Overdue"，0 -> "Due today"，1 -> "Due tomorrow"，2~6 -> "Due in N days"，
    更远则显示日期（"Jan 5"，跨年时为 "Jan 5, 2027"）。

    Returns:
        标签文本；未设置截止时间时返回 None
    """
    if task.due_date is None:
        return None
    days = (task.due_date - now) // timedelta(days=1)
    if days < 0:
        return "Overdue"
    if days == 0:
        return "Due today"
    if days == 1:
        return "Due tomorrow"
    if days < 7:
        return f"Due in {days} days"
    label = f"{_MONTHS[task.due_date.month - 1]} {task.due_date.day}"
    if task.due_date.year != now.year:
        label += f", {task.due_date.year}"
    return label
